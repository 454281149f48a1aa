import pytest
import requests
from google.api_core import exceptions as google_exceptions
from esghub.llm import gemini
from esghub.llm.gemini import GeminiClient
from esghub.utils.config import AppConfig
from esghub.analysis.esg import EsgAnalyzer
from esghub.utils.exception import AnalysisError, ConfigError, NetworkError, ServiceError


class FakeResponse:
    def __init__(self, text=None, error=None):
        self._text = text
        self._error = error

    @property
    def text(self):
        if self._error:
            raise self._error
        return self._text


class FakeModel:
    def __init__(self, name):
        self.name = name
        self.calls = []
        self.outcome = FakeResponse(text='{"ok": true}')

    def generate_content(self, prompt, generation_config=None, request_options=None):
        self.calls.append((prompt, generation_config, request_options))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def fake_genai(monkeypatch):
    configured = {}
    monkeypatch.setattr(gemini.genai, "configure", lambda api_key: configured.setdefault("key", api_key))
    monkeypatch.setattr(gemini.genai, "GenerativeModel", FakeModel)
    return configured


def test_missing_key_fails_fast():
    with pytest.raises(ConfigError):
        GeminiClient(AppConfig(google_api_key=None))


def test_generate_sends_single_json_request(config, fake_genai):
    client = GeminiClient(config)
    assert fake_genai["key"] == "test-google-key"
    assert client.generate("prompt") == '{"ok": true}'
    (prompt, gen_cfg, req_opts), = client.model.calls
    assert gen_cfg["response_mime_type"] == "application/json"
    assert req_opts == {"timeout": config.request_timeout}


def test_timeout_maps_to_network_error(config, fake_genai):
    client = GeminiClient(config)
    client.model.outcome = google_exceptions.DeadlineExceeded("too slow")
    with pytest.raises(NetworkError):
        client.generate("prompt")
    assert len(client.model.calls) == 1


def test_api_error_maps_to_service_error(config, fake_genai):
    client = GeminiClient(config)
    client.model.outcome = google_exceptions.InvalidArgument("prompt too long")
    with pytest.raises(ServiceError):
        client.generate("prompt")


def test_blocked_response_maps_to_service_error(config, fake_genai):
    client = GeminiClient(config)
    client.model.outcome = FakeResponse(error=ValueError("no candidates"))
    with pytest.raises(ServiceError):
        client.generate("prompt")


def test_transport_error_maps_to_network_error(config, fake_genai):
    client = GeminiClient(config)
    client.model.outcome = requests.exceptions.ConnectionError("connection refused")
    with pytest.raises(NetworkError):
        client.generate("prompt")


def test_transport_error_surfaces_as_analysis_error(config, fake_genai):
    client = GeminiClient(config)
    client.model.outcome = requests.exceptions.ConnectionError("connection refused")
    with pytest.raises(AnalysisError) as exc:
        EsgAnalyzer(config, llm=client).analyze("some report text", "d1")
    assert isinstance(exc.value.__cause__, NetworkError)
