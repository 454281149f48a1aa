import pytest
from esghub.utils.config import AppConfig
from esghub.utils.exception import ConfigError


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setattr("esghub.utils.config.load_dotenv", lambda: None)
    monkeypatch.setenv("GOOGLE_API_KEY", "g")
    monkeypatch.setenv("OPENROUTER_API_KEY", "o")
    monkeypatch.setenv("CHAT_CONTEXT_CHARS", "500")
    monkeypatch.setenv("DOCSTORE_URL", "http://store:4000/")
    cfg = AppConfig.from_env()
    assert cfg.google_api_key == "g" and cfg.openrouter_api_key == "o"
    assert cfg.chat_context_chars == 500
    assert cfg.docstore_url == "http://store:4000"
    cfg.require_credentials()


def test_credentials_have_no_defaults(monkeypatch):
    monkeypatch.setattr("esghub.utils.config.load_dotenv", lambda: None)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    cfg = AppConfig.from_env()
    assert cfg.google_api_key is None and cfg.openrouter_api_key is None
    with pytest.raises(ConfigError) as exc:
        cfg.require_credentials()
    assert "GOOGLE_API_KEY" in str(exc.value) and "OPENROUTER_API_KEY" in str(exc.value)
