from __future__ import annotations
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from esghub.utils.config import AppConfig
from esghub.utils.exception import ConfigError, NetworkError, ServiceError
from esghub.utils.logger import logger

_TRANSIENT = (
    google_exceptions.DeadlineExceeded,
    google_exceptions.ServiceUnavailable,
    google_exceptions.RetryError,
)


class GeminiClient:
    """Structured-analysis transport: one prompt in, one JSON text out. No retries."""

    def __init__(self, config: AppConfig):
        if not config.google_api_key:
            raise ConfigError("GOOGLE_API_KEY not set")
        genai.configure(api_key=config.google_api_key)
        self.config = config
        self.model = genai.GenerativeModel(config.analysis_model)

    def generate(self, prompt: str) -> str:
        try:
            rsp = self.model.generate_content(
                prompt,
                generation_config={
                    "temperature": self.config.temperature,
                    "max_output_tokens": self.config.max_tokens,
                    "response_mime_type": "application/json",
                },
                request_options={"timeout": self.config.request_timeout},
            )
        except _TRANSIENT as e:
            raise NetworkError(f"Gemini request failed: {e}") from e
        except (ConnectionError, TimeoutError) as e:
            raise NetworkError(f"Gemini request failed: {e}") from e
        except google_exceptions.GoogleAPIError as e:
            raise ServiceError(f"Gemini returned an error: {e}") from e
        except Exception as e:  # transport errors from requests / google.auth
            raise NetworkError(f"Gemini request failed: {e}") from e
        try:
            text = rsp.text
        except ValueError as e:  # blocked / empty candidate
            raise ServiceError(f"Gemini returned no usable content: {e}") from e
        if not text or not text.strip():
            raise ServiceError("Gemini returned an empty response.")
        logger.debug("Gemini response received (%d chars)", len(text))
        return text
