from __future__ import annotations
from typing import Dict, List, Optional
import requests
from esghub.utils.config import AppConfig
from esghub.utils.exception import ConfigError, NetworkError, ServiceError
from esghub.utils.logger import logger


class OpenRouterClient:
    """Conversational transport for an OpenAI-style chat completions endpoint."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None):
        if not config.openrouter_api_key:
            raise ConfigError("OPENROUTER_API_KEY not set")
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.openrouter_api_key}",
            "Content-Type": "application/json",
        })

    def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send the whole conversation, return the first choice's content."""
        payload = {"model": self.config.chat_model, "messages": messages}
        try:
            response = self.session.post(self.config.chat_url, json=payload, timeout=self.config.request_timeout)
        except requests.Timeout as e:
            raise NetworkError("The AI service did not respond in time.") from e
        except requests.RequestException as e:
            raise NetworkError(f"Could not reach the AI service: {e}") from e
        if not response.ok:
            logger.warning("Chat completion failed with HTTP %s", response.status_code)
            raise ServiceError(f"Failed to get a response from the AI (HTTP {response.status_code}).")
        try:
            data = response.json()
        except ValueError as e:
            raise ServiceError("The AI service returned a malformed response.") from e
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ServiceError("The AI service returned a response without a message.") from e
        if not isinstance(content, str) or not content.strip():
            raise ServiceError("The AI service returned an empty message.")
        return content
