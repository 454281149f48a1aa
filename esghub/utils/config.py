from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv
from esghub.utils.exception import ConfigError

DEFAULT_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"


@dataclass(frozen=True)
class AppConfig:
    google_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    analysis_model: str = "gemini-1.5-flash"
    chat_model: str = "deepseek/deepseek-r1-0528:free"
    chat_url: str = DEFAULT_CHAT_URL
    docstore_url: str = "http://localhost:4000"
    pdfjs_viewer_url: Optional[str] = None
    max_tokens: int = 8192
    temperature: float = 0.2
    request_timeout: float = 60.0
    chat_context_chars: int = 12000
    analysis_max_chars: int = 100000  # request size the analysis prompt is clipped to
    locate_settle_seconds: float = 1.0
    locate_reset_seconds: float = 3.0
    viewer_poll_interval: float = 1.0
    viewer_ready_timeout: float = 10.0
    search_words: int = 5
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        load_dotenv()
        return cls(
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
            analysis_model=os.getenv("ANALYSIS_MODEL", "gemini-1.5-flash"),
            chat_model=os.getenv("CHAT_MODEL", "deepseek/deepseek-r1-0528:free"),
            chat_url=os.getenv("CHAT_URL", DEFAULT_CHAT_URL),
            docstore_url=os.getenv("DOCSTORE_URL", "http://localhost:4000").rstrip("/"),
            pdfjs_viewer_url=os.getenv("PDFJS_VIEWER_URL") or None,
            max_tokens=int(os.getenv("MAX_TOKENS", "8192")),
            temperature=float(os.getenv("TEMPERATURE", "0.2")),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
            chat_context_chars=int(os.getenv("CHAT_CONTEXT_CHARS", "12000")),
            analysis_max_chars=int(os.getenv("ANALYSIS_MAX_CHARS", "100000")),
            locate_settle_seconds=float(os.getenv("LOCATE_SETTLE_SECONDS", "1.0")),
            locate_reset_seconds=float(os.getenv("LOCATE_RESET_SECONDS", "3.0")),
            viewer_poll_interval=float(os.getenv("VIEWER_POLL_INTERVAL", "1.0")),
            viewer_ready_timeout=float(os.getenv("VIEWER_READY_TIMEOUT", "10")),
            search_words=int(os.getenv("SEARCH_WORDS", "5")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def require_credentials(self) -> None:
        """Raise ConfigError naming every missing API credential."""
        missing = []
        if not self.google_api_key:
            missing.append("GOOGLE_API_KEY")
        if not self.openrouter_api_key:
            missing.append("OPENROUTER_API_KEY")
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
