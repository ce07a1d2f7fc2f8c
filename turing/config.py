"""
Configuration - Environment-driven settings.

All settings have defaults that run a volatile-only server. Set
TURING_DB_PATH to enable the durable SQLite tier.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os

from .dialogue.llm_client import DEFAULT_BASE_URL, DEFAULT_MODEL


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring invalid %s=%r", name, raw)
        return default


@dataclass
class Settings:
    """Runtime settings for the service, HTTP adapter and CLI."""
    db_path: str | None = None
    llm_base_url: str = DEFAULT_BASE_URL
    llm_model: str = DEFAULT_MODEL
    llm_api_key: str | None = None
    llm_timeout: float = 15.0
    max_message_length: int = 1000
    session_ttl: float = 0
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Settings:
        """Read settings from TURING_* environment variables."""
        return cls(
            db_path=os.getenv("TURING_DB_PATH") or None,
            llm_base_url=os.getenv("TURING_LLM_BASE_URL", DEFAULT_BASE_URL),
            llm_model=os.getenv("TURING_LLM_MODEL", DEFAULT_MODEL),
            llm_api_key=os.getenv("TURING_LLM_API_KEY") or os.getenv("GROQ_API_KEY") or None,
            llm_timeout=_env_float("TURING_LLM_TIMEOUT", 15.0),
            max_message_length=int(_env_float("TURING_MAX_MESSAGE_LENGTH", 1000)),
            session_ttl=_env_float("TURING_SESSION_TTL", 0),
            log_level=os.getenv("TURING_LOG_LEVEL", "INFO").upper(),
            allowed_origins=[
                origin.strip()
                for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
                if origin.strip()
            ],
        )


def configure_logging(level: str = "INFO") -> None:
    """Process-wide logging setup; call once from an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
