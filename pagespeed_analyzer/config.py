from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_PORT = 3001
DEFAULT_GROQ_MODEL = "llama-3.1-8b-instant"
PAGESPEED_TIMEOUT_SECONDS = 60.0
GROQ_TIMEOUT_SECONDS = 30.0


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    pagespeed_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    groq_model: str = DEFAULT_GROQ_MODEL
    port: int = DEFAULT_PORT
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def load_settings() -> Settings:
    load_dotenv()

    raw_port = _clean(os.getenv("PORT"))
    try:
        port = int(raw_port) if raw_port else DEFAULT_PORT
    except ValueError as exc:
        raise ValueError(f"PORT must be an integer, got {raw_port!r}") from exc

    return Settings(
        pagespeed_api_key=_clean(os.getenv("PAGESPEED_API_KEY")),
        groq_api_key=_clean(os.getenv("GROQ_API_KEY")),
        groq_model=_clean(os.getenv("GROQ_MODEL")) or DEFAULT_GROQ_MODEL,
        port=port,
        app_env=(_clean(os.getenv("APP_ENV")) or "development").lower(),
        log_level=(_clean(os.getenv("LOG_LEVEL")) or "INFO").upper(),
    )
