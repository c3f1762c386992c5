from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MAX_PLACES = 60


class ConfigError(RuntimeError):
    """Required configuration is missing."""


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r, using default %d", key, raw, default)
        return default


def _env_str(key: str) -> Optional[str]:
    val = (os.getenv(key) or "").strip()
    return val or None


@dataclass(frozen=True)
class Config:
    google_api_key: str
    cache_dir: str
    max_places: int
    language_code: str
    detail_concurrency: int
    http_timeout: int
    log_level: str

    google_sheets_credentials_file: Optional[str]
    google_sheets_client_email: Optional[str]
    google_sheets_private_key: Optional[str]
    google_sheets_spreadsheet_id: Optional[str]


def load_config() -> Config:
    google_api_key = _env_str("GOOGLE_API_KEY")
    if not google_api_key:
        raise ConfigError("GOOGLE_API_KEY is not set in the environment variables.")

    return Config(
        google_api_key=google_api_key,
        cache_dir=os.getenv("CACHE_DIR", "./cache"),
        max_places=max(_env_int("MAX_PLACES", DEFAULT_MAX_PLACES), 1),
        language_code=os.getenv("PLACES_LANGUAGE_CODE", "en"),
        detail_concurrency=max(_env_int("PLACES_DETAIL_CONCURRENCY", 5), 1),
        http_timeout=max(_env_int("HTTP_TIMEOUT", 10), 1),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        google_sheets_credentials_file=_env_str("GOOGLE_SHEETS_CREDENTIALS_FILE"),
        google_sheets_client_email=_env_str("GOOGLE_SHEETS_CLIENT_EMAIL"),
        google_sheets_private_key=_env_str("GOOGLE_SHEETS_PRIVATE_KEY"),
        google_sheets_spreadsheet_id=(
            _env_str("SPREADSHEET_ID") or _env_str("GOOGLE_SHEETS_SPREADSHEET_ID")
        ),
    )
