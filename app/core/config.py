from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()  # Load .env file if present


def _get(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def _get_bool(key: str, default: bool = False) -> bool:
    raw = _get(key, "1" if default else "0").strip().lower()
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    APP_NAME: str = _get("APP_NAME", "Movie Catalog")
    APP_ENV: str = _get("APP_ENV", "dev")

    # Hosted movie service
    MOVIES_API_BASE_URL: str = _get("MOVIES_API_BASE_URL", "http://localhost:3000/api")
    MOVIES_API_KEY: str = _get("MOVIES_API_KEY", "")
    MOVIES_API_TIMEOUT: float = float(_get("MOVIES_API_TIMEOUT", "8"))
    MOVIES_API_PROBE_PATH: str = _get("MOVIES_API_PROBE_PATH", "/movies")

    # Connectivity + offline sync
    STATUS_PROBE_INTERVAL_SECONDS: float = float(_get("STATUS_PROBE_INTERVAL_SECONDS", "30"))
    SYNC_ON_RECONNECT: bool = _get_bool("SYNC_ON_RECONNECT", True)
    OFFLINE_DATA_DIR: str = _get("OFFLINE_DATA_DIR", "data")

    # Listing
    MOVIES_PAGE_SIZE: int = int(_get("MOVIES_PAGE_SIZE", "10"))


settings = Settings()
