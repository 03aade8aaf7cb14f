"""Centralized configuration for the maritime tracking backend.

Typed constants for the Asana integration, the auth provider, the SQLite
pool and the notification poller. Environment variable overrides use safe
defaults so the app starts without extra env configuration.
"""

from __future__ import annotations

import os
from pathlib import Path

# --- Paths ---
PACKAGE_ROOT = Path(__file__).parent

# --- App ---
APP_VERSION: str = "1.0.0"
ENV: str = os.getenv("TRACKING_ENV", "development")
DEBUG: bool = ENV == "development"

# --- Asana ---
ASANA_ACCESS_TOKEN_ENV: str = "ASANA_ACCESS_TOKEN"
ASANA_BASE_URL: str = os.getenv("ASANA_BASE_URL", "https://app.asana.com/api/1.0")
ASANA_TIMEOUT_SECONDS: float = float(os.getenv("ASANA_TIMEOUT_SECONDS", "10"))
ASANA_STORIES_TIMEOUT_SECONDS: float = float(os.getenv("ASANA_STORIES_TIMEOUT_SECONDS", "15"))
ASANA_MAX_RETRIES: int = int(os.getenv("ASANA_MAX_RETRIES", "3"))
ASANA_PROJECT_KEYWORD: str = os.getenv("ASANA_PROJECT_KEYWORD", "operacional")
ASANA_PAGE_LIMIT: int = int(os.getenv("ASANA_PAGE_LIMIT", "100"))
ASANA_PLACEHOLDER_TOKEN: str = "your_asana_token_here"

# --- Tracking cache ---
TRACKING_CACHE_TTL_SECONDS: int = int(os.getenv("TRACKING_CACHE_TTL_SECONDS", "300"))

# --- Auth provider (Supabase) ---
SUPABASE_URL_ENV: str = "SUPABASE_URL"
SUPABASE_ANON_KEY_ENV: str = "SUPABASE_ANON_KEY"
TOKEN_CACHE_MAX_SIZE: int = 1000
TOKEN_CACHE_TTL_SECONDS: int = 600

# --- Users ---
MIN_PASSWORD_LENGTH: int = 6
DEFAULT_COMPANY_NAME: str = "EMPRESA_PADRAO"
DEFAULT_COMPANY_DISPLAY_NAME: str = "Empresa Padrão"
DEFAULT_COMPANY_SLUG: str = "empresa-padrao"

# --- Database ---
DB_POOL_SIZE: int = int(os.getenv("TRACKING_DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT: float = float(os.getenv("TRACKING_DB_POOL_TIMEOUT", "5.0"))
DB_CONNECT_TIMEOUT: float = float(os.getenv("TRACKING_DB_CONNECT_TIMEOUT", "30.0"))
DB_TEMP_CONN_MAX: int = int(os.getenv("TRACKING_DB_TEMP_CONN_MAX", "10"))
DB_RETRY_MAX: int = int(os.getenv("TRACKING_DB_RETRY_MAX", "5"))
DB_RETRY_BASE_DELAY: float = float(os.getenv("TRACKING_DB_RETRY_BASE_DELAY", "0.1"))
DB_RETRY_MAX_DELAY: float = float(os.getenv("TRACKING_DB_RETRY_MAX_DELAY", "2.0"))
DB_RETRY_JITTER: float = float(os.getenv("TRACKING_DB_RETRY_JITTER", "0.1"))

# --- Notifications ---
NOTIFICATION_POLLING_INTERVAL_MS: int = 30000
NOTIFICATION_MAX_ITEMS: int = 50
NOTIFICATION_TIMEOUT_MS: int = 5000
NOTIFICATION_LOOKBACK_HOURS: int = 24
NOTIFICATION_MAX_RETRIES: int = 3
NOTIFICATION_RETRY_BASE_DELAY_SECONDS: float = 2.0
NOTIFICATION_ERROR_MESSAGE: str = "Sistema temporariamente indisponível"
NOTIFICATION_READ_STATE_MAX_USERS: int = 10000

# --- Comments ---
COMMENT_SENTINEL: str = "&"
COMMENT_FILTERS: tuple[str, ...] = ("&", "#", "@")

# --- API ---
API_LIST_LIMIT_DEFAULT: int = 100
API_LIST_LIMIT_MAX: int = 500


def is_placeholder(value: str | None) -> bool:
    """Return True for missing, blank or template env values (e.g. "your_key_here")."""
    if value is None:
        return True
    stripped = value.strip()
    if not stripped:
        return True
    return "your_" in stripped or stripped == ASANA_PLACEHOLDER_TOKEN


def get_asana_token() -> str | None:
    """Asana token, read at call time so tests can monkeypatch the env."""
    return os.getenv(ASANA_ACCESS_TOKEN_ENV)


def is_production() -> bool:
    """Check if running in production"""
    return os.getenv("TRACKING_ENV", ENV) == "production"


def get_env_status(keys: list[str] | None = None) -> dict[str, dict[str, bool]]:
    """Report presence and validity of the env vars the service depends on.

    Values themselves are never returned.
    """
    keys = keys or [
        ASANA_ACCESS_TOKEN_ENV,
        SUPABASE_URL_ENV,
        SUPABASE_ANON_KEY_ENV,
        "TRACKING_ADMIN_API_KEY",
    ]
    status: dict[str, dict[str, bool]] = {}
    for key in keys:
        value = os.getenv(key)
        status[key] = {
            "present": value is not None,
            "valid": not is_placeholder(value),
        }
    return status
