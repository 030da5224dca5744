"""Centralized application settings.

Every runtime value the reservation client needs is read here once, so the
rest of the code receives an :class:`AppSettings` snapshot through its
constructor instead of calling ``os.getenv`` on its own.
"""

from __future__ import annotations
from tracking import t

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from dotenv import load_dotenv

from . import constants


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Normalize environment strings such as "true"/"1" into booleans."""
    t('infrastructure.settings._to_bool')

    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Optional[str], default: int) -> int:
    t('infrastructure.settings._to_int')

    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Optional[str], default: float) -> float:
    t('infrastructure.settings._to_float')

    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class AppSettings:
    """Immutable snapshot of high-level configuration values."""

    api_base_url: str
    request_timeout_seconds: float
    bulk_request_timeout_seconds: float
    timezone: str
    production_mode: bool
    default_page_limit: int
    user_page_limit: int
    dashboard_page_limit: int
    availability_cache_seconds: int
    states_cache_seconds: int
    reservations_cache_seconds: int
    log_directory: str


def load_settings(env: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Load configuration from the environment and fall back to defaults."""
    t('infrastructure.settings.load_settings')

    if env is None:
        load_dotenv(override=False)
        env = os.environ

    api_base_url = env.get("RESERVATIONS_API_URL", constants.DEFAULT_API_URL).rstrip("/")
    production_mode = _to_bool(env.get("PRODUCTION_MODE", "false"), default=False)
    timezone = env.get("FACILITY_TIMEZONE", constants.DEFAULT_TIMEZONE)

    request_timeout = _to_float(env.get("API_TIMEOUT_SECONDS"), 30.0)
    bulk_timeout = _to_float(env.get("API_BULK_TIMEOUT_SECONDS"), 60.0)

    default_page_limit = _to_int(env.get("DEFAULT_PAGE_LIMIT"), constants.DEFAULT_PAGE_LIMIT)
    user_page_limit = _to_int(env.get("USER_PAGE_LIMIT"), constants.USER_PAGE_LIMIT)
    dashboard_page_limit = _to_int(env.get("DASHBOARD_PAGE_LIMIT"), constants.DASHBOARD_PAGE_LIMIT)

    availability_cache_seconds = _to_int(env.get("AVAILABILITY_CACHE_SECONDS"), 300)
    states_cache_seconds = _to_int(env.get("STATES_CACHE_SECONDS"), 3600)
    reservations_cache_seconds = _to_int(env.get("RESERVATIONS_CACHE_SECONDS"), 60)

    log_directory = env.get("LOG_DIRECTORY", os.path.join("logs", "latest_log"))

    return AppSettings(
        api_base_url=api_base_url,
        request_timeout_seconds=request_timeout,
        bulk_request_timeout_seconds=bulk_timeout,
        timezone=timezone,
        production_mode=production_mode,
        default_page_limit=default_page_limit,
        user_page_limit=user_page_limit,
        dashboard_page_limit=dashboard_page_limit,
        availability_cache_seconds=availability_cache_seconds,
        states_cache_seconds=states_cache_seconds,
        reservations_cache_seconds=reservations_cache_seconds,
        log_directory=log_directory,
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached :class:`AppSettings` instance."""
    t('infrastructure.settings.get_settings')

    return load_settings()
