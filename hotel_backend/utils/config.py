"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_str(name: str, default: str) -> str:
    return os.getenv(name, default)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    store_timeout_seconds: float
    availability_max_workers: int
    booking_quota_per_user: int
    booking_enforce_availability: bool
    pagination_default_limit: int
    pagination_max_limit: int
    auth_token_bytes: int
    auth_token_ttl_seconds: float
    admin_email: Optional[str]
    admin_password: Optional[str]
    admin_name: str
    seed_demo_data: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive variants with ``replace``."""
    return Settings(
        app_name=_env_str("HOTEL_APP_NAME", "Hotel Booking API"),
        app_version=_env_str("HOTEL_APP_VERSION", "1.0.0"),
        log_level=_env_str("HOTEL_LOG_LEVEL", "INFO"),
        database_path=Path(_env_str("HOTEL_DATABASE_PATH", "data/hotel_booking.db")),
        store_timeout_seconds=_env_float("HOTEL_STORE_TIMEOUT_SECONDS", 5.0),
        availability_max_workers=_env_int("HOTEL_AVAILABILITY_MAX_WORKERS", 8),
        booking_quota_per_user=_env_int("HOTEL_BOOKING_QUOTA_PER_USER", 3),
        booking_enforce_availability=_env_bool("HOTEL_BOOKING_ENFORCE_AVAILABILITY", True),
        pagination_default_limit=_env_int("HOTEL_PAGINATION_DEFAULT_LIMIT", 25),
        pagination_max_limit=_env_int("HOTEL_PAGINATION_MAX_LIMIT", 100),
        auth_token_bytes=_env_int("HOTEL_AUTH_TOKEN_BYTES", 32),
        auth_token_ttl_seconds=_env_float("HOTEL_AUTH_TOKEN_TTL_SECONDS", 30 * 24 * 60 * 60),
        admin_email=os.getenv("HOTEL_ADMIN_EMAIL") or None,
        admin_password=os.getenv("HOTEL_ADMIN_PASSWORD") or None,
        admin_name=_env_str("HOTEL_ADMIN_NAME", "Administrator"),
        seed_demo_data=_env_bool("HOTEL_SEED_DEMO_DATA", False),
    )
