"""Environment-driven settings for the utilization analytics service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_ENV_PREFIX = "BOOKING_ANALYTICS_"


def _env(name: str, default: str) -> str:
    return os.getenv(f"{_ENV_PREFIX}{name}", default)


def _env_int(name: str, default: int) -> int:
    raw = _env(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = _env(name, str(default)).strip()
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


def _parse_statuses(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _parse_hour_window(raw: str) -> Optional[tuple[int, int]]:
    """Parse an ``HH-HH`` window; an empty value means always open."""
    value = raw.strip()
    if not value:
        return None
    parts = value.split("-")
    if len(parts) != 2 or not all(part.strip().isdigit() for part in parts):
        raise ValueError(
            f"{_ENV_PREFIX}OPERATING_HOURS must follow HH-HH format, got {raw!r}"
        )
    start_hour, end_hour = (int(part) for part in parts)
    return start_hour, end_hour


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    default_include_statuses: tuple[str, ...]
    default_operating_hours: Optional[tuple[int, int]]
    heatmap_start_hour: int
    heatmap_end_hour: int
    status_optimal_max: float
    status_busy_max: float
    performance_under_max: float
    performance_optimal_max: float
    performance_busy_max: float
    synthetic_random_seed: int
    synthetic_seed_days: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``cache_clear`` to reload."""
    return Settings(
        app_name=_env("APP_NAME", "Campus Booking Utilization Analytics"),
        app_version=_env("APP_VERSION", "0.1.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        default_include_statuses=_parse_statuses(
            _env("INCLUDE_STATUSES", "completed,confirmed,active,upcoming")
        ),
        default_operating_hours=_parse_hour_window(_env("OPERATING_HOURS", "")),
        heatmap_start_hour=_env_int("HEATMAP_START_HOUR", 8),
        heatmap_end_hour=_env_int("HEATMAP_END_HOUR", 22),
        status_optimal_max=_env_float("STATUS_OPTIMAL_MAX", 60.0),
        status_busy_max=_env_float("STATUS_BUSY_MAX", 85.0),
        performance_under_max=_env_float("PERFORMANCE_UNDER_MAX", 30.0),
        performance_optimal_max=_env_float("PERFORMANCE_OPTIMAL_MAX", 50.0),
        performance_busy_max=_env_float("PERFORMANCE_BUSY_MAX", 80.0),
        synthetic_random_seed=_env_int("SYNTHETIC_RANDOM_SEED", 42),
        synthetic_seed_days=_env_int("SYNTHETIC_SEED_DAYS", 14),
    )
