"""Domain-level validation rules for analytics request options.

The aggregation functions themselves never validate; these checks run at the
service boundary before options reach them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from booking_analytics.domain.models import (
    HeatBand,
    OperatingHours,
    PerformanceThresholds,
    StatusThresholds,
)


def validate_time_range(range_start: datetime, range_end: datetime) -> None:
    if range_end <= range_start:
        raise ValueError("range_end must be after range_start")


def validate_operating_hours(operating_hours: Optional[OperatingHours]) -> None:
    if operating_hours is None:
        return
    if not 0 <= operating_hours.start <= 23:
        raise ValueError("operating_hours.start must be between 0 and 23")
    if not 1 <= operating_hours.end <= 24:
        raise ValueError("operating_hours.end must be between 1 and 24")
    if operating_hours.start >= operating_hours.end:
        raise ValueError("operating_hours.start must be less than operating_hours.end")


def validate_heat_bands(bands: Sequence[HeatBand]) -> None:
    if not bands:
        raise ValueError("bands must contain at least one band")
    for band in bands:
        if not band.label.strip():
            raise ValueError("band label must be non-empty")
        if not 0 <= band.start_hour <= 23:
            raise ValueError(f"band {band.label!r} start_hour must be between 0 and 23")
        if not 1 <= band.end_hour <= 24:
            raise ValueError(f"band {band.label!r} end_hour must be between 1 and 24")
        if band.start_hour >= band.end_hour:
            raise ValueError(f"band {band.label!r} start_hour must be less than end_hour")


def validate_status_thresholds(thresholds: StatusThresholds) -> None:
    if not 0.0 <= thresholds.optimal_max <= 100.0:
        raise ValueError("optimal_max must be between 0 and 100")
    if not 0.0 <= thresholds.busy_max <= 100.0:
        raise ValueError("busy_max must be between 0 and 100")
    if thresholds.optimal_max > thresholds.busy_max:
        raise ValueError("optimal_max must not exceed busy_max")


def validate_performance_thresholds(thresholds: PerformanceThresholds) -> None:
    bounds = (thresholds.under_max, thresholds.optimal_max, thresholds.busy_max)
    if not all(0.0 <= value <= 100.0 for value in bounds):
        raise ValueError("performance thresholds must be between 0 and 100")
    if not thresholds.under_max <= thresholds.optimal_max <= thresholds.busy_max:
        raise ValueError("performance thresholds must be ordered under <= optimal <= busy")
