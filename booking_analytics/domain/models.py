"""Domain models for booking utilization aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Union


GroupBy = Literal["hour", "weekday", "type"]
NameKey = Literal["name", "resource_id"]

# hour 0..23, weekday 0..6 (Mon=0) or resource type
BucketKey = Union[int, str]

DEFAULT_INCLUDE_STATUSES: tuple[str, ...] = ("completed", "confirmed", "active", "upcoming")

Timestamp = Union[str, datetime]


@dataclass(frozen=True)
class Booking:
    resource_id: str
    start_time: Timestamp
    end_time: Timestamp
    status: str


@dataclass(frozen=True)
class Resource:
    resource_id: str
    type: str
    name: str
    status: Optional[str] = None
    capacity: Optional[int] = None

    @property
    def effective_capacity(self) -> int:
        return self.capacity or 1


@dataclass(frozen=True)
class HeatBand:
    """Labelled ``[start_hour, end_hour)`` slice of a day."""

    label: str
    start_hour: int
    end_hour: int


@dataclass(frozen=True)
class OperatingHours:
    """Facility opening window; hours ``[start, end)`` are open."""

    start: int
    end: int


@dataclass(frozen=True)
class UtilizationOptions:
    include_statuses: tuple[str, ...] = DEFAULT_INCLUDE_STATUSES
    only_available_resources: bool = False
    resource_type: Optional[str] = None
    operating_hours: Optional[OperatingHours] = None


@dataclass(frozen=True)
class StatusThresholds:
    """Upper bounds for the optimal and busy buckets of the type distribution."""

    optimal_max: float = 60.0
    busy_max: float = 85.0


@dataclass(frozen=True)
class PerformanceThresholds:
    """Tier boundaries used to classify rooms from their ranking percentage."""

    under_max: float = 30.0
    optimal_max: float = 50.0
    busy_max: float = 80.0


@dataclass
class BucketAccumulator:
    """Per-key running totals for a single aggregation call."""

    booked_min: float = 0.0
    avail_min: float = 0.0
    bookings: int = 0
    resources_count: int = 0


def default_heat_bands(start_hour: int = 8, end_hour: int = 22) -> list[HeatBand]:
    """One-hour bands labelled ``"8-9"``, ``"9-10"`` and so on."""
    return [
        HeatBand(label=f"{hour}-{hour + 1}", start_hour=hour, end_hour=hour + 1)
        for hour in range(start_hour, end_hour)
    ]
