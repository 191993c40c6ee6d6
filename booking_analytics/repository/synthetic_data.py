"""Deterministic synthetic booking snapshots for demos and environment checks."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any, Optional

from booking_analytics.utils.config import Settings, get_settings
from booking_analytics.utils.logger import get_logger


logger = get_logger(__name__)


_RESOURCES = [
    ("room-a", "Study Room A", "study-room", 4, "available"),
    ("room-b", "Study Room B", "study-room", 6, "available"),
    ("room-c", "Conference Room 1", "conf-room", 12, "available"),
    ("room-d", "Conference Room 2", "conf-room", 10, "maintenance"),
    ("lab-1", "Chemistry Lab", "lab", 20, "available"),
    ("lab-2", "Physics Lab", "lab", None, "available"),
]

_STATUSES = ["completed", "confirmed", "active", "upcoming", "cancelled"]
_STATUS_WEIGHTS = [0.45, 0.25, 0.05, 0.1, 0.15]


def generate_synthetic_snapshot(
    start_day: datetime,
    settings: Optional[Settings] = None,
) -> dict[str, list[dict[str, Any]]]:
    """Raw resource and booking rows as the booking backend would return them.

    Rows deliberately mix field spellings (``startTime``/``start_time``,
    ``_id``/``resource_id``) so they exercise the record adapter.
    """
    resolved = settings or get_settings()
    rng = random.Random(resolved.synthetic_random_seed)
    first_day = start_day.replace(hour=0, minute=0, second=0, microsecond=0)

    resources: list[dict[str, Any]] = []
    for index, (resource_id, name, resource_type, capacity, status) in enumerate(_RESOURCES):
        id_field = "_id" if index % 2 else "resource_id"
        resources.append(
            {
                id_field: resource_id,
                "name": name,
                "type": resource_type,
                "capacity": capacity,
                "status": status,
            }
        )

    bookings: list[dict[str, Any]] = []
    for day_offset in range(resolved.synthetic_seed_days):
        day = first_day + timedelta(days=day_offset)
        per_room = 3 if day.weekday() < 5 else 1
        for resource_id, *_ in _RESOURCES:
            for _ in range(per_room):
                start = day + timedelta(hours=rng.randint(8, 20), minutes=rng.choice([0, 30]))
                end = start + timedelta(minutes=rng.choice([30, 60, 90, 120]))
                status = rng.choices(_STATUSES, weights=_STATUS_WEIGHTS, k=1)[0]
                if rng.random() < 0.5:
                    bookings.append(
                        {
                            "resource_id": resource_id,
                            "start_time": start.strftime("%Y-%m-%d %H:%M:%S"),
                            "end_time": end.strftime("%Y-%m-%d %H:%M:%S"),
                            "status": status,
                        }
                    )
                else:
                    bookings.append(
                        {
                            "resourceId": resource_id,
                            "startTime": start.isoformat() + "Z",
                            "endTime": end.isoformat() + "Z",
                            "status": status,
                        }
                    )

    logger.info(
        "Generated synthetic snapshot: %s resources, %s bookings over %s days",
        len(resources),
        len(bookings),
        resolved.synthetic_seed_days,
    )
    return {"resources": resources, "bookings": bookings}
