"""Adapter from loosely shaped backend rows to canonical domain records.

The booking backend returns documents whose field names drift between
collections (``start_time`` vs ``startTime``, ``resource_id`` vs ``_id``).
All of that tolerance lives here so the aggregation code only ever sees
``Booking`` and ``Resource``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from booking_analytics.domain.models import Booking, Resource
from booking_analytics.utils.logger import get_logger


logger = get_logger(__name__)


class RecordNormalizationError(Exception):
    """Raised when a raw row lacks the fields needed for a domain record."""


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_id(value: Any) -> str:
    if isinstance(value, Mapping):
        value = _first(value, "$oid", "id", "_id")
    return "" if value is None else str(value).strip()


def _as_capacity(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        return None
    return capacity if capacity > 0 else None


def normalize_resource(raw: Mapping[str, Any]) -> Resource:
    resource_id = _as_id(_first(raw, "resource_id", "resourceId", "_id", "id"))
    if not resource_id:
        raise RecordNormalizationError("resource row has no identifier")
    name = str(_first(raw, "name", "resource_name", "roomName") or "").strip()
    status = raw.get("status")
    return Resource(
        resource_id=resource_id,
        type=str(_first(raw, "type", "resourceType") or "").strip(),
        name=name or resource_id,
        status=None if status is None else str(status),
        capacity=_as_capacity(raw.get("capacity")),
    )


def _combine_date_time(raw: Mapping[str, Any], *keys: str) -> str:
    value = _first(raw, *keys)
    if value is None:
        return ""
    text = str(value).strip()
    date_part = raw.get("date")
    # rows that store the day separately carry a bare "HH:MM" time
    if date_part and "-" not in text:
        return f"{str(date_part).strip()}T{text}"
    return text


def normalize_booking(raw: Mapping[str, Any]) -> Booking:
    resource_id = _as_id(_first(raw, "resource_id", "resourceId", "resource"))
    if not resource_id:
        raise RecordNormalizationError("booking row has no resource reference")
    return Booking(
        resource_id=resource_id,
        start_time=_combine_date_time(raw, "start_time", "startTime"),
        end_time=_combine_date_time(raw, "end_time", "endTime"),
        status=str(raw.get("status") or "confirmed"),
    )


def normalize_resources(rows: Iterable[Mapping[str, Any]]) -> list[Resource]:
    resources: list[Resource] = []
    for row in rows:
        try:
            resources.append(normalize_resource(row))
        except RecordNormalizationError as exc:
            logger.warning("Dropping resource row: %s", exc)
    return resources


def normalize_bookings(rows: Iterable[Mapping[str, Any]]) -> list[Booking]:
    bookings: list[Booking] = []
    for row in rows:
        try:
            bookings.append(normalize_booking(row))
        except RecordNormalizationError as exc:
            logger.warning("Dropping booking row: %s", exc)
    return bookings
