"""Availability and booking accumulators behind every utilization chart.

``compute_utilization_metrics`` is the single aggregation primitive. It
returns booked and available resource-minutes per bucket key so that each
chart builder only has to shape the result.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Optional, Sequence

from booking_analytics.domain.models import (
    Booking,
    BucketAccumulator,
    BucketKey,
    GroupBy,
    OperatingHours,
    Resource,
    UtilizationOptions,
)
from booking_analytics.domain.time_windows import (
    is_open,
    iter_hour_chunks,
    minutes_between,
    open_minutes_in_range,
    parse_local_timestamp,
    to_local_naive,
    weekday_index,
)
from booking_analytics.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class ClampedBooking:
    """A booking already parsed and clipped to the query range."""

    booking: Booking
    resource: Resource
    raw_start: datetime
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return minutes_between(self.start, self.end)


def utilization_pct(booked_min: float, avail_min: float) -> int:
    """Booked share of available minutes as a whole percentage in ``[0, 100]``."""
    if avail_min <= 0:
        return 0
    return int(min(100, max(0, math.floor(booked_min / avail_min * 100 + 0.5))))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scope_resources(
    resources: Iterable[Resource],
    options: UtilizationOptions,
) -> list[Resource]:
    """Apply the resource-type and availability-status filters."""
    scoped: list[Resource] = []
    for resource in resources:
        if options.resource_type and resource.type != options.resource_type:
            continue
        if (
            options.only_available_resources
            and resource.status
            and resource.status != "available"
        ):
            continue
        scoped.append(resource)
    return scoped


def iter_clamped_bookings(
    bookings: Iterable[Booking],
    resource_by_id: dict[str, Resource],
    range_start: datetime,
    range_end: datetime,
    include_statuses: Sequence[str],
) -> Iterator[ClampedBooking]:
    """Yield in-scope bookings with an allowed status, clamped to the range.

    Bookings with unparseable timestamps, unknown resources, or an empty
    interval after clamping are skipped.
    """
    allowed = set(include_statuses)
    for booking in bookings:
        if booking.status not in allowed:
            continue
        resource = resource_by_id.get(booking.resource_id)
        if resource is None:
            continue

        booking_start = parse_local_timestamp(booking.start_time)
        booking_end = parse_local_timestamp(booking.end_time)
        if booking_start is None or booking_end is None:
            logger.debug(
                "Skipping booking for resource %s with unparseable timestamps (%r, %r)",
                booking.resource_id,
                booking.start_time,
                booking.end_time,
            )
            continue

        start = max(booking_start, range_start)
        end = min(booking_end, range_end)
        if end <= start:
            continue

        yield ClampedBooking(
            booking=booking,
            resource=resource,
            raw_start=booking_start,
            start=start,
            end=end,
        )


def _time_bucket(moment: datetime, group_by: GroupBy) -> int:
    return moment.hour if group_by == "hour" else weekday_index(moment)


def accumulate_availability(
    acc: dict[BucketKey, BucketAccumulator],
    scoped_resources: Sequence[Resource],
    range_start: datetime,
    range_end: datetime,
    group_by: GroupBy,
    operating_hours: Optional[OperatingHours],
) -> None:
    """Add available resource-minutes (the denominator) into ``acc``."""
    if group_by == "type":
        total_range_min = open_minutes_in_range(range_start, range_end, operating_hours)
        for resource in scoped_resources:
            bucket = acc[resource.type]
            bucket.resources_count += 1
            bucket.avail_min += total_range_min * resource.effective_capacity
        return

    total_capacity = sum(resource.effective_capacity for resource in scoped_resources)
    for chunk_start, chunk_end in iter_hour_chunks(range_start, range_end):
        if not is_open(chunk_start.hour, operating_hours):
            continue
        if total_capacity == 0:
            continue
        key = _time_bucket(chunk_start, group_by)
        acc[key].avail_min += minutes_between(chunk_start, chunk_end) * total_capacity


def accumulate_bookings(
    acc: dict[BucketKey, BucketAccumulator],
    clamped_bookings: Iterable[ClampedBooking],
    group_by: GroupBy,
    operating_hours: Optional[OperatingHours],
) -> None:
    """Add booked resource-minutes and booking counts (the numerator) into ``acc``.

    Each booking is counted once, in the bucket of its clamped start. The
    ``type`` path adds the whole clamped duration without operating-hours
    clipping; the hour and weekday paths only add open chunks.
    """
    for item in clamped_bookings:
        if group_by == "type":
            bucket = acc[item.resource.type]
            bucket.bookings += 1
            bucket.booked_min += item.minutes
            continue

        acc[_time_bucket(item.start, group_by)].bookings += 1
        for chunk_start, chunk_end in iter_hour_chunks(item.start, item.end):
            if is_open(chunk_start.hour, operating_hours):
                key = _time_bucket(chunk_start, group_by)
                acc[key].booked_min += minutes_between(chunk_start, chunk_end)


def compute_utilization_metrics(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    group_by: GroupBy,
    options: Optional[UtilizationOptions] = None,
) -> dict[BucketKey, BucketAccumulator]:
    """Booked/available minutes and booking counts grouped by ``group_by``.

    Keys are hours 0..23 for ``"hour"``, weekdays 0..6 (Mon=0) for
    ``"weekday"`` and resource type strings for ``"type"``. Buckets that were
    never touched are absent; callers zero-fill when shaping output.
    """
    opts = options or UtilizationOptions()
    range_start = to_local_naive(range_start)
    range_end = to_local_naive(range_end)

    scoped = scope_resources(resources, opts)
    resource_by_id = {resource.resource_id: resource for resource in scoped}

    acc: dict[BucketKey, BucketAccumulator] = defaultdict(BucketAccumulator)
    accumulate_availability(
        acc,
        scoped,
        range_start,
        range_end,
        group_by,
        opts.operating_hours,
    )
    accumulate_bookings(
        acc,
        iter_clamped_bookings(
            bookings,
            resource_by_id,
            range_start,
            range_end,
            opts.include_statuses,
        ),
        group_by,
        opts.operating_hours,
    )
    return dict(acc)


def booked_open_minutes(
    item: ClampedBooking,
    operating_hours: Optional[OperatingHours],
) -> float:
    """Clamped booking minutes that fall inside operating hours."""
    total = 0.0
    for chunk_start, chunk_end in iter_hour_chunks(item.start, item.end):
        if is_open(chunk_start.hour, operating_hours):
            total += minutes_between(chunk_start, chunk_end)
    return total


def booked_minutes_by_resource(
    bookings: Iterable[Booking],
    scoped_resources: Sequence[Resource],
    range_start: datetime,
    range_end: datetime,
    options: UtilizationOptions,
) -> dict[str, float]:
    """Operating-hours-aware booked minutes per in-scope resource id."""
    resource_by_id = {resource.resource_id: resource for resource in scoped_resources}
    booked = {resource_id: 0.0 for resource_id in resource_by_id}
    for item in iter_clamped_bookings(
        bookings,
        resource_by_id,
        range_start,
        range_end,
        options.include_statuses,
    ):
        booked[item.resource.resource_id] += booked_open_minutes(item, options.operating_hours)
    return booked
