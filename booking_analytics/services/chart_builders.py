"""Chart-ready builders composed on the utilization accumulators."""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from booking_analytics.domain.models import (
    Booking,
    BucketAccumulator,
    HeatBand,
    Resource,
    StatusThresholds,
    UtilizationOptions,
    default_heat_bands,
)
from booking_analytics.domain.time_windows import (
    at_hour,
    hour_label,
    iter_days,
    open_minutes_in_range,
    overlap_minutes,
    parse_local_timestamp,
    to_local_naive,
    week_labels,
    weekday_index,
)
from booking_analytics.services.utilization_metrics import (
    booked_minutes_by_resource,
    compute_utilization_metrics,
    iter_clamped_bookings,
    round_half_up,
    scope_resources,
    utilization_pct,
)


_EMPTY = BucketAccumulator()


def build_daily_utilization_trend(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
) -> list[dict[str, Any]]:
    """24 points, one per hour of day, labelled on a 12-hour clock."""
    acc = compute_utilization_metrics(bookings, resources, range_start, range_end, "hour", options)
    rows: list[dict[str, Any]] = []
    for hour in range(24):
        bucket = acc.get(hour, _EMPTY)
        rows.append(
            {
                "hour": hour_label(hour),
                "utilization": utilization_pct(bucket.booked_min, bucket.avail_min),
            }
        )
    return rows


def build_weekly_utilization_and_bookings(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
) -> list[dict[str, Any]]:
    """Mon..Sun utilization with the number of bookings starting on each weekday."""
    acc = compute_utilization_metrics(
        bookings, resources, range_start, range_end, "weekday", options
    )
    rows: list[dict[str, Any]] = []
    for index, day in enumerate(week_labels()):
        bucket = acc.get(index, _EMPTY)
        rows.append(
            {
                "day": day,
                "utilization": utilization_pct(bucket.booked_min, bucket.avail_min),
                "bookings": bucket.bookings,
            }
        )
    return rows


def build_utilization_status_by_type(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
    thresholds: Optional[StatusThresholds] = None,
) -> list[dict[str, Any]]:
    """Share of resources per type that are optimal, busy or over-utilized.

    Each resource is classified from its own unrounded, clamped utilization
    against the operating-hours-aware range length, so 60.3% is already past
    an ``optimal_max`` of 60. ``over_utilized`` is the remainder so
    the three shares of a row always add up to exactly 100.
    """
    opts = options or UtilizationOptions()
    limits = thresholds or StatusThresholds()
    range_start = to_local_naive(range_start)
    range_end = to_local_naive(range_end)

    scoped = scope_resources(resources, opts)
    total_range_min = open_minutes_in_range(range_start, range_end, opts.operating_hours)
    booked = booked_minutes_by_resource(bookings, scoped, range_start, range_end, opts)

    counts: dict[str, Counter[str]] = {}
    for resource in scoped:
        pct = (
            min(100.0, max(0.0, booked[resource.resource_id] / total_range_min * 100))
            if total_range_min > 0
            else 0.0
        )
        if pct > limits.busy_max:
            tier = "over"
        elif pct > limits.optimal_max:
            tier = "busy"
        else:
            tier = "optimal"
        type_counts = counts.setdefault(resource.type, Counter())
        type_counts["total"] += 1
        type_counts[tier] += 1

    rows: list[dict[str, Any]] = []
    for resource_type in sorted(counts):
        type_counts = counts[resource_type]
        total = type_counts["total"] or 1
        optimal = round_half_up(type_counts["optimal"] / total * 100)
        busy = round_half_up(type_counts["busy"] / total * 100)
        over = min(100, max(0, 100 - optimal - busy))
        rows.append(
            {
                "type": resource_type,
                "optimal": optimal,
                "busy": busy,
                "over_utilized": over,
            }
        )
    return rows


def build_weekly_usage_heatmap(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
    bands: Optional[Sequence[HeatBand]] = None,
) -> dict[str, Any]:
    """Weekday x time-band utilization matrix.

    Availability is the band's overlap with each calendar day's share of the
    range times the number of scoped resources. A booking spanning several
    days contributes to every day it touches.

    The default status allow-list includes ``upcoming`` like every other
    builder. Older dashboards counted only completed, confirmed and active
    bookings here; pass that narrower ``include_statuses`` to reproduce them.
    """
    opts = options or UtilizationOptions()
    layout = list(bands) if bands is not None else default_heat_bands()
    range_start = to_local_naive(range_start)
    range_end = to_local_naive(range_end)

    scoped = scope_resources(resources, opts)
    resource_by_id = {resource.resource_id: resource for resource in scoped}
    resource_count = len(scoped)

    booked_min = [[0.0] * len(layout) for _ in range(7)]
    avail_min = [[0.0] * len(layout) for _ in range(7)]

    for day in iter_days(range_start, range_end):
        day_start = max(day, range_start)
        day_end = min(at_hour(day, 24), range_end)
        if day_end <= day_start:
            continue
        weekday = weekday_index(day)
        for index, band in enumerate(layout):
            minutes = overlap_minutes(
                at_hour(day, band.start_hour),
                at_hour(day, band.end_hour),
                day_start,
                day_end,
            )
            avail_min[weekday][index] += minutes * resource_count

    for item in iter_clamped_bookings(
        bookings, resource_by_id, range_start, range_end, opts.include_statuses
    ):
        for day in iter_days(item.start, item.end):
            weekday = weekday_index(day)
            for index, band in enumerate(layout):
                booked_min[weekday][index] += overlap_minutes(
                    at_hour(day, band.start_hour),
                    at_hour(day, band.end_hour),
                    item.start,
                    item.end,
                )

    rows: list[dict[str, Any]] = []
    for weekday, day_label in enumerate(week_labels()):
        rows.append(
            {
                "day": day_label,
                "cells": [
                    {
                        "band": band.label,
                        "utilization": utilization_pct(
                            booked_min[weekday][index], avail_min[weekday][index]
                        ),
                    }
                    for index, band in enumerate(layout)
                ],
            }
        )
    return {"bands": [band.label for band in layout], "rows": rows}


def build_overall_utilization(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
) -> dict[str, Any]:
    """Single headline figure summed over every hour bucket of the range."""
    acc = compute_utilization_metrics(bookings, resources, range_start, range_end, "hour", options)
    booked = sum(bucket.booked_min for bucket in acc.values())
    available = sum(bucket.avail_min for bucket in acc.values())
    return {
        "booked_minutes": round_half_up(booked),
        "available_minutes": round_half_up(available),
        "utilization": utilization_pct(booked, available),
    }


def build_bookings_by_type(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
) -> list[dict[str, Any]]:
    """Number of bookings per resource type, attributed by clamped start."""
    acc = compute_utilization_metrics(bookings, resources, range_start, range_end, "type", options)
    return [
        {"type": resource_type, "bookings": acc[resource_type].bookings}
        for resource_type in sorted(key for key in acc if isinstance(key, str))
    ]


def _status_family(status: str) -> str:
    value = (status or "upcoming").lower()
    if "complete" in value:
        return "completed"
    if "cancel" in value:
        return "cancelled"
    if "upcoming" in value or "confirmed" in value or "active" in value:
        return "upcoming"
    return "other"


def build_booking_comparison(
    bookings: Iterable[Booking],
    split_at: datetime,
) -> dict[str, Any]:
    """Compare bookings starting before ``split_at`` with those starting at or after it.

    Every status is counted, cancelled included. Status shares are whole
    percentages of each period's bookings; statuses outside the completed,
    cancelled and upcoming families count toward the period total only.
    """
    split_at = to_local_naive(split_at)
    daily: Counter[str] = Counter()
    periods: dict[str, Counter[str]] = {"before": Counter(), "after": Counter()}
    hourly = {"before": [0] * 24, "after": [0] * 24}

    for booking in bookings:
        start = parse_local_timestamp(booking.start_time)
        if start is None:
            continue
        period = "before" if start < split_at else "after"
        daily[start.date().isoformat()] += 1
        periods[period]["total"] += 1
        periods[period][_status_family(booking.status)] += 1
        hourly[period][start.hour] += 1

    status_rows: list[dict[str, Any]] = []
    for period, counts in periods.items():
        total = counts["total"] or 1
        status_rows.append(
            {
                "period": period,
                "bookings": counts["total"],
                "completed": round_half_up(counts["completed"] / total * 100),
                "cancelled": round_half_up(counts["cancelled"] / total * 100),
                "upcoming": round_half_up(counts["upcoming"] / total * 100),
            }
        )

    return {
        "split_at": split_at.isoformat(),
        "daily_counts": [{"date": day, "bookings": daily[day]} for day in sorted(daily)],
        "status_distribution": status_rows,
        "hourly_distribution": [
            {
                "hour": f"{hour:02d}:00",
                "before": hourly["before"][hour],
                "after": hourly["after"][hour],
            }
            for hour in range(24)
        ],
    }
