"""Per-room utilization: ranking, room x time-band heatmap, performance tiers.

Room utilization is time utilization (booked minutes over available minutes
in the range), never physical headcount.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from booking_analytics.domain.models import (
    Booking,
    HeatBand,
    NameKey,
    PerformanceThresholds,
    Resource,
    UtilizationOptions,
    default_heat_bands,
)
from booking_analytics.domain.time_windows import (
    at_hour,
    iter_days,
    open_minutes_in_range,
    overlap_minutes,
    to_local_naive,
)
from booking_analytics.services.utilization_metrics import (
    booked_minutes_by_resource,
    iter_clamped_bookings,
    round_half_up,
    scope_resources,
    utilization_pct,
)


PERFORMANCE_TIERS = ("under", "optimal", "busy", "over")


def _room_name(resource: Resource, name_key: NameKey) -> str:
    if name_key == "name":
        return resource.name or resource.resource_id
    return resource.resource_id


def build_utilization_by_room(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
    name_key: NameKey = "name",
) -> list[dict[str, Any]]:
    """Rooms ranked by utilization, highest first.

    Available minutes are the operating-hours-aware range length times the
    room capacity. Rooms whose display name resolves to the literal string
    ``"undefined"`` come from malformed source records and are dropped.
    """
    opts = options or UtilizationOptions()
    range_start = to_local_naive(range_start)
    range_end = to_local_naive(range_end)

    scoped = scope_resources(resources, opts)
    total_range_min = open_minutes_in_range(range_start, range_end, opts.operating_hours)
    booked = booked_minutes_by_resource(bookings, scoped, range_start, range_end, opts)

    rows: list[dict[str, Any]] = []
    for resource in scoped:
        booked_min = booked[resource.resource_id]
        available_min = total_range_min * resource.effective_capacity
        room_name = _room_name(resource, name_key)
        if room_name == "undefined":
            continue
        rows.append(
            {
                "room_id": resource.resource_id,
                "room_name": room_name,
                "utilization": utilization_pct(booked_min, available_min),
                "booked_minutes": round_half_up(booked_min),
                "available_minutes": round_half_up(available_min),
            }
        )
    rows.sort(key=lambda row: row["utilization"], reverse=True)
    return rows


def build_room_timeband_heatmap(
    bookings: Iterable[Booking],
    resources: Iterable[Resource],
    range_start: datetime,
    range_end: datetime,
    options: Optional[UtilizationOptions] = None,
    bands: Optional[Sequence[HeatBand]] = None,
    name_key: NameKey = "name",
) -> dict[str, Any]:
    """Utilization per room per time band across the whole range."""
    opts = options or UtilizationOptions()
    layout = list(bands) if bands is not None else default_heat_bands()
    range_start = to_local_naive(range_start)
    range_end = to_local_naive(range_end)

    scoped = scope_resources(resources, opts)
    resource_by_id = {resource.resource_id: resource for resource in scoped}

    # band minutes inside the range for one unit of capacity
    band_minutes = [0.0] * len(layout)
    for day in iter_days(range_start, range_end):
        day_start = max(day, range_start)
        day_end = min(at_hour(day, 24), range_end)
        if day_end <= day_start:
            continue
        for index, band in enumerate(layout):
            band_minutes[index] += overlap_minutes(
                at_hour(day, band.start_hour),
                at_hour(day, band.end_hour),
                day_start,
                day_end,
            )

    booked: dict[str, list[float]] = {
        resource_id: [0.0] * len(layout) for resource_id in resource_by_id
    }
    for item in iter_clamped_bookings(
        bookings, resource_by_id, range_start, range_end, opts.include_statuses
    ):
        row = booked[item.resource.resource_id]
        for day in iter_days(item.start, item.end):
            for index, band in enumerate(layout):
                row[index] += overlap_minutes(
                    at_hour(day, band.start_hour),
                    at_hour(day, band.end_hour),
                    item.start,
                    item.end,
                )

    rooms: list[dict[str, Any]] = []
    for resource in scoped:
        row = booked[resource.resource_id]
        capacity = resource.effective_capacity
        rooms.append(
            {
                "room_id": resource.resource_id,
                "room_name": _room_name(resource, name_key),
                "cells": [
                    {
                        "band": band.label,
                        "utilization": utilization_pct(row[index], band_minutes[index] * capacity),
                    }
                    for index, band in enumerate(layout)
                ],
            }
        )
    return {"bands": [band.label for band in layout], "rooms": rooms}


def classify_room(utilization: float, thresholds: PerformanceThresholds) -> str:
    if utilization > thresholds.busy_max:
        return "over"
    if utilization >= thresholds.optimal_max:
        return "busy"
    if utilization >= thresholds.under_max:
        return "optimal"
    return "under"


def build_room_performance(
    ranking: Sequence[dict[str, Any]],
    thresholds: Optional[PerformanceThresholds] = None,
) -> dict[str, list[dict[str, Any]]]:
    """Split a room ranking into under/optimal/busy/over tiers, order preserved."""
    limits = thresholds or PerformanceThresholds()
    tiers: dict[str, list[dict[str, Any]]] = {tier: [] for tier in PERFORMANCE_TIERS}
    for row in ranking:
        tier = classify_room(row["utilization"], limits)
        tiers[tier].append({"name": row["room_name"], "utilization": row["utilization"]})
    return tiers


def build_room_status_distribution(
    ranking: Sequence[dict[str, Any]],
    thresholds: Optional[PerformanceThresholds] = None,
) -> list[dict[str, Any]]:
    """Percentage of rooms in each performance tier."""
    tiers = build_room_performance(ranking, thresholds)
    total = len(ranking)
    return [
        {
            "tier": tier,
            "rooms": len(tiers[tier]),
            "percentage": round_half_up(len(tiers[tier]) / total * 100) if total else 0,
        }
        for tier in PERFORMANCE_TIERS
    ]
