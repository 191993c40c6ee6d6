"""Tests for the trend, type-distribution and weekly-heatmap builders."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from booking_analytics.domain.models import (
    Booking,
    HeatBand,
    OperatingHours,
    Resource,
    StatusThresholds,
    UtilizationOptions,
)
from booking_analytics.services.chart_builders import (
    build_booking_comparison,
    build_bookings_by_type,
    build_daily_utilization_trend,
    build_overall_utilization,
    build_utilization_status_by_type,
    build_weekly_usage_heatmap,
    build_weekly_utilization_and_bookings,
)
from booking_analytics.services.room_analytics import (
    build_room_performance,
    build_room_status_distribution,
    build_room_timeband_heatmap,
    build_utilization_by_room,
)


MONDAY = datetime(2026, 3, 2)
OPEN_8_20 = UtilizationOptions(operating_hours=OperatingHours(start=8, end=20))


def at(day_offset: int, hour: int, minute: int = 0) -> datetime:
    return MONDAY + timedelta(days=day_offset, hours=hour, minutes=minute)


def stamp(day_offset: int, hour: int, minute: int = 0) -> str:
    return at(day_offset, hour, minute).isoformat()


def booking(resource_id: str, start: str, end: str, status: str = "confirmed") -> Booking:
    return Booking(resource_id=resource_id, start_time=start, end_time=end, status=status)


def single_room(capacity: int | None = 1) -> list[Resource]:
    return [Resource("r1", "study-room", "Room 1", status="available", capacity=capacity)]


def by_hour(trend: list[dict]) -> dict[str, int]:
    return {row["hour"]: row["utilization"] for row in trend}


def heat_row(heatmap: dict, day: str) -> dict[str, int]:
    row = next(item for item in heatmap["rows"] if item["day"] == day)
    return {cell["band"]: cell["utilization"] for cell in row["cells"]}


# --- Daily trend ---

def test_scenario_a_daily_trend() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 11))]

    trend = build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20)

    assert len(trend) == 24
    values = by_hour(trend)
    assert values["9 AM"] == 100
    assert values["10 AM"] == 100
    for label, value in values.items():
        if label not in {"9 AM", "10 AM"}:
            assert value == 0, label


def test_daily_trend_closed_hours_report_zero_even_when_booked() -> None:
    bookings = [booking("r1", stamp(0, 6), stamp(0, 9))]

    values = by_hour(
        build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20)
    )

    assert values["6 AM"] == 0
    assert values["7 AM"] == 0
    assert values["8 AM"] == 100


def test_daily_trend_averages_over_days_in_range() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 10))]

    values = by_hour(
        build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(4, 0), OPEN_8_20)
    )

    assert values["9 AM"] == 25


def test_scenario_c_inverted_booking_is_ignored() -> None:
    bookings = [booking("r1", stamp(0, 11), stamp(0, 9))]

    trend = build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20)

    assert all(row["utilization"] == 0 for row in trend)


def test_scenario_d_cancelled_booking_is_excluded() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 11), status="cancelled")]

    trend = build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20)
    weekly = build_weekly_utilization_and_bookings(
        bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20
    )

    assert all(row["utilization"] == 0 for row in trend)
    assert all(row["bookings"] == 0 for row in weekly)


def test_scenario_e_missing_capacity_defaults_to_one() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 10))]

    implicit = build_daily_utilization_trend(
        bookings, single_room(capacity=None), at(0, 0), at(1, 0), OPEN_8_20
    )
    explicit = build_daily_utilization_trend(
        bookings, single_room(capacity=1), at(0, 0), at(1, 0), OPEN_8_20
    )
    doubled = build_daily_utilization_trend(
        bookings, single_room(capacity=2), at(0, 0), at(1, 0), OPEN_8_20
    )

    assert implicit == explicit
    assert by_hour(doubled)["9 AM"] == 50


# --- Weekly trend ---

def test_weekly_trend_reports_utilization_and_booking_counts() -> None:
    bookings = [
        booking("r1", stamp(0, 9), stamp(0, 11)),
        booking("r1", stamp(2, 8), stamp(2, 20)),
        booking("r1", stamp(2, 20), stamp(2, 21)),
    ]

    weekly = build_weekly_utilization_and_bookings(
        bookings, single_room(), at(0, 0), at(7, 0), OPEN_8_20
    )

    assert [row["day"] for row in weekly] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert weekly[0] == {"day": "Mon", "utilization": 17, "bookings": 1}
    assert weekly[1] == {"day": "Tue", "utilization": 0, "bookings": 0}
    assert weekly[2] == {"day": "Wed", "utilization": 100, "bookings": 2}


# --- Type-status distribution ---

def _type_status_fixture() -> tuple[list[Booking], list[Resource]]:
    resources = [
        Resource("a", "study-room", "A"),
        Resource("b", "study-room", "B"),
        Resource("c", "study-room", "C"),
        Resource("l", "lab", "Lab"),
    ]
    bookings = [
        booking("a", stamp(0, 8), stamp(0, 17)),
        booking("c", stamp(0, 8), stamp(0, 20)),
    ]
    return bookings, resources


def test_type_status_buckets_resources_and_sums_to_100() -> None:
    bookings, resources = _type_status_fixture()

    rows = build_utilization_status_by_type(bookings, resources, at(0, 0), at(1, 0), OPEN_8_20)

    assert rows == [
        {"type": "lab", "optimal": 100, "busy": 0, "over_utilized": 0},
        {"type": "study-room", "optimal": 33, "busy": 33, "over_utilized": 34},
    ]
    for row in rows:
        assert row["optimal"] + row["busy"] + row["over_utilized"] == 100


def test_type_status_honours_custom_thresholds() -> None:
    bookings, resources = _type_status_fixture()

    rows = build_utilization_status_by_type(
        bookings,
        resources,
        at(0, 0),
        at(1, 0),
        OPEN_8_20,
        thresholds=StatusThresholds(optimal_max=80, busy_max=95),
    )

    study = next(row for row in rows if row["type"] == "study-room")
    assert study == {"type": "study-room", "optimal": 67, "busy": 0, "over_utilized": 33}


def test_type_status_clips_booked_minutes_to_operating_hours() -> None:
    resources = [Resource("a", "study-room", "A")]
    bookings = [booking("a", stamp(0, 0), stamp(1, 0))]

    rows = build_utilization_status_by_type(bookings, resources, at(0, 0), at(1, 0), OPEN_8_20)

    assert rows == [{"type": "study-room", "optimal": 0, "busy": 0, "over_utilized": 100}]


@pytest.mark.parametrize(
    "end_hour, end_minute, expected",
    [
        # 360 of 600 open minutes is exactly 60%
        (14, 0, {"optimal": 100, "busy": 0, "over_utilized": 0}),
        # 362 of 600 is 60.33%, rounds to 60 but is past optimal_max
        (14, 2, {"optimal": 0, "busy": 100, "over_utilized": 0}),
        # 510 of 600 is exactly 85%
        (16, 30, {"optimal": 0, "busy": 100, "over_utilized": 0}),
        # 512 of 600 is 85.33%, rounds to 85 but is past busy_max
        (16, 32, {"optimal": 0, "busy": 0, "over_utilized": 100}),
    ],
)
def test_type_status_classifies_on_unrounded_utilization(
    end_hour: int, end_minute: int, expected: dict
) -> None:
    resources = [Resource("a", "study-room", "A")]
    bookings = [booking("a", stamp(0, 8), stamp(0, end_hour, end_minute))]
    options = UtilizationOptions(operating_hours=OperatingHours(start=8, end=18))

    rows = build_utilization_status_by_type(bookings, resources, at(0, 0), at(1, 0), options)

    assert rows == [{"type": "study-room", **expected}]


# --- Weekly heatmap ---

def test_weekly_heatmap_default_layout_and_partial_band() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 10, 30))]

    heatmap = build_weekly_usage_heatmap(bookings, single_room(), at(0, 0), at(7, 0))

    assert heatmap["bands"][0] == "8-9"
    assert heatmap["bands"][-1] == "21-22"
    assert len(heatmap["bands"]) == 14
    assert len(heatmap["rows"]) == 7
    monday = heat_row(heatmap, "Mon")
    assert monday["9-10"] == 100
    assert monday["10-11"] == 50
    assert monday["8-9"] == 0
    assert set(heat_row(heatmap, "Tue").values()) == {0}


def test_weekly_heatmap_multi_day_booking_touches_each_day() -> None:
    bookings = [booking("r1", stamp(1, 21), stamp(2, 9))]

    heatmap = build_weekly_usage_heatmap(bookings, single_room(), at(0, 0), at(7, 0))

    assert heat_row(heatmap, "Tue")["21-22"] == 100
    assert heat_row(heatmap, "Wed")["8-9"] == 100
    assert heat_row(heatmap, "Wed")["9-10"] == 0


def test_weekly_heatmap_partial_first_day_shrinks_denominator() -> None:
    bookings = [booking("r1", stamp(0, 9, 30), stamp(0, 10))]

    heatmap = build_weekly_usage_heatmap(bookings, single_room(), at(0, 9, 30), at(1, 0))

    monday = heat_row(heatmap, "Mon")
    assert monday["9-10"] == 100
    assert monday["8-9"] == 0


def test_weekly_heatmap_accumulates_repeated_weekdays() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 10))]

    heatmap = build_weekly_usage_heatmap(bookings, single_room(), at(0, 0), at(14, 0))

    assert heat_row(heatmap, "Mon")["9-10"] == 50


def test_weekly_heatmap_denominator_counts_resources_not_capacity() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 10))]

    heatmap = build_weekly_usage_heatmap(
        bookings, single_room(capacity=3), at(0, 0), at(7, 0)
    )

    assert heat_row(heatmap, "Mon")["9-10"] == 100


def test_weekly_heatmap_custom_bands() -> None:
    bands = [HeatBand("morning", 8, 12), HeatBand("evening", 18, 24)]
    bookings = [
        booking("r1", stamp(0, 8), stamp(0, 10)),
        booking("r1", stamp(0, 21), stamp(1, 0)),
    ]

    heatmap = build_weekly_usage_heatmap(
        bookings, single_room(), at(0, 0), at(7, 0), bands=bands
    )

    assert heatmap["bands"] == ["morning", "evening"]
    assert heat_row(heatmap, "Mon") == {"morning": 50, "evening": 50}


# --- Summary and bookings by type ---

def test_overall_utilization_summary() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 11))]

    summary = build_overall_utilization(bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20)

    assert summary == {"booked_minutes": 120, "available_minutes": 720, "utilization": 17}


def test_bookings_by_type_zero_fills_scoped_types() -> None:
    resources = [Resource("a", "study-room", "A"), Resource("l", "lab", "Lab")]
    bookings = [
        booking("a", stamp(0, 9), stamp(0, 10)),
        booking("a", stamp(0, 11), stamp(0, 12)),
        booking("a", stamp(0, 13), stamp(0, 14), status="cancelled"),
    ]

    rows = build_bookings_by_type(bookings, resources, at(0, 0), at(1, 0))

    assert rows == [{"type": "lab", "bookings": 0}, {"type": "study-room", "bookings": 2}]


# --- Laws ---

def test_empty_bookings_produce_zero_filled_shapes() -> None:
    resources = single_room()

    daily = build_daily_utilization_trend([], resources, at(0, 0), at(7, 0), OPEN_8_20)
    weekly = build_weekly_utilization_and_bookings([], resources, at(0, 0), at(7, 0), OPEN_8_20)
    status = build_utilization_status_by_type([], resources, at(0, 0), at(7, 0), OPEN_8_20)
    heatmap = build_weekly_usage_heatmap([], resources, at(0, 0), at(7, 0))

    assert len(daily) == 24 and all(row["utilization"] == 0 for row in daily)
    assert len(weekly) == 7 and all(row["utilization"] == 0 for row in weekly)
    assert status == [{"type": "study-room", "optimal": 100, "busy": 0, "over_utilized": 0}]
    assert len(heatmap["rows"]) == 7
    assert all(
        cell["utilization"] == 0 for row in heatmap["rows"] for cell in row["cells"]
    )


def test_no_resources_still_returns_full_shapes() -> None:
    daily = build_daily_utilization_trend([], [], at(0, 0), at(1, 0))
    weekly = build_weekly_utilization_and_bookings([], [], at(0, 0), at(1, 0))
    heatmap = build_weekly_usage_heatmap([], [], at(0, 0), at(1, 0))

    assert len(daily) == 24
    assert len(weekly) == 7
    assert len(heatmap["rows"]) == 7


def test_booking_outside_range_contributes_nothing() -> None:
    bookings = [
        booking("r1", stamp(-3, 9), stamp(-3, 11)),
        booking("r1", stamp(8, 9), stamp(8, 11)),
    ]

    daily = build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(7, 0))
    weekly = build_weekly_utilization_and_bookings(bookings, single_room(), at(0, 0), at(7, 0))
    heatmap = build_weekly_usage_heatmap(bookings, single_room(), at(0, 0), at(7, 0))

    assert all(row["utilization"] == 0 for row in daily)
    assert all(row["bookings"] == 0 for row in weekly)
    assert all(cell["utilization"] == 0 for row in heatmap["rows"] for cell in row["cells"])


def test_overlapping_bookings_are_clamped_to_100() -> None:
    bookings = [
        booking("r1", stamp(0, 9), stamp(0, 10)),
        booking("r1", stamp(0, 9), stamp(0, 10)),
    ]

    values = by_hour(
        build_daily_utilization_trend(bookings, single_room(), at(0, 0), at(1, 0), OPEN_8_20)
    )

    assert values["9 AM"] == 100


# --- Booking comparison ---

def test_booking_comparison_splits_periods_at_split_point() -> None:
    bookings = [
        booking("r1", stamp(0, 9), stamp(0, 10), status="completed"),
        booking("r1", stamp(0, 14), stamp(0, 15), status="cancelled"),
        booking("r1", stamp(2, 0), stamp(2, 1), status="confirmed"),
        booking("r2", stamp(3, 9, 30), stamp(3, 10), status="Completed"),
        booking("r2", stamp(3, 10), stamp(3, 11), status="no_show"),
        booking("r2", "garbage", stamp(3, 11)),
    ]

    comparison = build_booking_comparison(bookings, at(2, 0))

    assert comparison["split_at"] == "2026-03-04T00:00:00"
    assert comparison["daily_counts"] == [
        {"date": "2026-03-02", "bookings": 2},
        {"date": "2026-03-04", "bookings": 1},
        {"date": "2026-03-05", "bookings": 2},
    ]
    assert comparison["status_distribution"] == [
        {"period": "before", "bookings": 2, "completed": 50, "cancelled": 50, "upcoming": 0},
        {"period": "after", "bookings": 3, "completed": 33, "cancelled": 0, "upcoming": 33},
    ]
    hours = {
        row["hour"]: (row["before"], row["after"]) for row in comparison["hourly_distribution"]
    }
    assert len(hours) == 24
    assert hours["00:00"] == (0, 1)
    assert hours["09:00"] == (1, 1)
    assert hours["10:00"] == (0, 1)
    assert hours["14:00"] == (1, 0)


def test_booking_comparison_treats_blank_status_as_upcoming() -> None:
    bookings = [booking("r1", stamp(0, 9), stamp(0, 10), status="")]

    comparison = build_booking_comparison(bookings, at(7, 0))

    before = comparison["status_distribution"][0]
    assert before["bookings"] == 1
    assert before["upcoming"] == 100


def test_booking_comparison_without_bookings() -> None:
    comparison = build_booking_comparison([], at(0, 0))

    assert comparison["daily_counts"] == []
    assert all(row["bookings"] == 0 for row in comparison["status_distribution"])
    assert all(row["before"] == row["after"] == 0 for row in comparison["hourly_distribution"])


# --- Repeatability ---

def test_every_builder_returns_equal_output_when_called_twice() -> None:
    resources = [
        Resource("a", "study-room", "Room A", capacity=2),
        Resource("b", "study-room", "Room B"),
        Resource("l", "lab", "Lab", capacity=10),
    ]
    bookings = [
        booking("a", stamp(0, 9), stamp(0, 11)),
        booking("b", stamp(1, 20), stamp(2, 9), status="completed"),
        booking("l", stamp(4, 13), stamp(4, 17, 30), status="active"),
        booking("a", stamp(5, 10), stamp(5, 12), status="cancelled"),
    ]
    start, end = at(0, 0), at(7, 0)

    builders = [
        lambda: build_daily_utilization_trend(bookings, resources, start, end, OPEN_8_20),
        lambda: build_weekly_utilization_and_bookings(bookings, resources, start, end, OPEN_8_20),
        lambda: build_utilization_status_by_type(bookings, resources, start, end, OPEN_8_20),
        lambda: build_weekly_usage_heatmap(bookings, resources, start, end, OPEN_8_20),
        lambda: build_utilization_by_room(bookings, resources, start, end, OPEN_8_20),
        lambda: build_room_timeband_heatmap(bookings, resources, start, end, OPEN_8_20),
        lambda: build_overall_utilization(bookings, resources, start, end, OPEN_8_20),
        lambda: build_bookings_by_type(bookings, resources, start, end, OPEN_8_20),
        lambda: build_room_performance(
            build_utilization_by_room(bookings, resources, start, end, OPEN_8_20)
        ),
        lambda: build_room_status_distribution(
            build_utilization_by_room(bookings, resources, start, end, OPEN_8_20)
        ),
        lambda: build_booking_comparison(bookings, at(3, 0)),
    ]

    for build in builders:
        first = build()
        second = build()
        assert first == second
        assert first
