"""Analytics orchestration: settings defaults, option validation, logging."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from booking_analytics.domain.constraints import (
    validate_heat_bands,
    validate_operating_hours,
    validate_performance_thresholds,
    validate_status_thresholds,
    validate_time_range,
)
from booking_analytics.domain.models import (
    Booking,
    HeatBand,
    NameKey,
    OperatingHours,
    PerformanceThresholds,
    Resource,
    StatusThresholds,
    UtilizationOptions,
    default_heat_bands,
)
from booking_analytics.domain.time_windows import to_local_naive
from booking_analytics.services.chart_builders import (
    build_booking_comparison,
    build_bookings_by_type,
    build_daily_utilization_trend,
    build_overall_utilization,
    build_utilization_status_by_type,
    build_weekly_usage_heatmap,
    build_weekly_utilization_and_bookings,
)
from booking_analytics.services.export_service import (
    frame_to_csv,
    ranking_to_frame,
    room_heatmap_to_frame,
    weekly_heatmap_to_frame,
)
from booking_analytics.services.room_analytics import (
    build_room_performance,
    build_room_status_distribution,
    build_room_timeband_heatmap,
    build_utilization_by_room,
)
from booking_analytics.utils.config import Settings, get_settings
from booking_analytics.utils.logger import get_logger


logger = get_logger(__name__)


class AnalyticsValidationError(Exception):
    """Raised when analytics request options are malformed."""


@dataclass(frozen=True)
class AnalyticsQuery:
    """Materialized inputs for one analytics request."""

    bookings: Sequence[Booking]
    resources: Sequence[Resource]
    range_start: datetime
    range_end: datetime
    options: UtilizationOptions


class UtilizationAnalyticsService:
    """Resolves defaults from settings, validates options, runs the builders.

    The service keeps no per-request state; every method is safe to call
    concurrently with different queries.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def build_options(
        self,
        *,
        include_statuses: Optional[Sequence[str]] = None,
        only_available_resources: bool = False,
        resource_type: Optional[str] = None,
        operating_hours: Optional[OperatingHours] = None,
        use_default_operating_hours: bool = True,
    ) -> UtilizationOptions:
        """Fill unset options from settings.

        ``use_default_operating_hours=False`` means an absent
        ``operating_hours`` stays absent (always open).
        """
        statuses = (
            tuple(include_statuses)
            if include_statuses is not None
            else self._settings.default_include_statuses
        )
        hours = operating_hours
        if hours is None and use_default_operating_hours:
            configured = self._settings.default_operating_hours
            if configured is not None:
                hours = OperatingHours(start=configured[0], end=configured[1])
        return UtilizationOptions(
            include_statuses=statuses,
            only_available_resources=only_available_resources,
            resource_type=resource_type or None,
            operating_hours=hours,
        )

    def default_bands(self) -> list[HeatBand]:
        return default_heat_bands(
            self._settings.heatmap_start_hour,
            self._settings.heatmap_end_hour,
        )

    def default_status_thresholds(self) -> StatusThresholds:
        return StatusThresholds(
            optimal_max=self._settings.status_optimal_max,
            busy_max=self._settings.status_busy_max,
        )

    def default_performance_thresholds(self) -> PerformanceThresholds:
        return PerformanceThresholds(
            under_max=self._settings.performance_under_max,
            optimal_max=self._settings.performance_optimal_max,
            busy_max=self._settings.performance_busy_max,
        )

    def _validate_query(self, query: AnalyticsQuery) -> None:
        try:
            validate_time_range(
                to_local_naive(query.range_start),
                to_local_naive(query.range_end),
            )
            validate_operating_hours(query.options.operating_hours)
        except ValueError as exc:
            raise AnalyticsValidationError(str(exc)) from exc

    def _resolve_bands(self, bands: Optional[Sequence[HeatBand]]) -> list[HeatBand]:
        resolved = list(bands) if bands is not None else self.default_bands()
        try:
            validate_heat_bands(resolved)
        except ValueError as exc:
            raise AnalyticsValidationError(str(exc)) from exc
        return resolved

    def _resolve_status_thresholds(
        self,
        thresholds: Optional[StatusThresholds],
    ) -> StatusThresholds:
        resolved = thresholds or self.default_status_thresholds()
        try:
            validate_status_thresholds(resolved)
        except ValueError as exc:
            raise AnalyticsValidationError(str(exc)) from exc
        return resolved

    def _resolve_performance_thresholds(
        self,
        thresholds: Optional[PerformanceThresholds],
    ) -> PerformanceThresholds:
        resolved = thresholds or self.default_performance_thresholds()
        try:
            validate_performance_thresholds(resolved)
        except ValueError as exc:
            raise AnalyticsValidationError(str(exc)) from exc
        return resolved

    def _log_build(self, chart: str, query: AnalyticsQuery) -> None:
        logger.info(
            "Building %s for %s bookings / %s resources over [%s, %s)",
            chart,
            len(query.bookings),
            len(query.resources),
            query.range_start,
            query.range_end,
        )

    def summary(self, query: AnalyticsQuery) -> dict[str, Any]:
        self._validate_query(query)
        self._log_build("overall summary", query)
        return build_overall_utilization(
            query.bookings, query.resources, query.range_start, query.range_end, query.options
        )

    def daily_trend(self, query: AnalyticsQuery) -> list[dict[str, Any]]:
        self._validate_query(query)
        self._log_build("daily trend", query)
        return build_daily_utilization_trend(
            query.bookings, query.resources, query.range_start, query.range_end, query.options
        )

    def weekly_trend(self, query: AnalyticsQuery) -> list[dict[str, Any]]:
        self._validate_query(query)
        self._log_build("weekly trend", query)
        return build_weekly_utilization_and_bookings(
            query.bookings, query.resources, query.range_start, query.range_end, query.options
        )

    def type_status(
        self,
        query: AnalyticsQuery,
        thresholds: Optional[StatusThresholds] = None,
    ) -> list[dict[str, Any]]:
        self._validate_query(query)
        limits = self._resolve_status_thresholds(thresholds)
        self._log_build("type status distribution", query)
        return build_utilization_status_by_type(
            query.bookings,
            query.resources,
            query.range_start,
            query.range_end,
            query.options,
            thresholds=limits,
        )

    def weekly_heatmap(
        self,
        query: AnalyticsQuery,
        bands: Optional[Sequence[HeatBand]] = None,
    ) -> dict[str, Any]:
        self._validate_query(query)
        layout = self._resolve_bands(bands)
        self._log_build("weekly heatmap", query)
        return build_weekly_usage_heatmap(
            query.bookings,
            query.resources,
            query.range_start,
            query.range_end,
            query.options,
            bands=layout,
        )

    def room_ranking(
        self,
        query: AnalyticsQuery,
        name_key: NameKey = "name",
    ) -> list[dict[str, Any]]:
        self._validate_query(query)
        self._log_build("room ranking", query)
        return build_utilization_by_room(
            query.bookings,
            query.resources,
            query.range_start,
            query.range_end,
            query.options,
            name_key=name_key,
        )

    def room_heatmap(
        self,
        query: AnalyticsQuery,
        bands: Optional[Sequence[HeatBand]] = None,
        name_key: NameKey = "name",
    ) -> dict[str, Any]:
        self._validate_query(query)
        layout = self._resolve_bands(bands)
        self._log_build("room heatmap", query)
        return build_room_timeband_heatmap(
            query.bookings,
            query.resources,
            query.range_start,
            query.range_end,
            query.options,
            bands=layout,
            name_key=name_key,
        )

    def room_performance(
        self,
        query: AnalyticsQuery,
        thresholds: Optional[PerformanceThresholds] = None,
        name_key: NameKey = "name",
    ) -> dict[str, Any]:
        limits = self._resolve_performance_thresholds(thresholds)
        ranking = self.room_ranking(query, name_key=name_key)
        return {
            "tiers": build_room_performance(ranking, limits),
            "distribution": build_room_status_distribution(ranking, limits),
        }

    def bookings_by_type(self, query: AnalyticsQuery) -> list[dict[str, Any]]:
        self._validate_query(query)
        self._log_build("bookings by type", query)
        return build_bookings_by_type(
            query.bookings, query.resources, query.range_start, query.range_end, query.options
        )

    def booking_comparison(
        self,
        bookings: Sequence[Booking],
        split_at: datetime,
    ) -> dict[str, Any]:
        """Before/after view of booking volume, status mix and start hours."""
        logger.info(
            "Building booking comparison for %s bookings split at %s",
            len(bookings),
            split_at,
        )
        return build_booking_comparison(bookings, split_at)

    def build_dashboard(
        self,
        query: AnalyticsQuery,
        *,
        bands: Optional[Sequence[HeatBand]] = None,
        status_thresholds: Optional[StatusThresholds] = None,
    ) -> dict[str, Any]:
        """Every chart of the analytics page from one set of inputs."""
        return {
            "summary": self.summary(query),
            "daily_trend": self.daily_trend(query),
            "weekly_trend": self.weekly_trend(query),
            "type_status": self.type_status(query, status_thresholds),
            "weekly_heatmap": self.weekly_heatmap(query, bands),
            "room_ranking": self.room_ranking(query),
            "room_heatmap": self.room_heatmap(query, bands),
        }

    def export_room_ranking_csv(self, query: AnalyticsQuery, name_key: NameKey = "name") -> str:
        return frame_to_csv(ranking_to_frame(self.room_ranking(query, name_key=name_key)))

    def export_weekly_heatmap_csv(
        self,
        query: AnalyticsQuery,
        bands: Optional[Sequence[HeatBand]] = None,
    ) -> str:
        frame = weekly_heatmap_to_frame(self.weekly_heatmap(query, bands))
        return frame_to_csv(frame, include_index=True)

    def export_room_heatmap_csv(
        self,
        query: AnalyticsQuery,
        bands: Optional[Sequence[HeatBand]] = None,
        name_key: NameKey = "name",
    ) -> str:
        frame = room_heatmap_to_frame(self.room_heatmap(query, bands, name_key=name_key))
        return frame_to_csv(frame, include_index=True)
