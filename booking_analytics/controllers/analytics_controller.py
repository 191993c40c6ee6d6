"""HTTP controller layer for utilization analytics.

Every endpoint is stateless: the caller posts the already-fetched booking and
resource rows together with the query range, and receives chart-ready data.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Literal, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, model_validator

from booking_analytics.controllers.dependencies import get_analytics_service
from booking_analytics.domain.models import (
    HeatBand,
    OperatingHours,
    PerformanceThresholds,
    StatusThresholds,
)
from booking_analytics.repository.record_adapter import normalize_bookings, normalize_resources
from booking_analytics.services.analytics_service import (
    AnalyticsQuery,
    AnalyticsValidationError,
    UtilizationAnalyticsService,
)
from booking_analytics.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["analytics"])

T = TypeVar("T")


class OperatingHoursModel(BaseModel):
    start: int = Field(ge=0, le=23)
    end: int = Field(ge=1, le=24)

    @model_validator(mode="after")
    def validate_order(self) -> "OperatingHoursModel":
        if self.start >= self.end:
            raise ValueError("operating_hours.start must be less than operating_hours.end")
        return self


class OptionsModel(BaseModel):
    include_statuses: Optional[list[str]] = None
    only_available_resources: bool = False
    resource_type: Optional[str] = None
    operating_hours: Optional[OperatingHoursModel] = None


class HeatBandModel(BaseModel):
    label: str = Field(min_length=1)
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=1, le=24)


class StatusThresholdsModel(BaseModel):
    optimal_max: float = Field(default=60.0, ge=0.0, le=100.0)
    busy_max: float = Field(default=85.0, ge=0.0, le=100.0)


class PerformanceThresholdsModel(BaseModel):
    under_max: float = Field(default=30.0, ge=0.0, le=100.0)
    optimal_max: float = Field(default=50.0, ge=0.0, le=100.0)
    busy_max: float = Field(default=80.0, ge=0.0, le=100.0)


class AnalyticsRequest(BaseModel):
    """Raw rows are accepted in any field spelling the record adapter knows."""

    bookings: list[dict[str, Any]] = Field(default_factory=list)
    resources: list[dict[str, Any]] = Field(default_factory=list)
    range_start: datetime
    range_end: datetime
    options: OptionsModel = Field(default_factory=OptionsModel)


class HeatmapRequest(AnalyticsRequest):
    bands: Optional[list[HeatBandModel]] = None


class TypeStatusRequest(AnalyticsRequest):
    thresholds: Optional[StatusThresholdsModel] = None


class RoomRankingRequest(AnalyticsRequest):
    name_key: Literal["name", "resource_id"] = "name"


class RoomHeatmapRequest(HeatmapRequest):
    name_key: Literal["name", "resource_id"] = "name"


class RoomPerformanceRequest(RoomRankingRequest):
    thresholds: Optional[PerformanceThresholdsModel] = None


class DashboardRequest(HeatmapRequest):
    thresholds: Optional[StatusThresholdsModel] = None


class BookingComparisonRequest(BaseModel):
    bookings: list[dict[str, Any]] = Field(default_factory=list)
    split_at: datetime


class SummaryResponse(BaseModel):
    booked_minutes: int = Field(ge=0)
    available_minutes: int = Field(ge=0)
    utilization: int = Field(ge=0, le=100)


class HourPoint(BaseModel):
    hour: str
    utilization: int = Field(ge=0, le=100)


class WeekdayPoint(BaseModel):
    day: str
    utilization: int = Field(ge=0, le=100)
    bookings: int = Field(ge=0)


class TypeStatusRow(BaseModel):
    type: str
    optimal: int = Field(ge=0, le=100)
    busy: int = Field(ge=0, le=100)
    over_utilized: int = Field(ge=0, le=100)


class HeatCell(BaseModel):
    band: str
    utilization: int = Field(ge=0, le=100)


class WeeklyHeatmapRow(BaseModel):
    day: str
    cells: list[HeatCell]


class WeeklyHeatmapResponse(BaseModel):
    bands: list[str]
    rows: list[WeeklyHeatmapRow]


class RoomRankingRow(BaseModel):
    room_id: str
    room_name: str
    utilization: int = Field(ge=0, le=100)
    booked_minutes: int = Field(ge=0)
    available_minutes: int = Field(ge=0)


class RoomHeatmapRow(BaseModel):
    room_id: str
    room_name: str
    cells: list[HeatCell]


class RoomHeatmapResponse(BaseModel):
    bands: list[str]
    rooms: list[RoomHeatmapRow]


class RoomTierEntry(BaseModel):
    name: str
    utilization: int = Field(ge=0, le=100)


class RoomTierShare(BaseModel):
    tier: str
    rooms: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)


class RoomPerformanceResponse(BaseModel):
    tiers: dict[str, list[RoomTierEntry]]
    distribution: list[RoomTierShare]


class TypeBookingsRow(BaseModel):
    type: str
    bookings: int = Field(ge=0)


class DailyBookingCount(BaseModel):
    date: str
    bookings: int = Field(ge=0)


class PeriodStatusShare(BaseModel):
    period: Literal["before", "after"]
    bookings: int = Field(ge=0)
    completed: int = Field(ge=0, le=100)
    cancelled: int = Field(ge=0, le=100)
    upcoming: int = Field(ge=0, le=100)


class StartHourCount(BaseModel):
    hour: str
    before: int = Field(ge=0)
    after: int = Field(ge=0)


class BookingComparisonResponse(BaseModel):
    split_at: str
    daily_counts: list[DailyBookingCount]
    status_distribution: list[PeriodStatusShare]
    hourly_distribution: list[StartHourCount]


class DashboardResponse(BaseModel):
    summary: SummaryResponse
    daily_trend: list[HourPoint]
    weekly_trend: list[WeekdayPoint]
    type_status: list[TypeStatusRow]
    weekly_heatmap: WeeklyHeatmapResponse
    room_ranking: list[RoomRankingRow]
    room_heatmap: RoomHeatmapResponse


def _to_query(
    payload: AnalyticsRequest,
    service: UtilizationAnalyticsService,
) -> AnalyticsQuery:
    options = payload.options
    hours = options.operating_hours
    return AnalyticsQuery(
        bookings=normalize_bookings(payload.bookings),
        resources=normalize_resources(payload.resources),
        range_start=payload.range_start,
        range_end=payload.range_end,
        options=service.build_options(
            include_statuses=options.include_statuses,
            only_available_resources=options.only_available_resources,
            resource_type=options.resource_type,
            operating_hours=(
                OperatingHours(start=hours.start, end=hours.end) if hours is not None else None
            ),
        ),
    )


def _to_bands(bands: Optional[list[HeatBandModel]]) -> Optional[list[HeatBand]]:
    if bands is None:
        return None
    return [
        HeatBand(label=band.label, start_hour=band.start_hour, end_hour=band.end_hour)
        for band in bands
    ]


def _to_status_thresholds(
    thresholds: Optional[StatusThresholdsModel],
) -> Optional[StatusThresholds]:
    if thresholds is None:
        return None
    return StatusThresholds(optimal_max=thresholds.optimal_max, busy_max=thresholds.busy_max)


def _to_performance_thresholds(
    thresholds: Optional[PerformanceThresholdsModel],
) -> Optional[PerformanceThresholds]:
    if thresholds is None:
        return None
    return PerformanceThresholds(
        under_max=thresholds.under_max,
        optimal_max=thresholds.optimal_max,
        busy_max=thresholds.busy_max,
    )


def _run(action: Callable[[], T], failure_detail: str) -> T:
    try:
        return action()
    except AnalyticsValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected analytics failure: %s", failure_detail)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_detail,
        ) from exc


@router.post("/analytics/summary", response_model=SummaryResponse)
async def overall_summary(
    payload: AnalyticsRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> SummaryResponse:
    result = _run(
        lambda: service.summary(_to_query(payload, service)),
        "Failed to compute utilization summary",
    )
    return SummaryResponse(**result)


@router.post("/analytics/daily-trend", response_model=list[HourPoint])
async def daily_trend(
    payload: AnalyticsRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> list[HourPoint]:
    result = _run(
        lambda: service.daily_trend(_to_query(payload, service)),
        "Failed to compute daily utilization trend",
    )
    return [HourPoint(**row) for row in result]


@router.post("/analytics/weekly-trend", response_model=list[WeekdayPoint])
async def weekly_trend(
    payload: AnalyticsRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> list[WeekdayPoint]:
    result = _run(
        lambda: service.weekly_trend(_to_query(payload, service)),
        "Failed to compute weekly utilization trend",
    )
    return [WeekdayPoint(**row) for row in result]


@router.post("/analytics/type-status", response_model=list[TypeStatusRow])
async def type_status(
    payload: TypeStatusRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> list[TypeStatusRow]:
    result = _run(
        lambda: service.type_status(
            _to_query(payload, service),
            _to_status_thresholds(payload.thresholds),
        ),
        "Failed to compute utilization status by type",
    )
    return [TypeStatusRow(**row) for row in result]


@router.post("/analytics/weekly-heatmap", response_model=WeeklyHeatmapResponse)
async def weekly_heatmap(
    payload: HeatmapRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> WeeklyHeatmapResponse:
    result = _run(
        lambda: service.weekly_heatmap(_to_query(payload, service), _to_bands(payload.bands)),
        "Failed to compute weekly usage heatmap",
    )
    return WeeklyHeatmapResponse(**result)


@router.post("/analytics/room-ranking", response_model=list[RoomRankingRow])
async def room_ranking(
    payload: RoomRankingRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> list[RoomRankingRow]:
    result = _run(
        lambda: service.room_ranking(_to_query(payload, service), name_key=payload.name_key),
        "Failed to compute room ranking",
    )
    return [RoomRankingRow(**row) for row in result]


@router.post("/analytics/room-heatmap", response_model=RoomHeatmapResponse)
async def room_heatmap(
    payload: RoomHeatmapRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> RoomHeatmapResponse:
    result = _run(
        lambda: service.room_heatmap(
            _to_query(payload, service),
            _to_bands(payload.bands),
            name_key=payload.name_key,
        ),
        "Failed to compute room heatmap",
    )
    return RoomHeatmapResponse(**result)


@router.post("/analytics/room-performance", response_model=RoomPerformanceResponse)
async def room_performance(
    payload: RoomPerformanceRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> RoomPerformanceResponse:
    result = _run(
        lambda: service.room_performance(
            _to_query(payload, service),
            _to_performance_thresholds(payload.thresholds),
            name_key=payload.name_key,
        ),
        "Failed to compute room performance",
    )
    return RoomPerformanceResponse(**result)


@router.post("/analytics/bookings-by-type", response_model=list[TypeBookingsRow])
async def bookings_by_type(
    payload: AnalyticsRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> list[TypeBookingsRow]:
    result = _run(
        lambda: service.bookings_by_type(_to_query(payload, service)),
        "Failed to compute bookings by type",
    )
    return [TypeBookingsRow(**row) for row in result]


@router.post("/analytics/booking-comparison", response_model=BookingComparisonResponse)
async def booking_comparison(
    payload: BookingComparisonRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> BookingComparisonResponse:
    result = _run(
        lambda: service.booking_comparison(
            normalize_bookings(payload.bookings),
            payload.split_at,
        ),
        "Failed to compute booking comparison",
    )
    return BookingComparisonResponse(**result)


@router.post("/analytics/dashboard", response_model=DashboardResponse)
async def dashboard(
    payload: DashboardRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> DashboardResponse:
    result = _run(
        lambda: service.build_dashboard(
            _to_query(payload, service),
            bands=_to_bands(payload.bands),
            status_thresholds=_to_status_thresholds(payload.thresholds),
        ),
        "Failed to compute analytics dashboard",
    )
    return DashboardResponse(**result)


@router.post("/export/room-ranking.csv", response_class=PlainTextResponse)
async def export_room_ranking(
    payload: RoomRankingRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> PlainTextResponse:
    csv_text = _run(
        lambda: service.export_room_ranking_csv(
            _to_query(payload, service),
            name_key=payload.name_key,
        ),
        "Failed to export room ranking",
    )
    return PlainTextResponse(csv_text, media_type="text/csv")


@router.post("/export/weekly-heatmap.csv", response_class=PlainTextResponse)
async def export_weekly_heatmap(
    payload: HeatmapRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> PlainTextResponse:
    csv_text = _run(
        lambda: service.export_weekly_heatmap_csv(
            _to_query(payload, service),
            _to_bands(payload.bands),
        ),
        "Failed to export weekly heatmap",
    )
    return PlainTextResponse(csv_text, media_type="text/csv")


@router.post("/export/room-heatmap.csv", response_class=PlainTextResponse)
async def export_room_heatmap(
    payload: RoomHeatmapRequest,
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> PlainTextResponse:
    csv_text = _run(
        lambda: service.export_room_heatmap_csv(
            _to_query(payload, service),
            _to_bands(payload.bands),
            name_key=payload.name_key,
        ),
        "Failed to export room heatmap",
    )
    return PlainTextResponse(csv_text, media_type="text/csv")


@router.get("/health")
async def health(
    service: UtilizationAnalyticsService = Depends(get_analytics_service),
) -> dict[str, str]:
    return {
        "status": "ok",
        "app_name": service.settings.app_name,
        "app_version": service.settings.app_version,
    }
