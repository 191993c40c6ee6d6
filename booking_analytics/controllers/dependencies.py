"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Request

from booking_analytics.services.analytics_service import UtilizationAnalyticsService
from booking_analytics.utils.config import get_settings


def get_analytics_service(request: Request) -> UtilizationAnalyticsService:
    service = getattr(request.app.state, "analytics_service", None)
    if service is None:
        service = UtilizationAnalyticsService(settings=get_settings())
        request.app.state.analytics_service = service
    return service
