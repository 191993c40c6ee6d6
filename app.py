"""
app.py: FastAPI application factory.

This is the ASGI application object imported by uvicorn. It wires the
analytics service and registers the analytics router.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from fastapi import FastAPI

from booking_analytics.controllers.analytics_controller import router as analytics_router
from booking_analytics.services.analytics_service import UtilizationAnalyticsService
from booking_analytics.utils.config import Settings, get_settings
from booking_analytics.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    The analytics service is stateless, so a single instance is shared by
    every request through app.state.
    """
    resolved_settings = settings or get_settings()
    analytics_service = UtilizationAnalyticsService(settings=resolved_settings)

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
    )
    app.include_router(analytics_router)
    app.state.analytics_service = analytics_service

    logger.info(
        "Application created (operating hours default: %s)",
        resolved_settings.default_operating_hours or "always open",
    )
    return app


# Module-level app object for uvicorn
app = create_app()
