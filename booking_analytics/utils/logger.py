"""Package logging for the analytics service.

Loggers live under the ``booking_analytics`` namespace and share one stdout
handler whose level comes from ``BOOKING_ANALYTICS_LOG_LEVEL``. The root
logger is left alone so uvicorn's own logging configuration stays intact.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from booking_analytics.utils.config import get_settings


PACKAGE_LOGGER_NAME = "booking_analytics"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_HANDLER: Optional[logging.Handler] = None


def _resolve_level(level: Optional[str]) -> int:
    name = (level or get_settings().log_level).strip().upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level {name!r}")
    return resolved


def configure_logging(level: Optional[str] = None, *, force: bool = False) -> logging.Logger:
    """Attach the stdout handler to the package logger once.

    ``force=True`` re-applies the level, e.g. after settings were reloaded.
    """
    global _HANDLER
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if _HANDLER is not None and not force:
        return package_logger

    resolved_level = _resolve_level(level)
    if _HANDLER is None:
        _HANDLER = logging.StreamHandler(sys.stdout)
        _HANDLER.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(_HANDLER)

    _HANDLER.setLevel(resolved_level)
    package_logger.setLevel(resolved_level)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the package namespace."""
    configure_logging()
    if name == PACKAGE_LOGGER_NAME or name.startswith(f"{PACKAGE_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{name}")
