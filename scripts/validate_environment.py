#!/usr/bin/env python3
"""Validate local analytics environment readiness."""

from __future__ import annotations

import importlib
import sys
from datetime import datetime, timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from booking_analytics.domain.models import OperatingHours
from booking_analytics.repository.record_adapter import normalize_bookings, normalize_resources
from booking_analytics.repository.synthetic_data import generate_synthetic_snapshot
from booking_analytics.services.analytics_service import (
    AnalyticsQuery,
    UtilizationAnalyticsService,
)
from booking_analytics.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _all_percentages_in_bounds(dashboard: dict) -> bool:
    values = [row["utilization"] for row in dashboard["daily_trend"]]
    values += [row["utilization"] for row in dashboard["weekly_trend"]]
    values += [row["utilization"] for row in dashboard["room_ranking"]]
    for row in dashboard["weekly_heatmap"]["rows"]:
        values += [cell["utilization"] for cell in row["cells"]]
    for room in dashboard["room_heatmap"]["rooms"]:
        values += [cell["utilization"] for cell in room["cells"]]
    return all(0 <= value <= 100 for value in values)


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_names = ["fastapi", "uvicorn", "pydantic", "pandas", "httpx", "pytest"]
    import_errors: list[str] = []
    for module_name in package_names:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Settings load
    try:
        settings = get_settings()
        ok, line = _print_result("Settings", True, f": {settings.app_name} v{settings.app_version}")
    except ValueError as exc:
        settings = None
        ok, line = _print_result("Settings", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    if settings is not None:
        service = UtilizationAnalyticsService(settings=settings)
        range_start = datetime(2026, 3, 2)
        range_end = range_start + timedelta(days=settings.synthetic_seed_days)

        # CHECK 4: Synthetic snapshot normalization
        snapshot = generate_synthetic_snapshot(range_start, settings)
        resources = normalize_resources(snapshot["resources"])
        bookings = normalize_bookings(snapshot["bookings"])
        if len(resources) == len(snapshot["resources"]) and len(bookings) == len(snapshot["bookings"]):
            ok, line = _print_result(
                "Synthetic snapshot",
                True,
                f": {len(resources)} resources, {len(bookings)} bookings",
            )
        else:
            ok, line = _print_result("Synthetic snapshot", False, "rows dropped during normalization")
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Dashboard aggregation within bounds
        query = AnalyticsQuery(
            bookings=bookings,
            resources=resources,
            range_start=range_start,
            range_end=range_end,
            options=service.build_options(operating_hours=OperatingHours(start=8, end=23)),
        )
        dashboard = service.build_dashboard(query)
        if _all_percentages_in_bounds(dashboard):
            ok, line = _print_result(
                "Dashboard aggregation",
                True,
                f": overall utilization {dashboard['summary']['utilization']}%",
            )
        else:
            ok, line = _print_result("Dashboard aggregation", False, "percentage out of [0,100]")
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: CSV export
        csv_text = service.export_room_ranking_csv(query)
        header = csv_text.splitlines()[0] if csv_text else ""
        ok, line = _print_result(
            "CSV export",
            header.startswith("room_id,"),
            "" if header.startswith("room_id,") else f"unexpected header {header!r}",
        )
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Analytics Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
