"""Tabular exports of chart output for spreadsheet consumers."""

from __future__ import annotations

from typing import Any, Sequence

import pandas as pd


_RANKING_COLUMNS = [
    "room_id",
    "room_name",
    "utilization",
    "booked_minutes",
    "available_minutes",
]


def ranking_to_frame(ranking: Sequence[dict[str, Any]]) -> pd.DataFrame:
    """One row per room, in ranking order."""
    return pd.DataFrame(list(ranking), columns=_RANKING_COLUMNS)


def weekly_heatmap_to_frame(heatmap: dict[str, Any]) -> pd.DataFrame:
    """Weekdays as the index, band labels as columns."""
    frame = pd.DataFrame(
        [[cell["utilization"] for cell in row["cells"]] for row in heatmap["rows"]],
        index=[row["day"] for row in heatmap["rows"]],
        columns=list(heatmap["bands"]),
    )
    frame.index.name = "day"
    return frame


def room_heatmap_to_frame(heatmap: dict[str, Any]) -> pd.DataFrame:
    """Room names as the index, band labels as columns."""
    frame = pd.DataFrame(
        [[cell["utilization"] for cell in room["cells"]] for room in heatmap["rooms"]],
        index=[room["room_name"] for room in heatmap["rooms"]],
        columns=list(heatmap["bands"]),
    )
    frame.index.name = "room"
    return frame


def frame_to_csv(frame: pd.DataFrame, *, include_index: bool = False) -> str:
    return frame.to_csv(index=include_index)
