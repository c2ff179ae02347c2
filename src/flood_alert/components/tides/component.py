"""
Tides component.

Archive refresh ("sync" job) and flood query.

Key behaviors:
- Refresh fetches [start, start + window_days] from the upstream service
- Unclassified entries (neither High nor Low) are discarded
- Delete-then-insert of the window happens in one transaction
- Flood query returns rows at or above FLOOD_THRESHOLD_FT from now until the
  end of the forecast window, ascending by time

Invariants:
- Repeated refreshes with identical upstream data leave identical rows
- A failed refresh leaves the archive untouched
- The query horizon equals the ingestion window
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from flood_alert.components.tides.models import (
    FLOOD_THRESHOLD_FT,
    FORECAST_DAYS,
    FloodEvent,
    RefreshInput,
    RefreshOutput,
    SyncFailure,
    TidePrediction,
    UpstreamFetchError,
    UpstreamPrediction,
)
from flood_alert.components.tides.ports import TidePredictionClientPort, TideRepoPort
from flood_alert.core.ports.db import StoreError

logger = logging.getLogger(__name__)

DAY_END = time(23, 59, 59)


# --- Pure Functions ---


def window_bounds(window_start: date, window_days: int) -> tuple[datetime, datetime]:
    """
    Full-day bounds of a refresh window.

    Returns:
        (window_start 00:00:00, window_start + window_days 23:59:59)
    """
    begin = datetime.combine(window_start, time.min)
    end = datetime.combine(window_start + timedelta(days=window_days), DAY_END)
    return begin, end


def query_horizon(now_local: datetime, window_days: int = FORECAST_DAYS) -> datetime:
    """Last instant the flood query looks at (end of the forecast window)."""
    return datetime.combine(now_local.date() + timedelta(days=window_days), DAY_END)


def classify(
    fetched: list[UpstreamPrediction],
    begin: datetime,
    end: datetime,
) -> list[TidePrediction]:
    """Keep classified entries inside [begin, end]."""
    return [
        TidePrediction(time=p.time, height_ft=p.height_ft, tide_type=p.tide_type)
        for p in fetched
        if p.tide_type is not None and begin <= p.time <= end
    ]


def format_display_time(moment: datetime) -> str:
    """Format like "Thursday, October 5 at 2:30PM"."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment:%A}, {moment:%B} {moment.day} at {hour}:{moment:%M}{meridiem}"


def format_display_height(height_ft: float) -> str:
    """Two decimal places, e.g. 6.789 -> "6.79"."""
    return f"{height_ft:.2f}"


def to_flood_event(prediction: TidePrediction) -> FloodEvent:
    """Map an archived prediction to its display form."""
    return FloodEvent(
        time=prediction.time,
        height_ft=prediction.height_ft,
        display_time=format_display_time(prediction.time),
        display_height=format_display_height(prediction.height_ft),
    )


# --- Run Handlers ---


def run_refresh(
    inp: RefreshInput,
    *,
    client: TidePredictionClientPort,
    repo: TideRepoPort,
) -> RefreshOutput:
    """
    Refresh the archive for one window.

    Upstream and storage failures are logged and reported; the archive is
    left exactly as it was.
    """
    begin, end = window_bounds(inp.window_start, inp.window_days)
    end_date = inp.window_start + timedelta(days=inp.window_days)

    try:
        fetched = client.fetch_predictions(inp.station_id, inp.window_start, end_date)
    except UpstreamFetchError as e:
        logger.error("Tide sync for %s..%s aborted: %s", inp.window_start, end_date, e)
        return RefreshOutput(
            success=False,
            window_start=begin,
            window_end=end,
            errors=[SyncFailure("UPSTREAM_FETCH_FAILED", str(e))],
        )

    predictions = classify(fetched, begin, end)
    discarded = len(fetched) - len(predictions)
    if discarded:
        logger.info("Discarded %d unclassified or out-of-window predictions", discarded)

    try:
        written = repo.replace_window(begin, end, predictions)
    except StoreError as e:
        logger.error("Tide sync for %s..%s rolled back: %s", inp.window_start, end_date, e)
        return RefreshOutput(
            success=False,
            discarded=discarded,
            window_start=begin,
            window_end=end,
            errors=[SyncFailure("STORE_FAILED", str(e))],
        )

    logger.info("Successfully updated %d rows.", written)
    return RefreshOutput(
        success=True,
        rows_written=written,
        discarded=discarded,
        window_start=begin,
        window_end=end,
    )


def query_flood_events(now_local: datetime, *, repo: TideRepoPort) -> list[FloodEvent]:
    """
    Flood forecasts from now to the end of the forecast window.

    Args:
        now_local: Current station-local time (naive)
        repo: Tide archive

    Raises:
        StoreError: If the archive cannot be read
    """
    rows = repo.list_between(
        now_local,
        query_horizon(now_local),
        min_height_ft=FLOOD_THRESHOLD_FT,
    )
    return [to_flood_event(row) for row in rows]
