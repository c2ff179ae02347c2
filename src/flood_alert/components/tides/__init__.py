"""
Tides component.

Tide prediction archive refresh and flood query.
"""

from flood_alert.components.tides.component import (
    classify,
    format_display_height,
    format_display_time,
    query_flood_events,
    query_horizon,
    run_refresh,
    to_flood_event,
    window_bounds,
)
from flood_alert.components.tides.models import (
    FLOOD_THRESHOLD_FT,
    FORECAST_DAYS,
    STATION_ID,
    STATION_TIMEZONE,
    FloodEvent,
    RefreshInput,
    RefreshOutput,
    SyncFailure,
    TidePrediction,
    TideType,
    UpstreamFetchError,
    UpstreamPrediction,
)
from flood_alert.components.tides.ports import TidePredictionClientPort, TideRepoPort

__all__ = [
    # Component
    "run_refresh",
    "query_flood_events",
    # Pure functions
    "window_bounds",
    "query_horizon",
    "classify",
    "format_display_time",
    "format_display_height",
    "to_flood_event",
    # Constants
    "STATION_ID",
    "STATION_TIMEZONE",
    "FLOOD_THRESHOLD_FT",
    "FORECAST_DAYS",
    # Models
    "TideType",
    "UpstreamPrediction",
    "TidePrediction",
    "FloodEvent",
    "RefreshInput",
    "RefreshOutput",
    "SyncFailure",
    # Errors
    "UpstreamFetchError",
    # Ports
    "TideRepoPort",
    "TidePredictionClientPort",
]
