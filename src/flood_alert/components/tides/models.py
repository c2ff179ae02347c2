"""
Tides component models.

Tide predictions for the bike path station, flood display records and the
refresh job's input/output.

Constants are fixed for the deployment: one station, one threshold, one
forecast window shared by ingestion and query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

# --- Station Constants ---

STATION_ID = "9414819"  # Sausalito, CA (NOAA CO-OPS)
STATION_TIMEZONE = "America/Los_Angeles"
FLOOD_THRESHOLD_FT = 6.4
FORECAST_DAYS = 30


class TideType(Enum):
    """High/low classification of a tide extremum."""

    HIGH = "High"
    LOW = "Low"


# --- Entities ---


@dataclass(frozen=True)
class UpstreamPrediction:
    """
    Prediction as returned by the upstream service.

    tide_type is None when the service did not classify the entry.
    """

    time: datetime  # Station-local, naive
    height_ft: float
    tide_type: TideType | None


@dataclass(frozen=True)
class TidePrediction:
    """Archived prediction (always classified)."""

    time: datetime  # Station-local, naive
    height_ft: float
    tide_type: TideType


@dataclass(frozen=True)
class FloodEvent:
    """Display-ready flood forecast (derived on read, never stored)."""

    time: datetime
    height_ft: float
    display_time: str  # e.g. "Thursday, October 5 at 2:30PM"
    display_height: str  # e.g. "6.79"


# --- Input/Output ---


@dataclass(frozen=True)
class RefreshInput:
    """Input for an archive refresh."""

    window_start: date
    window_days: int = FORECAST_DAYS
    station_id: str = STATION_ID


@dataclass(frozen=True)
class SyncFailure:
    """Failure detail for a refresh run."""

    code: str
    message: str


@dataclass(frozen=True)
class RefreshOutput:
    """Output from an archive refresh."""

    success: bool
    rows_written: int = 0
    discarded: int = 0  # Unclassified or out-of-window entries
    window_start: datetime | None = None
    window_end: datetime | None = None
    errors: list[SyncFailure] = field(default_factory=list)


# --- Error Types ---


class UpstreamFetchError(Exception):
    """Tide prediction service request failed or returned garbage."""

    def __init__(self, station_id: str, reason: str) -> None:
        self.station_id = station_id
        self.reason = reason
        super().__init__(f"Tide prediction fetch for station {station_id} failed: {reason}")
