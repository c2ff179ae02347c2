"""
Tides component ports.

Protocol interfaces for the prediction archive and the upstream service.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol

from flood_alert.components.tides.models import TidePrediction, UpstreamPrediction


class TideRepoPort(Protocol):
    """
    Tide prediction archive interface.

    Implementations raise StoreError on storage failures.
    """

    def replace_window(
        self,
        start: datetime,
        end: datetime,
        predictions: list[TidePrediction],
    ) -> int:
        """
        Atomically replace every prediction with start <= time <= end.

        Delete and insert happen in one transaction; on failure nothing
        changes.

        Returns:
            Number of rows inserted
        """
        ...

    def list_between(
        self,
        start: datetime,
        end: datetime,
        min_height_ft: float | None = None,
    ) -> list[TidePrediction]:
        """
        List predictions with start <= time <= end, ascending by time.

        Args:
            min_height_ft: Keep only rows at or above this height
        """
        ...


class TidePredictionClientPort(Protocol):
    """Upstream high/low tide prediction service."""

    def fetch_predictions(
        self,
        station_id: str,
        begin_date: date,
        end_date: date,
    ) -> list[UpstreamPrediction]:
        """
        Fetch high/low predictions (MLLW, feet, station-local time).

        Raises:
            UpstreamFetchError: On transport failure or an error payload
        """
        ...
