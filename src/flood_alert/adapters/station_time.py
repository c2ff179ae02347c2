"""
Station Time Adapter.

Implements the TimePort interface for the tide station's zone
(America/Los_Angeles). Predictions are requested in LST/LDT, so "now" is
compared in the same civil time.

Key behaviors:
- now_utc: Returns current UTC time (aware)
- now_local: Returns current station time (naive)
- to_local: Converts UTC to station time (naive), DST-aware
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from flood_alert.components.tides.models import STATION_TIMEZONE


class StationTimeAdapter:
    """
    Time adapter for the station timezone.

    Handles PST/PDT transitions through the zone database.
    """

    def __init__(self, tz_name: str = STATION_TIMEZONE) -> None:
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def now_local(self) -> datetime:
        return self.to_local(self.now_utc())

    def to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC to naive station time.

        If utc_dt is naive, it's assumed to be UTC.
        """
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=UTC)
        return utc_dt.astimezone(self._tz).replace(tzinfo=None)

    @property
    def timezone_name(self) -> str:
        return self._tz_name


class FrozenTimeAdapter(StationTimeAdapter):
    """
    Time adapter that returns a fixed time.

    Useful for deterministic testing.
    """

    def __init__(self, frozen_utc: datetime, tz_name: str = STATION_TIMEZONE) -> None:
        super().__init__(tz_name)
        if frozen_utc.tzinfo is None:
            frozen_utc = frozen_utc.replace(tzinfo=UTC)
        self._frozen_utc = frozen_utc.astimezone(UTC)

    def now_utc(self) -> datetime:
        return self._frozen_utc

    def advance(self, delta: timedelta) -> None:
        """Advance frozen time by delta (for testing)."""
        self._frozen_utc = self._frozen_utc + delta
