"""
Time/Timezone Adapter Interface.

Protocol-based interface for time operations.

Key requirements:
- Tide predictions are stored in station-local civil time (LST/LDT)
- Job and request handlers compare against "now" in the same zone
- DST transitions must be handled by the zone database, not by hand
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """
    Time/Timezone adapter interface.

    Local datetimes returned by this port are naive and expressed in the
    station's zone, matching how predictions are archived.
    """

    def now_utc(self) -> datetime:
        """Get current UTC time (timezone-aware)."""
        ...

    def now_local(self) -> datetime:
        """Get current station-local time (naive)."""
        ...

    def to_local(self, utc_dt: datetime) -> datetime:
        """
        Convert UTC to station-local time.

        Args:
            utc_dt: Datetime in UTC (naive treated as UTC)

        Returns:
            Naive datetime in the station's zone
        """
        ...
