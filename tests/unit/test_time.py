"""
Station time adapter tests.

America/Los_Angeles transitions:
- PDT: Second Sunday in March at 02:00 -> 03:00
- PST: First Sunday in November at 02:00 -> 01:00
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from flood_alert.adapters.station_time import FrozenTimeAdapter, StationTimeAdapter


@pytest.fixture
def adapter() -> StationTimeAdapter:
    return StationTimeAdapter()


class TestBasicConversions:
    def test_now_utc_is_aware_utc(self, adapter: StationTimeAdapter) -> None:
        now = adapter.now_utc()
        assert now.utcoffset() == timedelta(0)

    def test_now_local_is_naive(self, adapter: StationTimeAdapter) -> None:
        assert adapter.now_local().tzinfo is None
        assert adapter.timezone_name == "America/Los_Angeles"

    def test_naive_input_treated_as_utc(self, adapter: StationTimeAdapter) -> None:
        assert adapter.to_local(datetime(2024, 1, 15, 20, 0)) == datetime(2024, 1, 15, 12, 0)


class TestDst:
    @pytest.mark.parametrize(
        ("utc", "local"),
        [
            (datetime(2024, 1, 15, 20, 0, tzinfo=UTC), datetime(2024, 1, 15, 12, 0)),  # PST
            (datetime(2024, 7, 15, 19, 0, tzinfo=UTC), datetime(2024, 7, 15, 12, 0)),  # PDT
            (datetime(2024, 3, 10, 9, 59, tzinfo=UTC), datetime(2024, 3, 10, 1, 59)),
            (datetime(2024, 3, 10, 10, 0, tzinfo=UTC), datetime(2024, 3, 10, 3, 0)),
            (datetime(2024, 11, 3, 8, 30, tzinfo=UTC), datetime(2024, 11, 3, 1, 30)),
            (datetime(2024, 11, 3, 9, 30, tzinfo=UTC), datetime(2024, 11, 3, 1, 30)),
        ],
    )
    def test_to_local(self, adapter: StationTimeAdapter, utc: datetime, local: datetime) -> None:
        assert adapter.to_local(utc) == local


class TestFrozen:
    def test_frozen_now(self) -> None:
        frozen = FrozenTimeAdapter(datetime(2024, 10, 1, 15, 0, tzinfo=UTC))
        assert frozen.now_utc() == datetime(2024, 10, 1, 15, 0, tzinfo=UTC)
        assert frozen.now_local() == datetime(2024, 10, 1, 8, 0)

    def test_advance(self) -> None:
        frozen = FrozenTimeAdapter(datetime(2024, 10, 1, 15, 0))
        frozen.advance(timedelta(days=1))
        assert frozen.now_local() == datetime(2024, 10, 2, 8, 0)
