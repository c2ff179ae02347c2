"""
NOAA CO-OPS Tide Prediction Client.

Implements TidePredictionClientPort against the CO-OPS datagetter API:
high/low predictions, MLLW datum, feet, station-local time (lst_ldt).

Response shape:
    {"predictions": [{"t": "2024-10-05 14:30", "v": "6.512", "type": "H"}, ...]}
or, on a bad request:
    {"error": {"message": "..."}}

Types other than "H"/"L" (including a missing type) come back as None and
are discarded by the refresh job.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import httpx

from flood_alert.components.tides.models import TideType, UpstreamFetchError, UpstreamPrediction

logger = logging.getLogger(__name__)

NOAA_DATAGETTER_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
NOAA_TIME_FORMAT = "%Y-%m-%d %H:%M"
NOAA_DATE_FORMAT = "%Y%m%d"

_TYPE_CODES = {"H": TideType.HIGH, "L": TideType.LOW}


def parse_prediction(station_id: str, entry: Any) -> UpstreamPrediction:
    """
    Parse one prediction entry.

    Raises:
        UpstreamFetchError: If time or height is missing or malformed
    """
    try:
        moment = datetime.strptime(entry["t"], NOAA_TIME_FORMAT)
        height = float(entry["v"])
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamFetchError(station_id, f"malformed prediction {entry!r}") from e

    return UpstreamPrediction(
        time=moment,
        height_ft=height,
        tide_type=_TYPE_CODES.get(entry.get("type")),
    )


class NoaaTideClient:
    """
    HTTP client for NOAA high/low tide predictions.

    The httpx.Client is injectable so tests can mount an httpx.MockTransport.
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_url: str = NOAA_DATAGETTER_URL,
        timeout: float = 30.0,
        application: str = "bike_path_flood_alert",
    ) -> None:
        self._client = http_client or httpx.Client(timeout=timeout)
        self.base_url = base_url
        self.application = application

    def fetch_predictions(
        self,
        station_id: str,
        begin_date: date,
        end_date: date,
    ) -> list[UpstreamPrediction]:
        params = {
            "product": "predictions",
            "application": self.application,
            "begin_date": begin_date.strftime(NOAA_DATE_FORMAT),
            "end_date": end_date.strftime(NOAA_DATE_FORMAT),
            "datum": "MLLW",
            "station": station_id,
            "time_zone": "lst_ldt",
            "units": "english",
            "interval": "hilo",
            "format": "json",
        }

        logger.info("Fetching tide predictions for %s, %s..%s", station_id, begin_date, end_date)
        try:
            response = self._client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamFetchError(station_id, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamFetchError(station_id, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise UpstreamFetchError(station_id, "response is not valid JSON") from e

        if not isinstance(payload, dict):
            raise UpstreamFetchError(station_id, "unexpected response shape")

        if "error" in payload:
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise UpstreamFetchError(station_id, message or "unknown upstream error")

        entries = payload.get("predictions")
        if not isinstance(entries, list):
            raise UpstreamFetchError(station_id, "response has no predictions")

        return [parse_prediction(station_id, entry) for entry in entries]

    def close(self) -> None:
        self._client.close()
