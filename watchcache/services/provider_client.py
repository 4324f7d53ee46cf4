"""
This module provides the OpenWeatherMap client used by the refresh loop.
"""

from typing import Any, Dict, NamedTuple, Optional, Tuple

import httpx

from watchcache.config import get_settings
from watchcache.exceptions import FetchError
from watchcache.models.weather import DailyForecast, Forecast
from watchcache.services.field_mapping import (
    CURRENT_CONDITIONS_FIELDS,
    DAILY_FIELDS,
    POINT_FIELDS,
    FieldKind,
    coerce,
    lookup,
    map_fields,
)
from watchcache.utils.logger import setup_logger

logger = setup_logger(__name__)
settings = get_settings()


class FullForecast(NamedTuple):
    current: Forecast
    hourly: Tuple[Forecast, ...]
    daily: Tuple[DailyForecast, ...]


class ProviderClient:
    """
    Issues the two upstream requests and maps their bodies onto the models.

    fetch_current hits the lightweight current conditions endpoint;
    fetch_full hits the one-call endpoint with current, hourly and daily
    data. Both raise FetchError only when the request itself fails or the
    body is not a usable JSON envelope. Individual fields fall back to
    sentinels (see field_mapping).
    """

    CURRENT_PATH = "/weather"
    FULL_PATH = "/onecall"
    FULL_EXCLUDE = "minutely,alerts"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        timeout: Optional[float] = None,
        require_current_timestamp: Optional[bool] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.weather_api_base_url).rstrip("/")
        self.latitude = settings.latitude if latitude is None else latitude
        self.longitude = settings.longitude if longitude is None else longitude
        self.require_current_timestamp = (
            settings.require_current_timestamp
            if require_current_timestamp is None
            else require_current_timestamp
        )
        self.client = client or httpx.AsyncClient(
            timeout=settings.weather_api_timeout if timeout is None else timeout
        )

    async def close(self):
        await self.client.aclose()

    def _params(self, **extra: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "lat": self.latitude,
            "lon": self.longitude,
            "appid": self.api_key,
            "units": "metric",
        }
        params.update(extra)
        return params

    def _redact(self, text: str) -> str:
        if self.api_key:
            return text.replace(self.api_key, "***")
        return text

    async def _get_document(
        self, endpoint: str, path: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        try:
            response = await self.client.get(f"{self.base_url}{path}", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"{endpoint} request returned HTTP {e.response.status_code}",
                endpoint=endpoint,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(
                f"{endpoint} request failed: {type(e).__name__}: {self._redact(str(e))}",
                endpoint=endpoint,
            ) from e

        try:
            document = response.json()
        except ValueError as e:
            raise FetchError(
                f"{endpoint} response is not valid JSON", endpoint=endpoint
            ) from e

        if not isinstance(document, dict):
            raise FetchError(
                f"{endpoint} response is not a JSON object", endpoint=endpoint
            )
        return document

    async def fetch_current(self) -> Forecast:
        """
        Fetch current conditions only.

        Returns:
            Forecast for now, with sentinels for missing fields
        """
        document = await self._get_document("current", self.CURRENT_PATH, self._params())

        if self.require_current_timestamp and (
            coerce(lookup(document, ("dt",)), FieldKind.TIMESTAMP) is None
        ):
            raise FetchError(
                "current response has no usable timestamp", endpoint="current"
            )

        return Forecast(**map_fields(document, CURRENT_CONDITIONS_FIELDS))

    async def fetch_full(self) -> FullForecast:
        """
        Fetch current conditions with the hourly and daily forecasts.

        Returns:
            FullForecast with the current reading and both sequences in
            provider order
        """
        document = await self._get_document(
            "full", self.FULL_PATH, self._params(exclude=self.FULL_EXCLUDE)
        )

        hourly_items = document.get("hourly")
        daily_items = document.get("daily")
        if not isinstance(hourly_items, list) or not isinstance(daily_items, list):
            raise FetchError(
                "full response lacks hourly or daily arrays", endpoint="full"
            )

        current = Forecast(**map_fields(document.get("current"), POINT_FIELDS))
        hourly = tuple(Forecast(**map_fields(item, POINT_FIELDS)) for item in hourly_items)
        daily = tuple(
            DailyForecast(**map_fields(item, DAILY_FIELDS)) for item in daily_items
        )

        logger.debug(
            "Parsed full forecast",
            extra={
                "event": "provider_parse",
                "endpoint": "full",
                "hourly_entries": len(hourly),
                "daily_entries": len(daily),
            },
        )
        return FullForecast(current=current, hourly=hourly, daily=daily)
