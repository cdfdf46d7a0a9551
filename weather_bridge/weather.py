from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError
from requests import Response

from .errors import DecodeError, FetchError, MissingDataError
from .models import (
    Coordinate,
    CurrentWeather,
    CurrentWeatherResponse,
    DailyForecast,
    ForecastResponse,
)

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
FORECAST_DAYS = 5

_Envelope = TypeVar("_Envelope", bound=BaseModel)


class WeatherClient:
    """Open-Meteo client for current conditions and the 5-day daily forecast.

    Each call is a single GET with no retry. ``timeout`` of ``None`` means the
    request may block until the server answers.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = OPEN_METEO_URL,
        timeout: Optional[float] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.base_url = base_url
        self.timeout = timeout

    def fetch_current(self, coordinate: Coordinate) -> CurrentWeather:
        params = {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "current_weather": "true",
        }
        envelope = self._get(params, CurrentWeatherResponse)
        if envelope.current_weather is None:
            raise MissingDataError("response has no current_weather")
        return envelope.current_weather

    def fetch_forecast(self, coordinate: Coordinate) -> DailyForecast:
        params = {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "daily": "weathercode,temperature_2m_max,temperature_2m_min",
            "forecast_days": FORECAST_DAYS,
            "timezone": "auto",
        }
        return self._get(params, ForecastResponse).daily

    def _get(self, params: dict, envelope: Type[_Envelope]) -> _Envelope:
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"request failed: {exc}") from exc
        self._raise_for_status(response)
        try:
            return envelope.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(
                f"unexpected {envelope.__name__} payload: {exc.error_count()} error(s)"
            ) from exc

    @staticmethod
    def _raise_for_status(response: Response) -> None:
        if response.status_code < 400:
            return
        reason = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            reason = body.get("reason")
        logger.debug("Open-Meteo returned %s", response.status_code, extra={"reason": reason})
        raise FetchError(f"HTTP {response.status_code}: {reason or response.reason}")


__all__ = ["WeatherClient", "OPEN_METEO_URL", "FORECAST_DAYS"]
