"""Wire models for configuration messages and Open-Meteo payloads."""

from __future__ import annotations

from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DecodeError

UInt8 = Annotated[int, Field(ge=0, le=255)]
UInt64 = Annotated[int, Field(ge=0, le=2**64 - 1)]


class Coordinate(BaseModel):
    """A point to query. Values are passed through without range checks."""

    model_config = ConfigDict(frozen=True, strict=True)

    latitude: float
    # Existing publishers send this misspelled key.
    longitude: float = Field(alias="longtitude")


class Configuration(BaseModel):
    """Live operating parameters of the poll loop."""

    model_config = ConfigDict(frozen=True, strict=True)

    interval_seconds: UInt64
    coordinate: Coordinate

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class CurrentWeather(BaseModel):
    temperature: float
    windspeed: float
    winddirection: float
    time: str


class DailyForecast(BaseModel):
    """Index-aligned daily series; index i of every list describes day i."""

    time: List[str]
    temperature_2m_max: List[float]
    temperature_2m_min: List[float]
    weathercode: List[UInt8]

    def labelled_days(self) -> List[str]:
        return [
            f"{day}: {describe_weather_code(code)}"
            for day, code in zip(self.time, self.weathercode)
        ]


class CurrentWeatherResponse(BaseModel):
    current_weather: Optional[CurrentWeather] = None


class ForecastResponse(BaseModel):
    daily: DailyForecast


def decode_configuration(payload: Union[bytes, str]) -> Configuration:
    """Parse a ``weather/configs`` payload, raising :class:`DecodeError` on any mismatch."""
    try:
        return Configuration.model_validate_json(payload)
    except ValidationError as exc:
        raise DecodeError(f"invalid configuration: {exc.error_count()} error(s)") from exc


_WEATHER_CODE_RANGES = (
    (0, 0, "Clear sky"),
    (1, 1, "Mainly clear"),
    (2, 2, "Partly cloudy"),
    (3, 3, "Overcast"),
    (45, 45, "Fog"),
    (48, 48, "Fog"),
    (51, 57, "Drizzle"),
    (61, 67, "Rain"),
    (71, 77, "Snow"),
    (80, 82, "Showers"),
    (95, 95, "Thunderstorm"),
)


def describe_weather_code(code: int) -> str:
    """Human-readable label for a WMO weather code."""
    for low, high, label in _WEATHER_CODE_RANGES:
        if low <= code <= high:
            return label
    return "Unknown"


__all__ = [
    "Coordinate",
    "Configuration",
    "CurrentWeather",
    "DailyForecast",
    "CurrentWeatherResponse",
    "ForecastResponse",
    "decode_configuration",
    "describe_weather_code",
]
