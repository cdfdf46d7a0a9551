from __future__ import annotations

import json

import pytest
import requests

from weather_bridge.errors import DecodeError, FetchError, MissingDataError
from weather_bridge.models import Coordinate
from weather_bridge.weather import OPEN_METEO_URL, WeatherClient

from .conftest import CURRENT_PAYLOAD, FORECAST_PAYLOAD

COORDINATE = Coordinate(latitude=52.0155872, longtitude=4.3497796)


def test_fetch_current_decodes_payload(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, json=CURRENT_PAYLOAD)

    weather = WeatherClient().fetch_current(COORDINATE)

    assert weather.temperature == 9.1
    assert weather.windspeed == 12.3
    assert weather.winddirection == 200.0
    assert weather.time == "2024-01-01T00:00"
    query = requests_mock.last_request.qs
    assert query["latitude"] == ["52.0155872"]
    assert query["longitude"] == ["4.3497796"]
    assert query["current_weather"] == ["true"]


def test_fetch_current_serializes_only_published_fields(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, json=CURRENT_PAYLOAD)

    weather = WeatherClient().fetch_current(COORDINATE)

    assert json.loads(weather.model_dump_json()) == {
        "temperature": 9.1,
        "windspeed": 12.3,
        "winddirection": 200.0,
        "time": "2024-01-01T00:00",
    }


@pytest.mark.parametrize("body", [{"latitude": 1.0}, {"current_weather": None}])
def test_fetch_current_without_current_weather_is_missing_data(requests_mock, body) -> None:
    requests_mock.get(OPEN_METEO_URL, json=body)

    with pytest.raises(MissingDataError):
        WeatherClient().fetch_current(COORDINATE)


def test_fetch_current_malformed_json_is_decode_error(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, text="<html>oops</html>")

    with pytest.raises(DecodeError):
        WeatherClient().fetch_current(COORDINATE)


def test_fetch_current_wrong_types_is_decode_error(requests_mock) -> None:
    requests_mock.get(
        OPEN_METEO_URL,
        json={"current_weather": {"temperature": "warm", "windspeed": 1, "winddirection": 2, "time": "t"}},
    )

    with pytest.raises(DecodeError):
        WeatherClient().fetch_current(COORDINATE)


def test_network_failure_is_fetch_error(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, exc=requests.ConnectionError("refused"))

    with pytest.raises(FetchError):
        WeatherClient().fetch_current(COORDINATE)


def test_http_error_status_carries_api_reason(requests_mock) -> None:
    requests_mock.get(
        OPEN_METEO_URL,
        status_code=400,
        json={"error": True, "reason": "Latitude must be in range of -90 to 90°."},
    )

    with pytest.raises(FetchError, match="Latitude must be in range"):
        WeatherClient().fetch_forecast(Coordinate(latitude=100.0, longtitude=0.0))


def test_fetch_forecast_requests_five_daily_series(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, json=FORECAST_PAYLOAD)

    forecast = WeatherClient().fetch_forecast(COORDINATE)

    assert forecast.time == FORECAST_PAYLOAD["daily"]["time"]
    assert forecast.weathercode == [3, 61, 0, 71, 95]
    query = requests_mock.last_request.qs
    assert query["daily"] == ["weathercode,temperature_2m_max,temperature_2m_min"]
    assert query["forecast_days"] == ["5"]
    assert query["timezone"] == ["auto"]
    assert "current_weather" not in query


def test_fetch_forecast_without_daily_is_decode_error(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, json={"latitude": 1.0})

    with pytest.raises(DecodeError):
        WeatherClient().fetch_forecast(COORDINATE)


def test_fetch_forecast_rejects_out_of_range_weathercode(requests_mock) -> None:
    body = json.loads(json.dumps(FORECAST_PAYLOAD))
    body["daily"]["weathercode"][0] = 300
    requests_mock.get(OPEN_METEO_URL, json=body)

    with pytest.raises(DecodeError):
        WeatherClient().fetch_forecast(COORDINATE)


def test_timeout_is_passed_to_session(requests_mock) -> None:
    requests_mock.get(OPEN_METEO_URL, json=CURRENT_PAYLOAD)

    WeatherClient(timeout=2.5).fetch_current(COORDINATE)

    assert requests_mock.last_request.timeout == 2.5
