from __future__ import annotations

from types import SimpleNamespace
from typing import Callable, Dict, List, Optional, Tuple

import paho.mqtt.client as mqtt
import pytest

from weather_bridge.models import Configuration, Coordinate
from weather_bridge.settings import get_settings

CURRENT_PAYLOAD = {
    "latitude": 52.0,
    "longitude": 4.34,
    "current_weather": {
        "temperature": 9.1,
        "windspeed": 12.3,
        "winddirection": 200,
        "weathercode": 3,
        "is_day": 0,
        "time": "2024-01-01T00:00",
    },
}

FORECAST_PAYLOAD = {
    "latitude": 52.0,
    "longitude": 4.34,
    "timezone": "Europe/Amsterdam",
    "daily": {
        "time": ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05"],
        "temperature_2m_max": [8.5, 9.0, 7.25, 6.0, 10.5],
        "temperature_2m_min": [2.0, 3.5, 1.0, -0.5, 4.0],
        "weathercode": [3, 61, 0, 71, 95],
    },
}


class FakeMqttClient:
    """Stands in for ``paho.mqtt.client.Client`` in unit tests."""

    def __init__(self, rc: int = mqtt.MQTT_ERR_SUCCESS) -> None:
        self.rc = rc
        self.connected = True
        self.published: List[Tuple[str, str, int, bool]] = []
        self.subscriptions: List[Tuple[str, int]] = []
        self.loop_stopped = 0

    def publish(self, topic, payload=None, qos=0, retain=False):
        self.published.append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self.rc)

    def is_connected(self):
        return self.connected

    def subscribe(self, topic, qos=0):
        self.subscriptions.append((topic, qos))
        return (mqtt.MQTT_ERR_SUCCESS, 1)

    def loop_stop(self):
        self.loop_stopped += 1


class ScriptedSleep:
    """Replaces ``time.sleep``; runs a scheduled action on the n-th call."""

    def __init__(self, actions: Optional[Dict[int, Callable[[], None]]] = None) -> None:
        self.calls = 0
        self.actions = actions or {}

    def __call__(self, seconds: float) -> None:
        self.calls += 1
        action = self.actions.get(self.calls)
        if action is not None:
            action()


@pytest.fixture
def default_config() -> Configuration:
    return Configuration(
        interval_seconds=10,
        coordinate=Coordinate(latitude=52.0155872, longtitude=4.3497796),
    )


@pytest.fixture
def fake_client() -> FakeMqttClient:
    return FakeMqttClient()


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
