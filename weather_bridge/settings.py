from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .errors import SettingsError
from .models import Configuration, Coordinate

_HOST_ENV = "MQTT_HOST"
_USERNAME_ENV = "MQTT_USERNAME"
_PASSWORD_ENV = "MQTT_PASSWORD"
_CONFIG_FILE_ENV = "WEATHER_BRIDGE_CONFIG"
_HTTP_TIMEOUT_ENV = "WEATHER_HTTP_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_PORT = 1883
DEFAULT_CLIENT_ID = "weather-client"
DEFAULT_KEEPALIVE = 60
DEFAULT_INTERVAL_SECONDS = 10
DEFAULT_LATITUDE = 52.0155872
DEFAULT_LONGITUDE = 4.3497796


@dataclass(frozen=True)
class Settings:
    mqtt_host: str
    mqtt_port: int
    mqtt_client_id: str
    mqtt_keepalive: int
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    default_configuration: Configuration
    http_timeout: Optional[float]
    log_level: str

    @property
    def has_credentials(self) -> bool:
        return self.mqtt_username is not None and self.mqtt_password is not None


def _read_optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _load_file(path: Optional[str]) -> Dict[str, Any]:
    if path is None:
        return {}
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        raise SettingsError(f"cannot read settings file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(f"settings file {path} must contain a mapping")
    return data


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsError(f"settings section '{name}' must be a mapping")
    return section


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise SettingsError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{name} must be an integer") from exc


def _read_timeout(file_value: Any) -> Optional[float]:
    raw = _read_optional_env(_HTTP_TIMEOUT_ENV)
    value = raw if raw is not None else file_value
    if value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{_HTTP_TIMEOUT_ENV} must be a number") from exc
    return parsed if parsed > 0 else None


def _default_configuration(defaults: Dict[str, Any]) -> Configuration:
    coordinate = _section(defaults, "coordinate")
    try:
        return Configuration(
            interval_seconds=defaults.get("interval_seconds", DEFAULT_INTERVAL_SECONDS),
            coordinate=Coordinate(
                latitude=coordinate.get("latitude", DEFAULT_LATITUDE),
                longtitude=coordinate.get("longtitude", DEFAULT_LONGITUDE),
            ),
        )
    except ValidationError as exc:
        raise SettingsError(f"invalid default configuration: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    """Read settings from the environment and the optional YAML file.

    Raises :class:`SettingsError` when ``MQTT_HOST`` is unset or the file is
    unusable. Environment values take precedence over the file.
    """
    data = _load_file(_read_optional_env(_CONFIG_FILE_ENV))
    mqtt_section = _section(data, "mqtt")
    http_section = _section(data, "http")

    host = _read_optional_env(_HOST_ENV)
    if host is None:
        raise SettingsError(f"{_HOST_ENV} must be set")

    log_level = _read_optional_env(_LOG_LEVEL_ENV) or str(data.get("log_level") or "INFO")

    return Settings(
        mqtt_host=host,
        mqtt_port=_as_int(mqtt_section.get("port", DEFAULT_PORT), "mqtt.port"),
        mqtt_client_id=str(mqtt_section.get("client_id", DEFAULT_CLIENT_ID)),
        mqtt_keepalive=_as_int(mqtt_section.get("keepalive", DEFAULT_KEEPALIVE), "mqtt.keepalive"),
        mqtt_username=os.getenv(_USERNAME_ENV),
        mqtt_password=os.getenv(_PASSWORD_ENV),
        default_configuration=_default_configuration(_section(data, "defaults")),
        http_timeout=_read_timeout(http_section.get("timeout")),
        log_level=log_level.upper(),
    )
