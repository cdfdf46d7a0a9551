from __future__ import annotations


class WeatherBridgeError(RuntimeError):
    """Base error."""


class SettingsError(WeatherBridgeError):
    """Required configuration is missing or unreadable."""


class FetchError(WeatherBridgeError):
    """The weather API could not be reached or answered with an error status."""


class DecodeError(WeatherBridgeError):
    """A payload was not valid JSON or did not match the expected schema."""


class MissingDataError(WeatherBridgeError):
    """The weather API omitted a field it is expected to return."""


class PublishError(WeatherBridgeError):
    """The broker rejected a publish or the connection was unavailable."""


class TransportError(WeatherBridgeError):
    """The broker connection dropped."""


__all__ = [
    "WeatherBridgeError",
    "SettingsError",
    "FetchError",
    "DecodeError",
    "MissingDataError",
    "PublishError",
    "TransportError",
]
