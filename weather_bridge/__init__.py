"""Republish Open-Meteo weather for one coordinate as retained MQTT messages."""

__version__ = "0.1.0"
