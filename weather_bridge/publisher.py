from __future__ import annotations

import logging

import paho.mqtt.client as mqtt

from .errors import PublishError

logger = logging.getLogger(__name__)

CURRENT_TOPIC = "weather/current"
FORECAST_TOPIC = "weather/estimation"


class Publisher:
    """Retained, QoS 1 publishing that never raises into the caller."""

    def __init__(self, client: mqtt.Client, qos: int = 1, retain: bool = True, echo: bool = True) -> None:
        self.client = client
        self.qos = qos
        self.retain = retain
        self.echo = echo

    def publish(self, topic: str, payload: str) -> bool:
        if self.echo:
            print(payload, flush=True)
        try:
            self._send(topic, payload)
        except PublishError as exc:
            logger.error("Failed to publish to MQTT", extra={"topic": topic, "reason": str(exc)})
            return False
        logger.info("Published weather to MQTT", extra={"topic": topic})
        return True

    def _send(self, topic: str, payload: str) -> None:
        # paho queues QoS 1 messages published while offline and never drops them.
        if not self.client.is_connected():
            raise PublishError("not connected to broker")
        try:
            info = self.client.publish(topic, payload, qos=self.qos, retain=self.retain)
        except ValueError as exc:
            raise PublishError(str(exc)) from exc
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(mqtt.error_string(info.rc))


__all__ = ["Publisher", "CURRENT_TOPIC", "FORECAST_TOPIC"]
