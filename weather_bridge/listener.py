from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import paho.mqtt.client as mqtt

from .channel import ConfigChannel
from .errors import DecodeError, TransportError
from .models import decode_configuration

logger = logging.getLogger(__name__)

CONFIG_TOPIC = "weather/configs"


class ConfigListener:
    """Feeds configuration messages from the broker into a :class:`ConfigChannel`.

    Callbacks run on the paho network thread. A transport failure stops that
    thread for good: ``failed`` is set and ``error`` keeps the cause, while the
    poll loop keeps running on the last accepted configuration.
    """

    def __init__(self, channel: ConfigChannel, topic: str = CONFIG_TOPIC, qos: int = 1) -> None:
        self.channel = channel
        self.topic = topic
        self.qos = qos
        self.failed = threading.Event()
        self.error: Optional[TransportError] = None
        self._subscribed = False

    def attach(self, client: mqtt.Client) -> "ConfigListener":
        client.on_connect = self.on_connect
        client.on_message = self.on_message
        client.on_disconnect = self.on_disconnect
        client.on_connect_fail = self.on_connect_fail
        return self

    # paho CallbackAPIVersion.VERSION2 signatures

    def on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            self._terminate(client, f"connect refused: {reason_code}")
            return
        logger.info("Connected to broker", extra={"reason": str(reason_code)})
        if self._subscribed:
            return
        client.subscribe(self.topic, qos=self.qos)
        self._subscribed = True
        logger.info("Subscribed to configuration topic", extra={"topic": self.topic})

    def on_connect_fail(self, client, userdata) -> None:
        self._terminate(client, "could not connect to broker")

    def on_message(self, client, userdata, message: Any) -> None:
        if message.topic != self.topic:
            return
        self.handle_payload(message.payload)

    def on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            self._terminate(client, f"connection lost: {reason_code}")
        else:
            logger.info("Disconnected from broker")

    def handle_payload(self, payload: bytes) -> bool:
        try:
            config = decode_configuration(payload)
        except DecodeError as exc:
            logger.warning("Invalid config format received", extra={"reason": str(exc)})
            return False
        self.channel.set(config)
        logger.info(
            "Received new config %s",
            config.to_json(),
            extra={
                "interval_seconds": config.interval_seconds,
                "latitude": config.coordinate.latitude,
                "longitude": config.coordinate.longitude,
            },
        )
        return True

    def _terminate(self, client, reason: str) -> None:
        self.error = TransportError(reason)
        logger.error("MQTT error, configuration listener stopped", extra={"reason": reason})
        self.failed.set()
        client.loop_stop()


__all__ = ["ConfigListener", "CONFIG_TOPIC"]
