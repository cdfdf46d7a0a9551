from __future__ import annotations

import logging
import signal

import paho.mqtt.client as mqtt

from .channel import ConfigChannel
from .errors import SettingsError
from .listener import ConfigListener
from .logging_config import configure_logging
from .poller import PollLoop
from .publisher import Publisher
from .settings import Settings, get_settings
from .weather import WeatherClient

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> mqtt.Client:
    # paho v2 API (no deprecation warning)
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=settings.mqtt_client_id)
    if settings.has_credentials:
        client.username_pw_set(settings.mqtt_username, settings.mqtt_password)
        logger.info("Using MQTT credentials from env")
    else:
        logger.info("No MQTT credentials provided, connecting anonymously")
    return client


def build_loop(settings: Settings, client: mqtt.Client) -> PollLoop:
    channel = ConfigChannel(settings.default_configuration)
    ConfigListener(channel).attach(client)
    return PollLoop(
        channel=channel,
        weather=WeatherClient(timeout=settings.http_timeout),
        publisher=Publisher(client),
    )


def main() -> int:
    try:
        settings = get_settings()
    except SettingsError as exc:
        configure_logging()
        logger.error("Cannot start", extra={"reason": str(exc)})
        return 1

    configure_logging(settings.log_level)
    logger.info("Starting Weather MQTT Publisher...")

    client = build_client(settings)
    loop = build_loop(settings, client)

    def _stop(signum, frame):
        loop.stop()

    signal.signal(signal.SIGTERM, _stop)

    # Connection errors surface through the listener callbacks.
    client.connect_async(settings.mqtt_host, settings.mqtt_port, keepalive=settings.mqtt_keepalive)
    client.loop_start()

    try:
        loop.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        client.loop_stop()
        client.disconnect()
    return 0
