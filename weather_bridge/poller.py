"""Fixed-interval fetch and publish loop driven by the live configuration."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .channel import ConfigChannel
from .errors import WeatherBridgeError
from .models import Configuration
from .publisher import CURRENT_TOPIC, FORECAST_TOPIC, Publisher
from .weather import WeatherClient

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


@dataclass
class WaitState:
    target: int
    elapsed: int = 0

    @property
    def done(self) -> bool:
        return self.elapsed >= self.target


class PollLoop:
    """Waits out the configured interval, then fetches and publishes once.

    During the wait only a change of ``interval_seconds`` is acted on: the wait
    restarts from zero with the live configuration, coordinate included. A
    coordinate-only update is picked up at the next cycle's snapshot.
    """

    def __init__(
        self,
        channel: ConfigChannel,
        weather: WeatherClient,
        publisher: Publisher,
        sleep: Callable[[float], None] = time.sleep,
        tick_seconds: float = TICK_SECONDS,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.channel = channel
        self.weather = weather
        self.publisher = publisher
        self.tick_seconds = tick_seconds
        self.stop_event = stop_event or threading.Event()
        self.restart_count = 0
        self.cycle_count = 0
        self._sleep = sleep

    def stop(self) -> None:
        self.stop_event.set()

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def run_forever(self) -> None:
        logger.info("Starting poll loop")
        while not self.stopped:
            self.run_once()
        logger.info("Poll loop stopped", extra={"reason": "stop requested"})

    def run_once(self) -> None:
        current = self.wait(self.channel.get())
        if self.stopped:
            return
        self.fetch_and_publish(current)
        self.cycle_count += 1

    def wait(self, current: Configuration) -> Configuration:
        """Block for ``current.interval_seconds`` ticks; return the configuration to fetch with."""
        state = WaitState(target=current.interval_seconds)
        while not state.done and not self.stopped:
            self._sleep(self.tick_seconds)
            latest = self.channel.get()
            if latest.interval_seconds != current.interval_seconds:
                current = latest
                state = WaitState(target=current.interval_seconds)
                self.restart_count += 1
                logger.info(
                    "Interval changed, restarting wait",
                    extra={
                        "interval_seconds": current.interval_seconds,
                        "restart_count": self.restart_count,
                    },
                )
            else:
                state.elapsed += 1
        return current

    def fetch_and_publish(self, config: Configuration) -> None:
        coordinate = config.coordinate
        location = {"latitude": coordinate.latitude, "longitude": coordinate.longitude}

        try:
            current = self.weather.fetch_current(coordinate)
        except WeatherBridgeError as exc:
            logger.error("Failed to fetch weather", extra={**location, "reason": str(exc)})
        else:
            self.publisher.publish(CURRENT_TOPIC, current.model_dump_json())

        if self.stopped:
            return

        try:
            forecast = self.weather.fetch_forecast(coordinate)
        except WeatherBridgeError as exc:
            logger.error("Failed to fetch forecast", extra={**location, "reason": str(exc)})
        else:
            logger.debug("Forecast: %s", "; ".join(forecast.labelled_days()), extra=location)
            self.publisher.publish(FORECAST_TOPIC, forecast.model_dump_json())


__all__ = ["PollLoop", "WaitState", "TICK_SECONDS"]
