from __future__ import annotations

import threading

from .models import Configuration


class ConfigChannel:
    """Single-slot cell holding the latest :class:`Configuration`.

    The listener thread writes, the poll loop reads. Values are immutable, so a
    read hands out the held instance itself and can never observe a partial
    update.
    """

    def __init__(self, initial: Configuration) -> None:
        self._lock = threading.Lock()
        self._value = initial
        self._version = 0

    def set(self, config: Configuration) -> None:
        with self._lock:
            self._value = config
            self._version += 1

    def get(self) -> Configuration:
        with self._lock:
            return self._value

    @property
    def version(self) -> int:
        """Number of updates applied since construction."""
        with self._lock:
            return self._version
