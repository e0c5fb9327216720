"""Metric samplers — where the memory percentage comes from."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

import psutil

from ram_lavalamp.core.exceptions import MetricUnavailableError

logger = logging.getLogger(__name__)


class MetricSampler(Protocol):
    """Anything that can report the current utilisation percentage.

    ``sample()`` must be fast and non-blocking.  It returns ``None`` (or
    raises ``MetricUnavailableError``) when no reading is available.
    """

    def sample(self) -> float | None: ...


class PsutilMemorySampler:
    """Reads RAM utilisation from ``psutil.virtual_memory()``.

    The reading is cached for *min_interval* seconds so the engine can
    poll it every tick.

    Args:
        min_interval: Minimum seconds between two real measurements.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(self, min_interval: float = 0.5, clock: Callable[[], float] = time.monotonic) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._last_value: float | None = None
        self._last_time: float | None = None

    def sample(self) -> float:
        """Return the used-memory percentage in ``[0, 100]``.

        Raises:
            MetricUnavailableError: If psutil cannot query the system.
        """
        now = self._clock()
        if (
            self._last_value is not None
            and self._last_time is not None
            and now - self._last_time < self._min_interval
        ):
            return self._last_value

        try:
            memory = psutil.virtual_memory()
        except (OSError, psutil.Error) as exc:
            msg = "Memory statistics are unavailable"
            raise MetricUnavailableError(msg) from exc

        if memory.total <= 0:
            value = 0.0
        else:
            value = float(memory.percent)
        self._last_value = value
        self._last_time = now
        return value
