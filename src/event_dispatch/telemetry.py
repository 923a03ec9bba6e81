"""Telemetry helpers used for collecting dispatch metrics."""

from __future__ import annotations

import threading
from collections import Counter
from contextlib import contextmanager
from time import perf_counter
from typing import Dict, Generator

from .logging import get_logger

LOGGER = get_logger("telemetry")


class MetricsCollector:
    """Collects counters and timing metrics in-memory.

    Safe to share between threads: every update holds one lock, so counts
    from concurrent emits are exact.
    """

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.timings: Dict[str, float] = {}
        self._lock = threading.Lock()

    def increment(self, name: str, value: int = 1) -> None:
        with self._lock:
            self.counters[name] += value
            current = self.counters[name]
        LOGGER.debug("counter=%s value=%s", name, current)

    @contextmanager
    def time(self, name: str) -> Generator[None, None, None]:
        start = perf_counter()
        try:
            yield
        finally:
            elapsed = perf_counter() - start
            with self._lock:
                self.timings[name] = elapsed
            LOGGER.debug("timing=%s duration=%.6f", name, elapsed)

    def snapshot(self) -> Dict[str, object]:
        """Return a plain copy of the collected counters and timings."""

        with self._lock:
            return {"counters": dict(self.counters), "timings": dict(self.timings)}

    def reset(self) -> None:
        with self._lock:
            self.counters.clear()
            self.timings.clear()
