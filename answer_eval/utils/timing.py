"""
Per-stage timings reported in pipeline log records.

Stages may nest (parsing inside evaluation). Only outermost stages count
towards the overall duration so nested time is not reported twice.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator


class StageTimers:
    """
    Accumulate elapsed time per logical stage name.

    Use `timer(name)` as a context manager around stage blocks, then pass
    `log_extra(...)` as the ``extra`` of the log call that reports them.
    """

    def __init__(self, clock=time.perf_counter) -> None:
        self.totals: Dict[str, float] = {}
        self._clock = clock
        self._depth = 0
        self._outer: set[str] = set()

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """
        Measure and accumulate elapsed time for the given stage name.

        Args:
          name: Logical stage identifier (e.g. "extraction" or "evaluation").
        """
        if self._depth == 0:
            self._outer.add(name)
        self._depth += 1
        start_time = self._clock()
        try:
            yield
        finally:
            self._depth -= 1
            elapsed_time = self._clock() - start_time
            self.totals[name] = self.totals.get(name, 0.0) + elapsed_time

    def get_ms(self, name: str) -> int:
        return int(self.totals.get(name, 0.0) * 1000)

    def as_millis(self) -> Dict[str, int]:
        return {name: int(seconds * 1000) for name, seconds in self.totals.items()}

    @property
    def total_ms(self) -> int:
        """Wall time of the outermost stages, in milliseconds."""
        return int(sum(self.totals[name] for name in self._outer if name in self.totals) * 1000)

    def log_extra(self, **fields: Any) -> Dict[str, Any]:
        """
        Logging ``extra`` with ``duration_ms`` and, for multi-stage runs,
        ``timings``. Call after every timed block has exited.
        """
        extra: Dict[str, Any] = dict(fields)
        extra["duration_ms"] = self.total_ms
        if len(self.totals) > 1:
            extra["timings"] = self.as_millis()
        return extra
