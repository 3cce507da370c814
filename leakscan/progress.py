#!/usr/bin/env python3
"""Thread-safe progress accounting for a scan run."""

import logging
import threading
from typing import Callable, Optional, Tuple


logger = logging.getLogger(__name__)

ProgressListener = Callable[[int, int], None]


class ProgressTracker:
    """
    Counts completed targets out of a fixed total.

    advance() is the only way processed grows, and both advance() and
    snapshot() run under the same lock. The listener, if any, is called inside
    that lock so observers see counts in increasing order. A failing listener is
    logged and never undoes the count.
    """

    def __init__(self, total: int, listener: Optional[ProgressListener] = None):
        if total < 0:
            raise ValueError(f"total must be non-negative, got {total}")
        self._total = total
        self._processed = 0
        self._failures = 0
        self._listener = listener
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        return self._total

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    @property
    def is_complete(self) -> bool:
        with self._lock:
            return self._processed == self._total

    def advance(self, failed: bool = False) -> int:
        """Mark one target as finished and return the new processed count."""
        with self._lock:
            if self._processed >= self._total:
                raise RuntimeError(f"Progress already at {self._processed}/{self._total}")
            self._processed += 1
            if failed:
                self._failures += 1
            current = self._processed
            if self._listener is not None:
                try:
                    self._listener(current, self._total)
                except Exception as e:
                    logger.error(f"Progress listener failed at {current}/{self._total}: {e}")
            return current

    def snapshot(self) -> Tuple[int, int]:
        with self._lock:
            return self._processed, self._total

    def __repr__(self) -> str:
        processed, total = self.snapshot()
        return f"ProgressTracker({processed}/{total})"
