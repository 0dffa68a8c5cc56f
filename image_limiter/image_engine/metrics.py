"""Decode outcome metrics.

Each bounded decode records one request and exactly one outcome: decoded,
or failed with a reason. Clamped decodes (the total-pixel limit shrank the
edge-constrained size) are counted on top of that. Durations are kept per
call so callers can inspect decode latency.

Usage:
    from image_limiter.image_engine.metrics import metrics
    with metrics.decode_timer():
        ...
    metrics.record_failure("missing_metadata")
    metrics.count(metrics.FAILED_PREFIX + "missing_metadata")
"""

from __future__ import annotations

import time
from collections import Counter
from contextlib import contextmanager
from threading import Lock
from typing import Any


class DecodeMetrics:
    REQUESTS = "bounded_decoder.requests"
    DECODED = "bounded_decoder.decoded"
    CLAMPED = "bounded_decoder.clamped"
    FAILED_PREFIX = "bounded_decoder.failed."
    DURATION = "bounded_decoder.decode_duration"

    def __init__(self) -> None:
        self._outcomes: Counter[str] = Counter()
        self._durations: list[float] = []
        self._lock = Lock()

    def _bump(self, key: str) -> None:
        with self._lock:
            self._outcomes[key] += 1

    def record_request(self) -> None:
        self._bump(self.REQUESTS)

    def record_decoded(self, clamped: bool = False) -> None:
        self._bump(self.DECODED)
        if clamped:
            self._bump(self.CLAMPED)

    def record_failure(self, reason: str) -> None:
        self._bump(self.FAILED_PREFIX + reason)

    @contextmanager
    def decode_timer(self):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            with self._lock:
                self._durations.append(elapsed)

    def count(self, key: str) -> int:
        with self._lock:
            return self._outcomes[key]

    def failures(self) -> dict[str, int]:
        """Failure counts keyed by reason."""
        n = len(self.FAILED_PREFIX)
        with self._lock:
            return {k[n:]: v for k, v in self._outcomes.items() if k.startswith(self.FAILED_PREFIX)}

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._outcomes),
                "timings": {self.DURATION: list(self._durations)} if self._durations else {},
            }

    def reset(self) -> None:
        with self._lock:
            self._outcomes.clear()
            self._durations.clear()


metrics = DecodeMetrics()
