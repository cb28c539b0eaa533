"""
Circuit breaker for upstream calls.

Opens after `failure_threshold` consecutive failures and rejects calls
until `recovery_time_seconds` have passed. After that one trial call is
let through (half-open); its failure reopens the breaker at once, its
success closes it.

Dependencies: threading, time (stdlib)
System role: Failure isolation for the JWKS endpoint
"""

import enum
import threading
import time
from typing import Callable


class BreakerState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Circuit breaker to prevent cascading failures."""

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_time_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_time = recovery_time_seconds
        self._clock = clock
        self._failures = 0
        self._open_time: float | None = None
        self._half_open = False
        self._lock = threading.Lock()

    @property
    def state(self) -> BreakerState:
        with self._lock:
            return self._state_locked()

    def _state_locked(self) -> BreakerState:
        if self._open_time is None:
            return BreakerState.HALF_OPEN if self._half_open else BreakerState.CLOSED
        if self._clock() - self._open_time >= self.recovery_time:
            self._open_time = None
            self._half_open = True
            return BreakerState.HALF_OPEN
        return BreakerState.OPEN

    def is_open(self) -> bool:
        """True while calls must be rejected."""
        with self._lock:
            return self._state_locked() is BreakerState.OPEN

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            if self._half_open or self._failures >= self.failure_threshold:
                self._open_time = self._clock()
                self._half_open = False

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._open_time = None
            self._half_open = False

    @property
    def failure_count(self) -> int:
        return self._failures
