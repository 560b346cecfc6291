"""
Lightweight async circuit breaker for mapping provider calls.

While a provider keeps failing, interactive lookups are short-circuited
instead of waiting on timeouts; the controller sees the rejection as an
ordinary provider failure.
"""

from __future__ import annotations

import functools
import logging
import time
from enum import StrEnum

from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class BreakerState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


class CircuitOpen(ExternalServiceError):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, service: str, resets_in: float) -> None:
        super().__init__(
            f"Circuit breaker open for {service} (resets in {resets_in:.0f}s)",
            {"service": service, "resets_in": resets_in},
        )
        self.service = service
        self.resets_in = resets_in


class CircuitBreaker:
    """
    Three-state circuit breaker: closed -> open -> half-open -> closed.

    Parameters
    ----------
    service : str
        Provider name used in logs and error messages.
    failure_threshold : int
        Consecutive failures before the circuit opens.
    recovery_timeout : float
        Seconds the circuit stays open before one probe request is let through.
    """

    def __init__(
        self,
        service: str,
        *,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
    ) -> None:
        self.service = service
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.reset()

    def reset(self) -> None:
        self._failures = 0
        self._opened_at: float | None = None
        self._state = BreakerState.CLOSED

    @property
    def state(self) -> BreakerState:
        if (
            self._state is BreakerState.OPEN
            and self._opened_at is not None
            and time.monotonic() - self._opened_at >= self.recovery_timeout
        ):
            self._state = BreakerState.HALF_OPEN
        return self._state

    def _open(self) -> None:
        self._state = BreakerState.OPEN
        self._opened_at = time.monotonic()

    def record_success(self) -> None:
        if self._state is not BreakerState.CLOSED:
            logger.info("Circuit breaker CLOSED for %s", self.service)
        self.reset()

    def record_failure(self) -> None:
        self._failures += 1
        if self._state is BreakerState.HALF_OPEN:
            self._open()
            logger.warning("Circuit breaker re-OPEN for %s (probe failed)", self.service)
        elif (
            self._state is BreakerState.CLOSED
            and self._failures >= self.failure_threshold
        ):
            self._open()
            logger.warning(
                "Circuit breaker OPEN for %s after %d failures",
                self.service,
                self._failures,
            )

    def check(self) -> None:
        """Raise :class:`CircuitOpen` if calls are currently rejected."""
        if self.state is BreakerState.OPEN:
            elapsed = time.monotonic() - (self._opened_at or 0.0)
            raise CircuitOpen(self.service, max(0.0, self.recovery_timeout - elapsed))


nominatim_breaker = CircuitBreaker("Nominatim")
valhalla_breaker = CircuitBreaker("Valhalla")
mapillary_breaker = CircuitBreaker("Mapillary", recovery_timeout=60.0)

ALL_BREAKERS = (nominatim_breaker, valhalla_breaker, mapillary_breaker)


def with_circuit_breaker(breaker: CircuitBreaker):
    """Decorator that wraps an async function with circuit breaker protection."""

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            breaker.check()
            try:
                result = await fn(*args, **kwargs)
            except CircuitOpen:
                raise
            except Exception:
                breaker.record_failure()
                raise
            breaker.record_success()
            return result

        return wrapper

    return decorator
