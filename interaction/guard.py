"""Provider call wrapper that turns every failure into "no data"."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_provider(
    awaitable: Awaitable[T],
    *,
    service_name: str,
    timeout: float | None = None,
) -> T | None:
    """Await a provider call and return None on any failure.

    Timeouts, HTTP errors and open circuit breakers are logged and collapsed
    into the same empty outcome as a successful call with no data.
    Cancellation always propagates.
    """
    try:
        if timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError:
        logger.warning("%s timed out after %.1fs", service_name, timeout or 0.0)
        return None
    except Exception as exc:
        logger.warning("%s failed: %s", service_name, exc)
        return None
