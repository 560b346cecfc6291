"""Tenacity retry policy for provider HTTP calls.

Only transport failures (connection errors, dropped connections, timeouts)
are retried. HTTP error statuses already surfaced as ExternalServiceError,
and aiohttp's own ClientResponseError, are final on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import ClientError, ClientResponseError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (ClientError, asyncio.TimeoutError)


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ClientResponseError):
        return False
    return isinstance(exc, TRANSIENT_ERRORS)


def retry_async(
    max_retries: int = 1,
    retry_delay: float = 0.5,
    backoff_factor: float = 2.0,
):
    """Build a retry decorator for an async provider call.

    The defaults allow one quick second attempt; after that the controller
    treats the call as having returned nothing.

    Args:
        max_retries: Attempts after the first one.
        retry_delay: Multiplier for the exponential wait, in seconds.
        backoff_factor: Exponential base for the wait between attempts.
    """
    return retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=retry_delay, exp_base=backoff_factor),
        retry=retry_if_exception(is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
