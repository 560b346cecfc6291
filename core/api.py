"""FastAPI endpoint helpers."""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING

from fastapi import HTTPException, status

from core.exceptions import (
    ExternalServiceException,
    RateLimitException,
    ResourceNotFoundException,
    ValidationException,
    WayfinderException,
)

if TYPE_CHECKING:
    from collections.abc import Callable

# Checked in order; subclasses must come before their bases.
ERROR_STATUS: tuple[tuple[type[WayfinderException], int, int], ...] = (
    (ValidationException, status.HTTP_400_BAD_REQUEST, logging.WARNING),
    (ResourceNotFoundException, status.HTTP_404_NOT_FOUND, logging.INFO),
    (RateLimitException, status.HTTP_429_TOO_MANY_REQUESTS, logging.WARNING),
    (ExternalServiceException, status.HTTP_502_BAD_GATEWAY, logging.ERROR),
    (WayfinderException, status.HTTP_500_INTERNAL_SERVER_ERROR, logging.ERROR),
)


def _classify(exc: WayfinderException) -> tuple[int, int]:
    for exc_type, code, level in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code, level
    return status.HTTP_500_INTERNAL_SERVER_ERROR, logging.ERROR


def to_http_exception(exc: WayfinderException) -> HTTPException:
    code, _ = _classify(exc)
    detail = exc.message
    if code == status.HTTP_502_BAD_GATEWAY:
        detail = f"External service error: {exc.message}"
    return HTTPException(status_code=code, detail=detail)


def api_route(logger: logging.Logger):
    """
    Decorator for map API endpoints that turns application errors into
    HTTP responses.

    HTTPException passes through untouched, WayfinderError subclasses map
    through ERROR_STATUS, and anything else becomes a logged 500.

    Usage:
        @router.post("/api/map/route")
        @api_route(logger)
        async def start_route(controller: Controller):
            ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except WayfinderException as e:
                _, level = _classify(e)
                logger.log(
                    level,
                    "%s failed with %s: %s",
                    func.__name__,
                    type(e).__name__,
                    e.message,
                    exc_info=level >= logging.ERROR,
                )
                raise to_http_exception(e) from e
            except Exception as e:
                logger.exception("Unexpected error in %s", func.__name__)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=str(e),
                ) from e

        return wrapper

    return decorator
