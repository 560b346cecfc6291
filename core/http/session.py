"""Shared aiohttp session for the mapping provider clients.

Nominatim, Valhalla and Mapillary requests all go through one
ClientSession per event loop. The session is rebuilt lazily when the loop
that owns it is gone, which happens between test cases and on app reload.
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from config import get_nominatim_user_agent
from core.constants import (
    HTTP_CONNECTION_LIMIT,
    HTTP_TIMEOUT_CONNECT,
    HTTP_TIMEOUT_SOCK_READ,
    HTTP_TIMEOUT_TOTAL,
)

logger = logging.getLogger(__name__)


class SessionState:
    """Holds the process-wide session and the loop it was created on."""

    session: aiohttp.ClientSession | None = None
    loop: asyncio.AbstractEventLoop | None = None


def _build_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(
            total=HTTP_TIMEOUT_TOTAL,
            connect=HTTP_TIMEOUT_CONNECT,
            sock_read=HTTP_TIMEOUT_SOCK_READ,
        ),
        connector=aiohttp.TCPConnector(limit=HTTP_CONNECTION_LIMIT),
        headers={
            "User-Agent": get_nominatim_user_agent(),
            "Accept": "application/json",
        },
    )


async def _discard_stale(session: aiohttp.ClientSession) -> None:
    owner = SessionState.loop
    logger.info("Event loop changed; replacing provider HTTP session")
    if owner is not None and owner.is_closed():
        # Closing would schedule work on a dead loop; drop the reference.
        return
    try:
        await session.close()
    except (aiohttp.ClientError, RuntimeError) as exc:
        logger.warning("Could not close stale provider session: %s", exc)


async def get_session() -> aiohttp.ClientSession:
    """Return the provider session for the running loop, creating it if needed."""
    loop = asyncio.get_running_loop()
    session = SessionState.session
    if session is not None and not session.closed and SessionState.loop is not loop:
        await _discard_stale(session)
        session = None

    if session is None or session.closed:
        session = _build_session()
        SessionState.session = session
        SessionState.loop = loop
        logger.debug("Created provider HTTP session")
    return session


async def cleanup_session() -> None:
    """Close the provider session; safe to call when none is open."""
    session = SessionState.session
    SessionState.session = None
    SessionState.loop = None
    if session is None or session.closed:
        return
    try:
        await session.close()
    except (aiohttp.ClientError, RuntimeError) as exc:
        logger.warning("Error closing provider session: %s", exc)
    else:
        logger.info("Closed provider HTTP session")
