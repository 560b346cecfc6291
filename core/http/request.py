"""
JSON request helper shared by the provider clients.

Maps HTTP status codes onto the application exception hierarchy so each
client only deals with decoded payloads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from core.exceptions import ExternalServiceException, RateLimitException

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

ERROR_BODY_LIMIT = 500
DEFAULT_RETRY_AFTER_SECONDS = 5


def _retry_after(response: Any) -> int:
    raw = (response.headers or {}).get("Retry-After")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER_SECONDS


async def _raise_for_status(response: Any, url: str, service_name: str) -> None:
    status = response.status
    where = str(getattr(response, "url", url))
    if status == 429:
        msg = f"{service_name} error: 429"
        raise RateLimitException(
            msg,
            {"status": status, "retry_after": _retry_after(response), "url": where},
        )
    body = await response.text()
    msg = f"{service_name} error: {status}"
    raise ExternalServiceException(
        msg,
        {"status": status, "body": body[:ERROR_BODY_LIMIT], "url": where},
    )


async def request_json(
    method: str,
    url: str,
    *,
    session: Any,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    expected_status: int | Iterable[int] = 200,
    none_on: Iterable[int] = (),
    service_name: str = "Service",
    timeout: Any | None = None,
) -> Any | None:
    """Send a GET or POST and return the decoded JSON body.

    Statuses listed in ``none_on`` yield None. 429 raises
    RateLimitException; any other unexpected status raises
    ExternalServiceException carrying a truncated response body.
    """
    send = {"GET": session.get, "POST": session.post}.get(method.upper())
    if send is None:
        msg = f"{service_name} request error: unsupported method {method}"
        raise ExternalServiceException(msg, {"url": url})

    accepted = {expected_status} if isinstance(expected_status, int) else set(expected_status)
    options: dict[str, Any] = {"headers": headers}
    for key, value in (("params", params), ("json", json), ("timeout", timeout)):
        if value is not None:
            options[key] = value

    async with send(url, **options) as response:
        if response.status in set(none_on):
            logger.debug("%s answered %s for %s", service_name, response.status, url)
            return None
        if response.status not in accepted:
            await _raise_for_status(response, url, service_name)
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, ValueError) as exc:
            msg = f"{service_name} error: response was not JSON"
            raise ExternalServiceException(msg, {"url": url}) from exc
