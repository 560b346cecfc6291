"""HTTP client utilities and session management."""

from core.http.circuit_breaker import CircuitBreaker, CircuitOpen
from core.http.mapillary import MapillaryClient
from core.http.nominatim import NominatimClient
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import cleanup_session, get_session
from core.http.valhalla import ValhallaClient

__all__ = [
    "CircuitBreaker",
    "CircuitOpen",
    "MapillaryClient",
    "NominatimClient",
    "ValhallaClient",
    "cleanup_session",
    "get_session",
    "request_json",
    "retry_async",
]
