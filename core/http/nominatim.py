"""
Nominatim HTTP client utilities.

Free-text place search against a self-hosted Nominatim instance.
"""

from __future__ import annotations

import logging
from typing import Any

from config import (
    get_nominatim_search_url,
    get_nominatim_user_agent,
)
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import nominatim_breaker, with_circuit_breaker
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session

logger = logging.getLogger(__name__)


class NominatimClient:
    def __init__(self) -> None:
        self._search_url = get_nominatim_search_url()
        self._user_agent = get_nominatim_user_agent()

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent}

    @staticmethod
    def _normalize_bounding_box(raw_bbox: Any) -> list[float] | None:
        """
        Convert Nominatim boundingbox into [west, south, east, north].

        Nominatim search responses return bounding boxes as
        [south, north, west, east] string values.
        """
        if not isinstance(raw_bbox, list) or len(raw_bbox) != 4:
            return None
        try:
            south, north, west, east = (float(value) for value in raw_bbox)
        except (TypeError, ValueError):
            return None
        return [west, south, east, north]

    @staticmethod
    def _normalize_result(result: dict[str, Any]) -> dict[str, Any] | None:
        try:
            lat = float(result["lat"])
            lon = float(result["lon"])
        except (KeyError, TypeError, ValueError):
            return None
        osm_type = str(result.get("osm_type") or "").strip().lower()
        osm_id = result.get("osm_id")
        place_id = result.get("place_id")
        if osm_type and osm_id is not None:
            identifier = f"{osm_type[:1].upper()}{osm_id}"
        elif place_id is not None:
            identifier = str(place_id)
        else:
            return None
        display_name = result.get("display_name") or ""
        name = result.get("name") or display_name.split(",")[0].strip()
        return {
            "id": identifier,
            "name": name or display_name,
            "display_name": display_name,
            "lat": lat,
            "lon": lon,
            "category": result.get("category") or result.get("class"),
            "type": result.get("type"),
            "importance": result.get("importance", 0),
            "bbox": NominatimClient._normalize_bounding_box(result.get("boundingbox")),
            "source": "nominatim",
        }

    @with_circuit_breaker(nominatim_breaker)
    @retry_async()
    async def search(
        self,
        query: str,
        *,
        limit: int = 10,
        viewbox: tuple[float, float, float, float] | None = None,
        bounded: bool = False,
    ) -> list[dict[str, Any]]:
        """Search for places, biased toward ``viewbox`` (west, south, east, north)."""
        params: dict[str, Any] = {
            "q": query,
            "format": "jsonv2",
            "limit": limit,
            "addressdetails": 0,
        }
        if viewbox is not None:
            west, south, east, north = viewbox
            params["viewbox"] = f"{west},{north},{east},{south}"
            if bounded:
                params["bounded"] = 1

        session = await get_session()
        results = await request_json(
            "GET",
            self._search_url,
            session=session,
            params=params,
            headers=self._headers(),
            service_name="Nominatim search",
        )
        if not isinstance(results, list):
            msg = "Nominatim search error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._search_url})

        normalized = []
        for result in results:
            if not isinstance(result, dict):
                continue
            item = self._normalize_result(result)
            if item is not None:
                normalized.append(item)
        logger.debug("Nominatim search %r returned %d results", query, len(normalized))
        return normalized
