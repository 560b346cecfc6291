"""
Mapillary Graph API client.

Finds the street-level image closest to a coordinate, used as the visual
preview for a selected place.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from config import get_mapillary_access_token, get_mapillary_graph_url
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import mapillary_breaker, with_circuit_breaker
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session
from core.spatial import GeometryService

logger = logging.getLogger(__name__)

IMAGE_FIELDS = "id,thumb_1024_url,captured_at,computed_geometry,geometry"


class MapillaryClient:
    def __init__(self, access_token: str | None = None) -> None:
        self._images_url = f"{get_mapillary_graph_url()}/images"
        self._access_token = access_token or get_mapillary_access_token()

    @property
    def configured(self) -> bool:
        return bool(self._access_token)

    @staticmethod
    def _image_position(image: dict[str, Any]) -> list[float] | None:
        for key in ("computed_geometry", "geometry"):
            geometry = image.get(key)
            if not isinstance(geometry, dict):
                continue
            ok, pair = GeometryService.validate_coordinate_pair(
                geometry.get("coordinates") or [],
            )
            if ok:
                return pair
        return None

    @staticmethod
    def _parse_captured_at(value: Any) -> datetime | None:
        # Graph API timestamps are epoch milliseconds.
        if value is None:
            return None
        try:
            return datetime.fromtimestamp(float(value) / 1000.0, tz=UTC)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

    @with_circuit_breaker(mapillary_breaker)
    @retry_async()
    async def nearest_image(
        self,
        lat: float,
        lon: float,
        *,
        radius_m: float = 50.0,
        limit: int = 20,
    ) -> dict[str, Any] | None:
        """Return the image nearest to (lat, lon) within ``radius_m``, or None."""
        if not self.configured:
            msg = "Mapillary access token is not configured"
            raise ExternalServiceException(msg, {"setting": "MAPILLARY_ACCESS_TOKEN"})

        lat_delta, lon_delta = GeometryService.span_degrees(
            lat,
            lon,
            radius_m * 2,
            radius_m * 2,
        )
        bbox = (
            lon - lon_delta / 2,
            lat - lat_delta / 2,
            lon + lon_delta / 2,
            lat + lat_delta / 2,
        )
        params = {
            "access_token": self._access_token,
            "fields": IMAGE_FIELDS,
            "bbox": ",".join(f"{value:.6f}" for value in bbox),
            "limit": limit,
        }
        session = await get_session()
        data = await request_json(
            "GET",
            self._images_url,
            session=session,
            params=params,
            service_name="Mapillary images",
        )
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            msg = "Mapillary images error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._images_url})

        best: dict[str, Any] | None = None
        best_distance = float("inf")
        for image in data["data"]:
            if not isinstance(image, dict) or not image.get("id"):
                continue
            position = self._image_position(image)
            if position is None:
                continue
            distance = GeometryService.distance_meters(lat, lon, position[1], position[0])
            if distance <= radius_m and distance < best_distance:
                best_distance = distance
                best = {
                    "id": str(image["id"]),
                    "thumbnail_url": image.get("thumb_1024_url"),
                    "captured_at": self._parse_captured_at(image.get("captured_at")),
                    "lon": position[0],
                    "lat": position[1],
                    "distance_m": distance,
                }

        if best is None:
            logger.debug("No Mapillary imagery within %.0fm of %s,%s", radius_m, lat, lon)
        return best
