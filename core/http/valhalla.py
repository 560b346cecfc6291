"""
Valhalla HTTP client utilities.

Point-to-point directions against a self-hosted Valhalla instance. Route
shapes are normalized to [lon, lat] coordinate lists whether Valhalla
answers with GeoJSON or an encoded polyline.
"""

from __future__ import annotations

import logging
from typing import Any

from config import get_valhalla_costing, get_valhalla_route_url
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import valhalla_breaker, with_circuit_breaker
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session
from core.spatial import GeometryService

logger = logging.getLogger(__name__)


class ValhallaClient:
    def __init__(self) -> None:
        self._route_url = get_valhalla_route_url()
        self._costing = get_valhalla_costing()

    @with_circuit_breaker(valhalla_breaker)
    @retry_async()
    async def route(
        self,
        locations: list[tuple[float, float]] | list[list[float]],
        *,
        costing: str | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Route through ``locations`` given as (lon, lat) pairs."""
        normalized_locations: list[list[float]] = []
        for item in locations:
            ok, pair = GeometryService.validate_coordinate_pair(item)
            if ok and pair is not None:
                normalized_locations.append(pair)

        if len(normalized_locations) < 2:
            msg = "Valhalla route requires at least two locations."
            raise ExternalServiceException(msg)

        payload = {
            "locations": [{"lon": lon, "lat": lat} for lon, lat in normalized_locations],
            "costing": costing or self._costing,
            "directions_options": {"units": "kilometers"},
            "shape_format": "geojson",
        }
        session = await get_session()
        data = await request_json(
            "POST",
            self._route_url,
            session=session,
            json=payload,
            service_name="Valhalla route",
            timeout=timeout,
        )
        if not isinstance(data, dict):
            msg = "Valhalla route error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._route_url})
        return self._normalize_route_response(data)

    @staticmethod
    def _normalize_route_response(data: dict[str, Any]) -> dict[str, Any]:
        trip = data.get("trip") or {}
        summary = trip.get("summary") or {}
        legs = trip.get("legs") or []
        if not summary and legs and isinstance(legs[0], dict):
            summary = legs[0].get("summary") or {}
        coords = ValhallaClient._extract_shape_coordinates(data)
        geometry = {"type": "LineString", "coordinates": coords} if coords else None
        return {
            "geometry": geometry,
            "duration_seconds": float(summary.get("time", 0) or 0),
            "distance_meters": float(summary.get("length", 0) or 0) * 1000,
        }

    @staticmethod
    def _extract_shape_coordinates(data: dict[str, Any]) -> list[list[float]]:
        """Return the first usable shape found on the trip, its legs, or the root."""
        trip = data.get("trip") if isinstance(data.get("trip"), dict) else {}
        shape_format = data.get("shape_format") or trip.get("shape_format")
        candidates: list[Any] = [trip.get("shape")]

        legs = trip.get("legs")
        if isinstance(legs, list):
            leg_coords: list[list[float]] = []
            for leg in legs:
                if not isinstance(leg, dict):
                    continue
                leg_format = leg.get("shape_format") or shape_format
                coords = ValhallaClient._coerce_shape_coordinates(
                    leg.get("shape"),
                    shape_format=leg_format,
                )
                if leg_coords and coords and coords[0] == leg_coords[-1]:
                    coords = coords[1:]
                leg_coords.extend(coords)
            candidates.append(leg_coords)

        candidates.append(data.get("shape"))

        for shape in candidates:
            coords = ValhallaClient._coerce_shape_coordinates(
                shape,
                shape_format=shape_format,
            )
            if coords:
                return coords
        return []

    @staticmethod
    def _coerce_shape_coordinates(
        shape: Any,
        *,
        shape_format: str | None = None,
    ) -> list[list[float]]:
        if not shape:
            return []
        if isinstance(shape, str):
            return ValhallaClient._decode_polyline_shape(shape, shape_format=shape_format)

        coords = shape.get("coordinates") if isinstance(shape, dict) else shape
        if not isinstance(coords, list):
            return []

        normalized: list[list[float]] = []
        for point in coords:
            if isinstance(point, dict):
                point = [point.get("lon"), point.get("lat")]
            ok, pair = GeometryService.validate_coordinate_pair(point)
            if ok and pair is not None:
                normalized.append(pair)
        return normalized

    @staticmethod
    def _decode_polyline_shape(
        shape: str,
        *,
        shape_format: str | None = None,
    ) -> list[list[float]]:
        # Valhalla encodes with 6 digits of precision unless told otherwise.
        if shape_format == "polyline5":
            precisions = [5]
        elif shape_format == "polyline6":
            precisions = [6]
        else:
            precisions = [6, 5]

        for precision in precisions:
            coords = ValhallaClient._decode_polyline(shape, precision)
            if coords and all(
                GeometryService.validate_coordinate_pair(c)[0] for c in coords
            ):
                return coords
        return []

    @staticmethod
    def _decode_polyline(encoded: str, precision: int) -> list[list[float]]:
        factor = float(10**precision)
        values: list[int] = []
        result = 0
        shift = 0
        for char in encoded:
            byte = ord(char) - 63
            result |= (byte & 0x1F) << shift
            shift += 5
            if byte < 0x20:
                values.append(~(result >> 1) if result & 1 else result >> 1)
                result = 0
                shift = 0
        if shift != 0 or len(values) % 2 != 0:
            logger.debug("Discarding malformed polyline of length %d", len(encoded))
            return []

        coords: list[list[float]] = []
        lat = 0
        lon = 0
        for index in range(0, len(values), 2):
            lat += values[index]
            lon += values[index + 1]
            coords.append([lon / factor, lat / factor])
        return coords
