"""
Spatial and geometry utilities.

Centralizes coordinate validation, geodesic distance and span
calculations, and bounding boxes used for camera framing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pyproj
from shapely.geometry import LineString, Point

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

GEOD = pyproj.Geod(ellps="WGS84")

Bounds = tuple[float, float, float, float]


class GeometryService:
    """Geometry operations shared by the models and the HTTP providers."""

    @staticmethod
    def validate_coordinate_pair(
        coord: Sequence[Any],
    ) -> tuple[bool, list[float] | None]:
        """Validate a [lon, lat] coordinate pair."""
        if not isinstance(coord, (list, tuple)) or len(coord) < 2:
            return False, None
        try:
            lon = float(coord[0])
            lat = float(coord[1])
        except (TypeError, ValueError, IndexError):
            return False, None
        if not (-180 <= lon <= 180 and -90 <= lat <= 90):
            return False, None
        return True, [lon, lat]

    @staticmethod
    def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Geodesic distance between two points on the WGS84 ellipsoid."""
        _, _, distance = GEOD.inv(lon1, lat1, lon2, lat2)
        return abs(distance)

    @staticmethod
    def span_degrees(
        lat: float,
        lon: float,
        lat_meters: float,
        lon_meters: float,
    ) -> tuple[float, float]:
        """
        Convert a north-south and east-west extent in meters, centered on
        (lat, lon), into latitude and longitude deltas in degrees.
        """
        if lat_meters <= 0 or lon_meters <= 0:
            msg = "Region extent must be positive"
            raise ValueError(msg)
        half_ns = lat_meters / 2.0
        half_ew = lon_meters / 2.0
        _, north, _ = GEOD.fwd(lon, lat, 0.0, half_ns)
        _, south, _ = GEOD.fwd(lon, lat, 180.0, half_ns)
        east, _, _ = GEOD.fwd(lon, lat, 90.0, half_ew)
        west, _, _ = GEOD.fwd(lon, lat, 270.0, half_ew)
        return abs(north - south), abs(east - west)

    @staticmethod
    def coordinate_bounds(coords: Sequence[Sequence[float]]) -> Bounds | None:
        """Return (west, south, east, north) for [lon, lat] coordinates."""
        valid: list[list[float]] = []
        for coord in coords:
            ok, pair = GeometryService.validate_coordinate_pair(coord)
            if ok and pair is not None:
                valid.append(pair)
        if not valid:
            return None
        if len(valid) == 1:
            return Point(valid[0]).bounds
        return LineString(valid).bounds

    @staticmethod
    def pad_bounds(bounds: Bounds, fraction: float) -> Bounds:
        """Grow bounds by ``fraction`` of their extent on every side."""
        west, south, east, north = bounds
        pad_x = (east - west) * fraction
        pad_y = (north - south) * fraction
        return (
            max(-180.0, west - pad_x),
            max(-90.0, south - pad_y),
            min(180.0, east + pad_x),
            min(90.0, north + pad_y),
        )
