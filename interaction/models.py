"""Domain models shared by the controller and the mapping providers."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.constants import ROUTE_BOUNDS_PADDING
from core.spatial import GeometryService


class Coordinate(BaseModel):
    """A WGS84 latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)

    def as_lon_lat(self) -> tuple[float, float]:
        return (self.lon, self.lat)


class BoundingBox(BaseModel):
    """Geographic rectangle as west, south, east, north."""

    model_config = ConfigDict(frozen=True)

    west: float
    south: float
    east: float
    north: float

    @classmethod
    def from_coordinates(cls, coords: list[list[float]]) -> BoundingBox | None:
        bounds = GeometryService.coordinate_bounds(coords)
        if bounds is None:
            return None
        return cls.from_tuple(bounds)

    @classmethod
    def from_tuple(cls, bounds: tuple[float, float, float, float]) -> BoundingBox:
        west, south, east, north = bounds
        return cls(west=west, south=south, east=east, north=north)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.west, self.south, self.east, self.north)

    def padded(self, fraction: float = ROUTE_BOUNDS_PADDING) -> BoundingBox:
        return BoundingBox.from_tuple(
            GeometryService.pad_bounds(self.as_tuple(), fraction),
        )

    @property
    def center(self) -> Coordinate:
        return Coordinate(
            lat=(self.south + self.north) / 2.0,
            lon=(self.west + self.east) / 2.0,
        )


class Region(BaseModel):
    """Camera region: a center plus latitude and longitude spans in degrees."""

    model_config = ConfigDict(frozen=True)

    center: Coordinate
    latitude_delta: float = Field(gt=0.0, le=180.0)
    longitude_delta: float = Field(gt=0.0, le=360.0)

    @classmethod
    def from_meters(
        cls,
        center: Coordinate,
        latitudinal_meters: float,
        longitudinal_meters: float,
    ) -> Region:
        lat_delta, lon_delta = GeometryService.span_degrees(
            center.lat,
            center.lon,
            latitudinal_meters,
            longitudinal_meters,
        )
        return cls(center=center, latitude_delta=lat_delta, longitude_delta=lon_delta)

    def bounds(self) -> BoundingBox:
        half_lat = self.latitude_delta / 2.0
        half_lon = self.longitude_delta / 2.0
        return BoundingBox(
            west=max(-180.0, self.center.lon - half_lon),
            south=max(-90.0, self.center.lat - half_lat),
            east=min(180.0, self.center.lon + half_lon),
            north=min(90.0, self.center.lat + half_lat),
        )


class Place(BaseModel):
    """A point of interest returned by the places search service.

    Two places are the same place when their identifiers match, whatever
    the provider returned for the rest of the fields.
    """

    model_config = ConfigDict(frozen=True)

    place_id: str
    name: str
    coordinate: Coordinate
    address: str | None = None
    category: str | None = None
    source: str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Place):
            return NotImplemented
        return self.place_id == other.place_id

    def __hash__(self) -> int:
        return hash(self.place_id)


class RouteGeometry(BaseModel):
    """Route polyline and summary returned by the directions service."""

    model_config = ConfigDict(frozen=True)

    coordinates: list[list[float]]  # [lon, lat] pairs
    distance_meters: float = 0.0
    duration_seconds: float = 0.0

    @property
    def bounds(self) -> BoundingBox | None:
        return BoundingBox.from_coordinates(self.coordinates)

    def to_geojson(self) -> dict[str, Any]:
        return {"type": "LineString", "coordinates": self.coordinates}


class PreviewHandle(BaseModel):
    """Reference to a street-level preview image for a place."""

    model_config = ConfigDict(frozen=True)

    image_id: str
    thumbnail_url: str | None = None
    captured_at: datetime | None = None
    coordinate: Coordinate | None = None
    provider: str = "mapillary"
