"""
Mapping provider backed by self-hosted Nominatim and Valhalla, with
Mapillary street-level imagery for previews.

Each adapter turns raw client payloads into the controller's domain models.
Errors are left to propagate; the controller decides what a failure means.
"""

from __future__ import annotations

import logging

from config import get_preview_radius_m, get_search_result_limit
from core.http.mapillary import MapillaryClient
from core.http.nominatim import NominatimClient
from core.http.valhalla import ValhallaClient
from core.mapping.interfaces import (
    DirectionsService,
    MappingProvider,
    PlacesSearchService,
    PreviewService,
)
from interaction.models import Coordinate, Place, PreviewHandle, Region, RouteGeometry

logger = logging.getLogger(__name__)


class NominatimPlacesSearch(PlacesSearchService):
    def __init__(self, client: NominatimClient, *, limit: int = 10) -> None:
        self._client = client
        self._limit = limit

    async def search(self, query: str, region: Region) -> list[Place]:
        results = await self._client.search(
            query,
            limit=self._limit,
            viewbox=region.bounds().as_tuple(),
        )
        places: list[Place] = []
        seen: set[str] = set()
        for item in results:
            if item["id"] in seen:
                continue
            seen.add(item["id"])
            places.append(
                Place(
                    place_id=item["id"],
                    name=item["name"],
                    coordinate=Coordinate(lat=item["lat"], lon=item["lon"]),
                    address=item.get("display_name") or None,
                    category=item.get("category"),
                    source=item.get("source"),
                ),
            )
        return places


class ValhallaDirections(DirectionsService):
    def __init__(self, client: ValhallaClient) -> None:
        self._client = client

    async def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
    ) -> RouteGeometry | None:
        result = await self._client.route(
            [origin.as_lon_lat(), destination.as_lon_lat()],
        )
        geometry = result.get("geometry")
        if not geometry or not geometry.get("coordinates"):
            return None
        return RouteGeometry(
            coordinates=geometry["coordinates"],
            distance_meters=result.get("distance_meters", 0.0),
            duration_seconds=result.get("duration_seconds", 0.0),
        )


class MapillaryPreviews(PreviewService):
    def __init__(self, client: MapillaryClient, *, radius_m: float = 50.0) -> None:
        self._client = client
        self._radius_m = radius_m

    async def preview(self, place: Place) -> PreviewHandle | None:
        if not self._client.configured:
            logger.debug("Preview skipped for %s: Mapillary not configured", place.place_id)
            return None
        image = await self._client.nearest_image(
            place.coordinate.lat,
            place.coordinate.lon,
            radius_m=self._radius_m,
        )
        if image is None:
            return None
        return PreviewHandle(
            image_id=image["id"],
            thumbnail_url=image.get("thumbnail_url"),
            captured_at=image.get("captured_at"),
            coordinate=Coordinate(lat=image["lat"], lon=image["lon"]),
        )


class LocalProvider(MappingProvider):
    """Mapping provider utilizing self-hosted OSM services."""

    def __init__(self) -> None:
        self._places = NominatimPlacesSearch(
            NominatimClient(),
            limit=get_search_result_limit(),
        )
        self._directions = ValhallaDirections(ValhallaClient())
        self._previews = MapillaryPreviews(
            MapillaryClient(),
            radius_m=get_preview_radius_m(),
        )

    @property
    def places(self) -> PlacesSearchService:
        return self._places

    @property
    def directions(self) -> DirectionsService:
        return self._directions

    @property
    def previews(self) -> PreviewService:
        return self._previews
