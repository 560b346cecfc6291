"""
Mapping provider interfaces consumed by the map interaction controller.
"""

from typing import Protocol

from interaction.models import Coordinate, Place, PreviewHandle, Region, RouteGeometry


class PlacesSearchService(Protocol):
    """Interface for free-text place search biased toward a region."""

    async def search(self, query: str, region: Region) -> list[Place]:
        """Return place candidates in provider relevance order."""
        ...


class DirectionsService(Protocol):
    """Interface for point-to-point routing."""

    async def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
    ) -> RouteGeometry | None:
        """Calculate a route, or None when no route could be built."""
        ...


class PreviewService(Protocol):
    """Interface for street-level preview lookups."""

    async def preview(self, place: Place) -> PreviewHandle | None:
        """Return a preview handle for the place, or None if unavailable."""
        ...


class MappingProvider(Protocol):
    """Factory interface bundling the three collaborators."""

    @property
    def places(self) -> PlacesSearchService: ...

    @property
    def directions(self) -> DirectionsService: ...

    @property
    def previews(self) -> PreviewService: ...
