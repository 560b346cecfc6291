from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.mapping.local_provider import (
    MapillaryPreviews,
    NominatimPlacesSearch,
    ValhallaDirections,
)
from interaction.models import Coordinate, Place, Region


def _region() -> Region:
    return Region(
        center=Coordinate(lat=37.33, lon=-122.01),
        latitude_delta=0.2,
        longitude_delta=0.4,
    )


def _place() -> Place:
    return Place(place_id="N1", name="Philz", coordinate=Coordinate(lat=37.32, lon=-122.03))


@pytest.mark.asyncio
async def test_places_search_maps_results_and_dedupes() -> None:
    client = MagicMock()
    client.search = AsyncMock(
        return_value=[
            {
                "id": "N1",
                "name": "Philz",
                "display_name": "Philz, Cupertino",
                "lat": 37.32,
                "lon": -122.03,
                "category": "amenity",
                "source": "nominatim",
            },
            {"id": "N1", "name": "Philz again", "lat": 37.32, "lon": -122.03},
            {"id": "W2", "name": "Main St", "display_name": "", "lat": 37.31, "lon": -122.02},
        ],
    )
    search = NominatimPlacesSearch(client, limit=7)

    places = await search.search("philz", _region())

    assert [p.place_id for p in places] == ["N1", "W2"]
    assert places[0].address == "Philz, Cupertino"
    assert places[0].category == "amenity"
    assert places[1].address is None
    client.search.assert_awaited_once()
    _, kwargs = client.search.call_args
    assert kwargs["limit"] == 7
    assert kwargs["viewbox"] == pytest.approx((-122.21, 37.23, -121.81, 37.43))


@pytest.mark.asyncio
async def test_directions_builds_route_geometry() -> None:
    client = MagicMock()
    client.route = AsyncMock(
        return_value={
            "geometry": {"type": "LineString", "coordinates": [[-122.0, 37.0], [-122.1, 37.1]]},
            "distance_meters": 1500.0,
            "duration_seconds": 240.0,
        },
    )

    route = await ValhallaDirections(client).route(
        Coordinate(lat=37.0, lon=-122.0),
        Coordinate(lat=37.1, lon=-122.1),
    )

    assert route is not None
    assert route.coordinates == [[-122.0, 37.0], [-122.1, 37.1]]
    assert route.distance_meters == 1500.0
    client.route.assert_awaited_once_with([(-122.0, 37.0), (-122.1, 37.1)])


@pytest.mark.asyncio
async def test_directions_without_geometry_returns_none() -> None:
    client = MagicMock()
    client.route = AsyncMock(
        return_value={"geometry": None, "distance_meters": 0, "duration_seconds": 0},
    )

    route = await ValhallaDirections(client).route(
        Coordinate(lat=37.0, lon=-122.0),
        Coordinate(lat=37.1, lon=-122.1),
    )

    assert route is None


@pytest.mark.asyncio
async def test_previews_map_nearest_image() -> None:
    captured = datetime(2024, 5, 1, tzinfo=UTC)
    client = MagicMock()
    client.configured = True
    client.nearest_image = AsyncMock(
        return_value={
            "id": "img-1",
            "thumbnail_url": "https://images.test/1.jpg",
            "captured_at": captured,
            "lon": -122.03,
            "lat": 37.32,
            "distance_m": 4.0,
        },
    )

    handle = await MapillaryPreviews(client, radius_m=25).preview(_place())

    assert handle is not None
    assert handle.image_id == "img-1"
    assert handle.captured_at == captured
    assert handle.coordinate == Coordinate(lat=37.32, lon=-122.03)
    client.nearest_image.assert_awaited_once_with(37.32, -122.03, radius_m=25)


@pytest.mark.asyncio
async def test_previews_skip_when_not_configured() -> None:
    client = MagicMock()
    client.configured = False
    client.nearest_image = AsyncMock()

    assert await MapillaryPreviews(client).preview(_place()) is None
    client.nearest_image.assert_not_awaited()
