import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from network_blocker import install_network_blocker

from core.http.circuit_breaker import ALL_BREAKERS  # noqa: E402
from fake_providers import (  # noqa: E402
    ScriptedDirections,
    ScriptedPlaces,
    ScriptedPreviews,
)
from interaction.controller import MapInteractionController  # noqa: E402
from interaction.settings import ControllerSettings  # noqa: E402


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOMINATIM_BASE_URL", "http://nominatim.test:8080")
    monkeypatch.setenv("VALHALLA_BASE_URL", "http://valhalla.test:8002")
    monkeypatch.setenv("MAPILLARY_GRAPH_URL", "http://mapillary.test")
    monkeypatch.setenv("MAPILLARY_ACCESS_TOKEN", "MLY|test-token")
    install_network_blocker(monkeypatch)
    for breaker in ALL_BREAKERS:
        breaker.reset()


@pytest.fixture
def settings() -> ControllerSettings:
    return ControllerSettings.from_origin(
        lat=37.3346,
        lon=-122.0090,
        region_meters=10000,
    )


@pytest.fixture
def places() -> ScriptedPlaces:
    return ScriptedPlaces()


@pytest.fixture
def directions() -> ScriptedDirections:
    return ScriptedDirections()


@pytest.fixture
def previews() -> ScriptedPreviews:
    return ScriptedPreviews()


@pytest.fixture
def controller(
    places: ScriptedPlaces,
    directions: ScriptedDirections,
    previews: ScriptedPreviews,
    settings: ControllerSettings,
) -> MapInteractionController:
    return MapInteractionController(
        places=places,
        directions=directions,
        previews=previews,
        settings=settings,
    )
