"""
Factory functions for resolving the active MappingProvider and building
controllers on top of it.
"""

from __future__ import annotations

import logging

from config import load_controller_settings
from core.mapping.interfaces import MappingProvider
from core.mapping.local_provider import LocalProvider
from events import EventBus
from interaction.controller import MapInteractionController
from interaction.settings import ControllerSettings

logger = logging.getLogger(__name__)
_local_provider: LocalProvider | None = None


def get_mapping_provider() -> MappingProvider:
    global _local_provider
    if _local_provider is None:
        _local_provider = LocalProvider()
    return _local_provider


def clear_provider_cache() -> None:
    """Reset the cached provider so environment changes take effect."""
    global _local_provider
    _local_provider = None


def build_controller(
    provider: MappingProvider | None = None,
    settings: ControllerSettings | None = None,
    *,
    bus: EventBus | None = None,
) -> MapInteractionController:
    """Create a controller wired to ``provider`` (default: the local provider)."""
    provider = provider or get_mapping_provider()
    settings = settings or load_controller_settings()
    logger.info(
        "Building map controller with origin %.4f,%.4f",
        settings.origin.lat,
        settings.origin.lon,
    )
    return MapInteractionController(
        places=provider.places,
        directions=provider.directions,
        previews=provider.previews,
        settings=settings,
        bus=bus,
    )
