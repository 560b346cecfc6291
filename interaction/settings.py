"""Construction-time settings for the map interaction controller."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from interaction.models import Coordinate, Region


class ControllerSettings(BaseModel):
    """Values the controller needs that are not part of its state.

    origin: fixed source coordinate for every directions request.
    default_region: region the camera returns to after a route ends.
    """

    model_config = ConfigDict(frozen=True)

    origin: Coordinate
    default_region: Region
    provider_timeout_seconds: float | None = Field(default=None, gt=0.0)

    @classmethod
    def from_origin(
        cls,
        *,
        lat: float,
        lon: float,
        region_meters: float,
        provider_timeout_seconds: float | None = None,
    ) -> ControllerSettings:
        origin = Coordinate(lat=lat, lon=lon)
        return cls(
            origin=origin,
            default_region=Region.from_meters(origin, region_meters, region_meters),
            provider_timeout_seconds=provider_timeout_seconds,
        )
