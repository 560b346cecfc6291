"""CameraFit event definition.

This event is emitted whenever the visible map area should be reframed:
- A route geometry became available (fit to the route bounds)
- A route ended or search was closed (return to the default region)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from interaction.models import BoundingBox, Region


class FitKind(StrEnum):
    REGION = "region"
    BOUNDS = "bounds"


@dataclass(frozen=True)
class CameraFit:
    """Request for the map renderer to reframe the camera.

    This is a notification, not owned state; the controller does not track
    where the camera ended up.
    """

    kind: FitKind
    region: Region | None = None
    bounds: BoundingBox | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def to_region(cls, region: Region) -> CameraFit:
        return cls(kind=FitKind.REGION, region=region)

    @classmethod
    def to_bounds(cls, bounds: BoundingBox) -> CameraFit:
        return cls(kind=FitKind.BOUNDS, bounds=bounds)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": "camera_fit",
            "kind": self.kind.value,
            "region": self.region.model_dump(mode="json") if self.region else None,
            "bounds": self.bounds.model_dump(mode="json") if self.bounds else None,
            "created_at": self.created_at.isoformat(),
        }
