"""Immutable state snapshots exposed to the presentation layer.

Each sub-state is a frozen dataclass that the controller replaces wholesale
on every transition, so an observer never sees a half-applied update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from interaction.models import Coordinate, Place, PreviewHandle, Region, RouteGeometry


class InteractionMode(StrEnum):
    BROWSING = "browsing"
    ROUTING = "routing"


class RouteStatus(StrEnum):
    IDLE = "idle"
    ACTIVE = "active"


def _place_dict(place: Place | None) -> dict[str, Any] | None:
    return place.model_dump(mode="json") if place is not None else None


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    committed: bool = False
    candidates: tuple[Place, ...] = ()
    presented: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "committed": self.committed,
            "candidates": [_place_dict(place) for place in self.candidates],
            "presented": self.presented,
        }


@dataclass(frozen=True)
class SelectionState:
    selected: Place | None = None
    details_visible: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected": _place_dict(self.selected),
            "details_visible": self.details_visible,
        }


@dataclass(frozen=True)
class RouteState:
    status: RouteStatus = RouteStatus.IDLE
    geometry: RouteGeometry | None = None
    destination: Place | None = None
    pending: bool = False

    @property
    def is_active(self) -> bool:
        return self.status is RouteStatus.ACTIVE

    @classmethod
    def idle(cls) -> RouteState:
        return cls()

    @classmethod
    def active(cls, destination: Place, geometry: RouteGeometry | None) -> RouteState:
        return cls(status=RouteStatus.ACTIVE, geometry=geometry, destination=destination)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "geometry": self.geometry.model_dump(mode="json") if self.geometry else None,
            "destination": _place_dict(self.destination),
            "pending": self.pending,
        }


@dataclass(frozen=True)
class PreviewState:
    place_id: str | None = None
    handle: PreviewHandle | None = None
    loading: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "place_id": self.place_id,
            "handle": self.handle.model_dump(mode="json") if self.handle else None,
            "loading": self.loading,
        }


@dataclass(frozen=True)
class ControllerSnapshot:
    """Everything a renderer needs, including the derived display fields."""

    search: SearchState
    selection: SelectionState
    route: RouteState
    preview: PreviewState
    mode: InteractionMode
    origin: Coordinate
    view_region: Region | None = None
    visible_markers: tuple[Place, ...] = field(default=())

    @property
    def search_affordance_visible(self) -> bool:
        return self.mode is InteractionMode.BROWSING

    @property
    def route_polyline(self) -> list[list[float]] | None:
        if self.route.is_active and self.route.geometry is not None:
            return self.route.geometry.coordinates
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "search": self.search.to_dict(),
            "selection": self.selection.to_dict(),
            "route": self.route.to_dict(),
            "preview": self.preview.to_dict(),
            "mode": self.mode.value,
            "origin": self.origin.model_dump(mode="json"),
            "view_region": (
                self.view_region.model_dump(mode="json") if self.view_region else None
            ),
            "visible_markers": [_place_dict(place) for place in self.visible_markers],
            "search_affordance_visible": self.search_affordance_visible,
            "route_polyline": self.route_polyline,
        }
