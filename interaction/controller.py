"""
Map interaction controller.

Coordinates place search, selection, routing and previews against the
mapping providers, and publishes a consistent snapshot after every
transition. All mutation happens on the event loop between suspension
points, so observers never see a partially applied transition.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from core.exceptions import ResourceNotFoundException
from events import CameraFit, EventBus, EventStream, StateChanged
from interaction.preview_fetcher import PreviewFetcher
from interaction.route_coordinator import RouteCoordinator
from interaction.search_coordinator import SearchCoordinator
from interaction.selection_manager import SelectionManager
from interaction.state import (
    ControllerSnapshot,
    InteractionMode,
    PreviewState,
    RouteState,
    SearchState,
    SelectionState,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from core.mapping.interfaces import (
        DirectionsService,
        PlacesSearchService,
        PreviewService,
    )
    from events import Listener
    from interaction.models import Place, Region
    from interaction.settings import ControllerSettings

logger = logging.getLogger(__name__)


class MapInteractionController:
    def __init__(
        self,
        *,
        places: PlacesSearchService,
        directions: DirectionsService,
        previews: PreviewService,
        settings: ControllerSettings,
        bus: EventBus | None = None,
    ) -> None:
        self.settings = settings
        self._bus = bus or EventBus()
        timeout = settings.provider_timeout_seconds
        self._search = SearchCoordinator(places, timeout=timeout)
        self._selection = SelectionManager()
        self._route = RouteCoordinator(directions, timeout=timeout)
        self._preview = PreviewFetcher(
            previews,
            current_selection=lambda: self._selection.selected,
            on_update=lambda: self._publish("preview_updated"),
            timeout=timeout,
        )
        self._view_region: Region | None = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def mode(self) -> InteractionMode:
        return self._route.mode

    @property
    def search_state(self) -> SearchState:
        return self._search.state

    @property
    def selection_state(self) -> SelectionState:
        return self._selection.view(self.mode)

    @property
    def route_state(self) -> RouteState:
        return self._route.state

    @property
    def preview_state(self) -> PreviewState:
        return self._preview.state

    @property
    def view_region(self) -> Region | None:
        return self._view_region

    def snapshot(self) -> ControllerSnapshot:
        mode = self.mode
        return ControllerSnapshot(
            search=self._search.state,
            selection=self._selection.view(mode),
            route=self._route.state,
            preview=self._preview.state,
            mode=mode,
            origin=self.settings.origin,
            view_region=self._view_region,
            visible_markers=self._visible_markers(mode),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Receive every StateChanged and CameraFit event; returns unsubscribe."""
        return self._bus.subscribe(listener)

    def events(self) -> EventStream:
        return self._bus.stream((StateChanged, CameraFit))

    def camera_fits(self) -> EventStream:
        return self._bus.stream(CameraFit)

    def _visible_markers(self, mode: InteractionMode) -> tuple[Place, ...]:
        candidates = self._search.state.candidates
        if mode is InteractionMode.BROWSING:
            return candidates
        destination = self._route.state.destination
        return tuple(place for place in candidates if place == destination)

    def _publish(self, reason: str) -> None:
        logger.debug("Transition: %s", reason)
        self._bus.emit(StateChanged(reason=reason, snapshot=self.snapshot()))

    def _fit_camera(self, fit: CameraFit) -> None:
        logger.debug("Camera fit: %s", fit.kind.value)
        self._bus.emit(fit)

    def _fit_default_region(self) -> None:
        self._fit_camera(CameraFit.to_region(self.settings.default_region))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        self._search.set_query(text)
        self._publish("query_changed")

    def present_search(self) -> None:
        self._search.present()
        self._publish("search_presented")

    async def submit_search(
        self,
        query: str,
        bias_region: Region | None = None,
    ) -> tuple[Place, ...]:
        """Replace the candidate set with the results for ``query``.

        Empty queries and searches issued in routing mode leave the state
        untouched. Provider failures yield an empty candidate set.
        """
        query = (query or "").strip()
        if not query:
            return self._search.state.candidates
        if self.mode is InteractionMode.ROUTING:
            logger.debug("Ignoring search %r while a route is displayed", query)
            return self._search.state.candidates

        region = bias_region or self._view_region or self.settings.default_region
        token = self._search.begin(query)
        self._publish("search_submitted")
        if await self._search.resolve(token, query, region):
            self._publish("search_results")
        return self._search.state.candidates

    def exit_search(self) -> None:
        """Close search: empty candidates and hide the details panel."""
        self._search.clear()
        self._selection.hide_details()
        self._publish("search_exited")
        if self.mode is InteractionMode.BROWSING:
            self._fit_default_region()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, place: Place | None) -> None:
        self._apply_selection(place)
        self._publish("selection_changed")

    def select_by_id(self, place_id: str | None) -> Place | None:
        if place_id is None:
            self.dismiss_details()
            return None
        place = self._find_place(place_id)
        if place is None:
            msg = f"Unknown place: {place_id}"
            raise ResourceNotFoundException(msg, {"place_id": place_id})
        self.select(place)
        return place

    def dismiss_details(self) -> None:
        self.select(None)

    def _apply_selection(self, place: Place | None) -> None:
        if place is not None:
            self._preview.require_loop()
        if self._selection.select(place):
            self._preview.refresh(place)

    def _find_place(self, place_id: str) -> Place | None:
        known = [
            *self._search.state.candidates,
            self._route.state.destination,
            self._selection.selected,
        ]
        for place in known:
            if place is not None and place.place_id == place_id:
                return place
        return None

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def start_route(self) -> RouteState:
        """Request directions from the fixed origin to the selected place."""
        destination = self._selection.selected
        if destination is None:
            logger.debug("start_route ignored: nothing selected")
            return self._route.state
        if self._route.state.is_active:
            logger.debug("start_route ignored: a route is already active")
            return self._route.state

        token = self._route.begin()
        self._publish("route_requested")
        try:
            applied = await self._route.resolve(token, self.settings.origin, destination)
        except asyncio.CancelledError:
            if self._route.is_current(token):
                self._publish("route_cancelled")
            raise
        if not applied:
            return self._route.state

        self._selection.hide_details()
        self._publish("route_started")
        geometry = self._route.state.geometry
        bounds = geometry.bounds if geometry is not None else None
        if bounds is not None:
            self._fit_camera(CameraFit.to_bounds(bounds.padded()))
        return self._route.state

    def end_route(self) -> RouteState:
        """Leave routing mode, re-select the destination, reset the camera."""
        if not self._route.state.is_active:
            logger.debug("end_route ignored: no active route")
            return self._route.state

        self._preview.require_loop()
        destination = self._route.end()
        self._apply_selection(destination)
        self._publish("route_ended")
        self._fit_default_region()
        return self._route.state

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    def update_view_region(self, region: Region) -> None:
        """Record the region reported by the renderer after a camera move."""
        self._view_region = region
        self._publish("camera_changed")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        await self._preview.wait_idle()

    async def aclose(self) -> None:
        await self._preview.aclose()
