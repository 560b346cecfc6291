"""Route Coordinator: selection -> active route, and the routing mode.

Two-state machine:

    Idle --start (directions request resolves)--> Active
    Active --end--> Idle

A directions request does not change the status while it is in flight;
``RouteState.pending`` reports it instead. When two requests overlap, only
the most recently issued one may move the machine to Active.
Cancelling the current request clears ``pending`` and leaves the status
unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from interaction.generation import RequestGeneration
from interaction.guard import call_provider
from interaction.state import InteractionMode, RouteState

if TYPE_CHECKING:
    from core.mapping.interfaces import DirectionsService
    from interaction.models import Coordinate, Place

logger = logging.getLogger(__name__)


class RouteCoordinator:
    def __init__(
        self,
        service: DirectionsService,
        *,
        timeout: float | None = None,
    ) -> None:
        self._service = service
        self._timeout = timeout
        self._generation = RequestGeneration("route")
        self.state = RouteState.idle()

    @property
    def mode(self) -> InteractionMode:
        if self.state.is_active:
            return InteractionMode.ROUTING
        return InteractionMode.BROWSING

    def begin(self) -> int:
        token = self._generation.issue()
        self.state = replace(self.state, pending=True)
        return token

    def is_current(self, token: int) -> bool:
        return self._generation.is_current(token)

    async def resolve(
        self,
        token: int,
        origin: Coordinate,
        destination: Place,
    ) -> bool:
        """Request directions for ``token``; return True if it became Active."""
        try:
            geometry = await call_provider(
                self._service.route(origin, destination.coordinate),
                service_name="Directions",
                timeout=self._timeout,
            )
        except asyncio.CancelledError:
            if self._generation.complete(token):
                self.state = replace(self.state, pending=False)
            raise
        if not self._generation.complete(token):
            logger.debug(
                "Discarding stale route to %s (request %d superseded by %d)",
                destination.place_id,
                token,
                self._generation.current,
            )
            return False
        if geometry is None:
            logger.info("Route to %s is active without geometry", destination.place_id)
        self.state = RouteState.active(destination, geometry)
        return True

    def end(self) -> Place | None:
        """Return to Idle and hand back the former destination."""
        destination = self.state.destination
        self._generation.invalidate()
        self.state = RouteState.idle()
        return destination
