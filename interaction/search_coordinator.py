"""Search Coordinator: committed query -> candidate set."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from interaction.generation import RequestGeneration
from interaction.guard import call_provider
from interaction.state import SearchState

if TYPE_CHECKING:
    from core.mapping.interfaces import PlacesSearchService
    from interaction.models import Region

logger = logging.getLogger(__name__)


class SearchCoordinator:
    def __init__(
        self,
        service: PlacesSearchService,
        *,
        timeout: float | None = None,
    ) -> None:
        self._service = service
        self._timeout = timeout
        self._generation = RequestGeneration("search")
        self.state = SearchState()

    @property
    def in_flight(self) -> bool:
        return self._generation.pending

    def set_query(self, text: str) -> None:
        self.state = replace(self.state, query=text, committed=False)

    def present(self) -> None:
        self.state = replace(self.state, presented=True)

    def begin(self, query: str) -> int:
        """Commit ``query`` and return the token for its request."""
        self.state = replace(self.state, query=query, committed=True, presented=True)
        return self._generation.issue()

    async def resolve(self, token: int, query: str, region: Region) -> bool:
        """Run the search for ``token``; return True if its result was applied."""
        places = await call_provider(
            self._service.search(query, region),
            service_name="Places search",
            timeout=self._timeout,
        )
        if not self._generation.complete(token):
            logger.debug("Discarding stale search results for %r", query)
            return False
        self.state = replace(self.state, candidates=tuple(places or ()))
        logger.debug("Search %r produced %d candidates", query, len(self.state.candidates))
        return True

    def clear(self) -> None:
        """Drop candidates and any in-flight search."""
        self._generation.invalidate()
        self.state = SearchState()
