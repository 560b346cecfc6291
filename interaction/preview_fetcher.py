"""Preview Fetcher: latest-wins street-level preview for the selection."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from interaction.guard import call_provider
from interaction.state import PreviewState

if TYPE_CHECKING:
    from collections.abc import Callable

    from core.mapping.interfaces import PreviewService
    from interaction.models import Place

logger = logging.getLogger(__name__)


class PreviewFetcher:
    """Owns PreviewState.

    Results are keyed by the selection identity at request time and applied
    only if that identity is still the current selection when the request
    completes. A superseded request is also cancelled.
    """

    def __init__(
        self,
        service: PreviewService,
        *,
        current_selection: Callable[[], Place | None],
        on_update: Callable[[], None],
        timeout: float | None = None,
    ) -> None:
        self._service = service
        self._current_selection = current_selection
        self._on_update = on_update
        self._timeout = timeout
        self._task: asyncio.Task[None] | None = None
        self.state = PreviewState()

    def refresh(self, place: Place | None) -> None:
        """Invalidate the current preview and start fetching one for ``place``.

        Must be called from within a running event loop when ``place`` is set.
        """
        self._cancel_task()
        if place is None:
            self.state = PreviewState()
            return
        self.require_loop()
        self._task = asyncio.create_task(
            self._fetch(place),
            name=f"preview:{place.place_id}",
        )
        self.state = PreviewState(place_id=place.place_id, loading=True)

    async def _fetch(self, place: Place) -> None:
        handle = await call_provider(
            self._service.preview(place),
            service_name="Preview",
            timeout=self._timeout,
        )
        current = self._current_selection()
        if current is None or current.place_id != place.place_id:
            logger.debug("Discarding stale preview for %s", place.place_id)
            return
        self.state = PreviewState(place_id=place.place_id, handle=handle, loading=False)
        self._on_update()

    @staticmethod
    def require_loop() -> None:
        """Raise RuntimeError unless called from a running event loop."""
        asyncio.get_running_loop()

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait_idle(self) -> None:
        """Wait until no fetch is in flight, including ones started meanwhile."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def aclose(self) -> None:
        task = self._task
        self._cancel_task()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
