"""
In-process event bus for controller notifications.

Listeners are called synchronously, in subscription order, right after the
transition that produced the event, so every listener observes the same
settled state. Async consumers can iterate over a queue-backed stream
instead of registering a callback.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class EventBus:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Event listener %r failed for %s",
                    listener,
                    type(event).__name__,
                )

    def stream(
        self,
        event_type: type | tuple[type, ...] | None = None,
    ) -> EventStream:
        """Return an async iterator over emitted events.

        The subscription starts immediately, so events emitted before the
        first ``__anext__`` are buffered rather than lost.
        """
        return EventStream(self, event_type)


_CLOSED = object()


class EventStream:
    """Queue-backed subscription that can be consumed with ``async for``.

    The stream stays subscribed and keeps buffering until it is closed, so
    callers must close it, preferably by scoping it with ``async with``:

        async with controller.camera_fits() as fits:
            async for fit in fits:
                ...
    """

    def __init__(
        self,
        bus: EventBus,
        event_type: type | tuple[type, ...] | None = None,
    ) -> None:
        self._event_type = event_type
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._unsubscribe: Callable[[], None] | None = bus.subscribe(self._enqueue)

    def _enqueue(self, event: Any) -> None:
        if self._event_type is None or isinstance(event, self._event_type):
            self._queue.put_nowait(event)

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def pending(self) -> list[Any]:
        """Drain and return the events buffered so far without waiting."""
        events: list[Any] = []
        while not self._queue.empty():
            event = self._queue.get_nowait()
            if event is not _CLOSED:
                events.append(event)
        return events

    def close(self) -> None:
        """Unsubscribe and wake any consumer waiting on an empty stream."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            self._queue.put_nowait(_CLOSED)

    async def __aenter__(self) -> EventStream:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def __aiter__(self) -> EventStream:
        return self

    async def __anext__(self) -> Any:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        event = await self._queue.get()
        if event is _CLOSED:
            raise StopAsyncIteration
        return event
