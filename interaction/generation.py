"""Monotonic request tokens for last-request-wins discard."""

from __future__ import annotations

import itertools


class RequestGeneration:
    """Issues increasing tokens; only the newest one is current.

    A caller takes a token before suspending and checks ``is_current`` after
    resuming. ``invalidate`` makes every outstanding token stale without
    issuing a new request.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._counter = itertools.count(1)
        self._current = 0
        self._in_flight: set[int] = set()

    @property
    def current(self) -> int:
        return self._current

    @property
    def pending(self) -> bool:
        """True while the current token's request has not completed."""
        return self._current in self._in_flight

    def issue(self) -> int:
        self._current = next(self._counter)
        self._in_flight.add(self._current)
        return self._current

    def complete(self, token: int) -> bool:
        """Mark ``token`` finished and report whether its result applies."""
        self._in_flight.discard(token)
        return token == self._current

    def is_current(self, token: int) -> bool:
        return token == self._current

    def invalidate(self) -> None:
        self._current = next(self._counter)
