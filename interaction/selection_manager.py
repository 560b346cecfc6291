"""Selection Manager: which place is selected and whether details show."""

from __future__ import annotations

from typing import TYPE_CHECKING

from interaction.state import InteractionMode, SelectionState

if TYPE_CHECKING:
    from interaction.models import Place


class SelectionManager:
    def __init__(self) -> None:
        self.selected: Place | None = None
        self._details_open = False

    def select(self, place: Place | None) -> bool:
        """Set the selection and return True when its identity changed."""
        changed = _identity(place) != _identity(self.selected)
        self.selected = place
        self._details_open = place is not None
        return changed

    def hide_details(self) -> None:
        self._details_open = False

    def view(self, mode: InteractionMode) -> SelectionState:
        visible = (
            self.selected is not None
            and self._details_open
            and mode is InteractionMode.BROWSING
        )
        return SelectionState(selected=self.selected, details_visible=visible)


def _identity(place: Place | None) -> str | None:
    return place.place_id if place is not None else None
