"""StateChanged event definition."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from interaction.state import ControllerSnapshot


@dataclass(frozen=True)
class StateChanged:
    """Emitted once per controller transition with the resulting snapshot.

    ``reason`` names the operation that produced the transition
    (``"search_results"``, ``"selection_changed"``, ``"route_started"``).
    """

    reason: str
    snapshot: ControllerSnapshot
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "state_changed",
            "reason": self.reason,
            "snapshot": self.snapshot.to_dict(),
            "created_at": self.created_at.isoformat(),
        }
