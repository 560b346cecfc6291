"""Events package for the map interaction controller.

Contains event definitions and the bus that delivers them to the
presentation layer.
"""

from events.bus import EventBus, EventStream, Listener
from events.camera_fit import CameraFit, FitKind
from events.state_changed import StateChanged

__all__ = [
    "CameraFit",
    "EventBus",
    "EventStream",
    "FitKind",
    "Listener",
    "StateChanged",
]
