"""Event dispatch: recorder events to notifications and transcode jobs."""

from .dispatcher import EventDispatcher, DispatchOutcome, ROOM_EVENTS, ROOM_TOPIC
from .room_state import RoomState, RoomStateTracker

__all__ = [
    "EventDispatcher",
    "DispatchOutcome",
    "ROOM_EVENTS",
    "ROOM_TOPIC",
    "RoomState",
    "RoomStateTracker",
]
