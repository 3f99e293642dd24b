"""Data models for the biliverec-hooks service."""

from .events import EventType, RoomEvent, EventData, RecorderEvent
from .status import StatusReport
from .results import NotifyResult, TranscodeResult

__all__ = [
    "EventType",
    "RoomEvent",
    "EventData",
    "RecorderEvent",
    "StatusReport",
    # Best-effort call outcomes
    "NotifyResult",
    "TranscodeResult",
]
