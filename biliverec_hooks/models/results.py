"""Outcome records for best-effort external calls.

Callers may inspect these or ignore them; the notifier and the transcoder
report failures here instead of raising.
"""

from dataclasses import dataclass
from typing import Optional

from .events import RoomEvent


@dataclass(frozen=True)
class NotifyResult:
    """Result of relaying one room event to the bot endpoint."""
    room_id: int
    event: RoomEvent
    success: bool
    status: Optional[int] = None  # HTTP status when a response was received
    error: Optional[str] = None


@dataclass(frozen=True)
class TranscodeResult:
    """Result of one ffmpeg run."""
    source: str
    output: str
    success: bool
    return_code: Optional[int] = None  # None when ffmpeg could not be launched
    error: Optional[str] = None
    duration_seconds: float = 0.0
