"""Recorder webhook event models."""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# The recorder writes .NET timestamps with 7 fractional digits.
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def _trim_fraction(value: Any) -> Any:
    if isinstance(value, str):
        return _LONG_FRACTION.sub(r"\1", value, count=1)
    return value


class EventType(str, Enum):
    """Lifecycle event types emitted by the recorder."""
    SESSION_STARTED = "SessionStarted"
    FILE_OPENING = "FileOpening"
    FILE_CLOSED = "FileClosed"
    SESSION_ENDED = "SessionEnded"


class RoomEvent(str, Enum):
    """Room state tags sent to the bot endpoint."""
    ONLINE = "ONLINE"
    START = "START"
    STOP = "STOP"
    OFFLINE = "OFFLINE"


class EventData(BaseModel):
    """Payload embedded in every recorder event."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    relative_path: str = Field("", alias="RelativePath")
    file_size: int = Field(0, alias="FileSize")
    duration: float = Field(0.0, alias="Duration")
    file_open_time: Optional[datetime] = Field(None, alias="FileOpenTime")
    file_close_time: Optional[datetime] = Field(None, alias="FileCloseTime")
    session_id: str = Field("", alias="SessionId")
    room_id: int = Field(0, alias="RoomId")
    short_id: int = Field(0, alias="ShortId")
    name: str = Field("", alias="Name")
    title: str = Field("", alias="Title")
    area_name_parent: str = Field("", alias="AreaNameParent")
    area_name_child: str = Field("", alias="AreaNameChild")

    @field_validator("file_open_time", "file_close_time", mode="before")
    @classmethod
    def trim_fraction(cls, value: Any) -> Any:
        return _trim_fraction(value)


class RecorderEvent(BaseModel):
    """One lifecycle notification from the recorder.

    ``event_type`` keeps the raw string so newer recorder versions can send
    extra types without the body being rejected; ``kind`` maps it onto
    ``EventType`` when it is one we know.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_type: str = Field("", alias="EventType")
    event_timestamp: Optional[datetime] = Field(None, alias="EventTimestamp")
    event_id: str = Field("", alias="EventId")
    event_data: EventData = Field(default_factory=EventData, alias="EventData")

    @field_validator("event_timestamp", mode="before")
    @classmethod
    def trim_fraction(cls, value: Any) -> Any:
        return _trim_fraction(value)

    @classmethod
    def from_json(cls, body: Union[str, bytes]) -> "RecorderEvent":
        """Parse a request body. Raises pydantic.ValidationError when malformed."""
        return cls.model_validate_json(body)

    @property
    def kind(self) -> Optional[EventType]:
        try:
            return EventType(self.event_type)
        except ValueError:
            return None

    @property
    def room_id(self) -> int:
        return self.event_data.room_id
