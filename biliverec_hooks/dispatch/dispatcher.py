"""Recorder event dispatcher."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from pubsub import pub

from ..models.events import EventType, RoomEvent, RecorderEvent
from ..models.results import NotifyResult
from ..transcode.queue import TranscodeQueue

logger = logging.getLogger(__name__)

ROOM_TOPIC = "recorder.room"

# Each recorder lifecycle event maps to exactly one bot notification.
ROOM_EVENTS = {
    EventType.SESSION_STARTED: RoomEvent.ONLINE,
    EventType.FILE_OPENING: RoomEvent.START,
    EventType.FILE_CLOSED: RoomEvent.STOP,
    EventType.SESSION_ENDED: RoomEvent.OFFLINE,
}


@dataclass(frozen=True)
class DispatchOutcome:
    """What dispatching one event did."""
    event_type: str
    notification: Optional[NotifyResult] = None
    enqueued_path: Optional[str] = None

    @property
    def ignored(self) -> bool:
        return self.notification is None and self.enqueued_path is None


class EventDispatcher:
    """Maps recorder events to bot notifications and transcode admissions.

    Dispatch depends only on the event type. No per-room state is kept and
    the recorder's event order is trusted as-is.
    """

    def __init__(self, notifier, job_queue: TranscodeQueue, base_dir: str,
                 topic: Optional[str] = ROOM_TOPIC):
        """Initialize event dispatcher.

        Args:
            notifier: Object with async ``notify(room_id, event) -> NotifyResult``
            job_queue: Queue that receives completed recordings
            base_dir: Directory recorder paths are relative to
            topic: Pub/sub topic for room events, or None to publish nothing
        """
        self.notifier = notifier
        self.job_queue = job_queue
        self.base_dir = base_dir
        self.topic = topic

    def resolve_path(self, relative_path: str) -> str:
        return f"{self.base_dir}/{relative_path}"

    async def dispatch(self, event: RecorderEvent) -> DispatchOutcome:
        """Handle one recorder event.

        For FileClosed this returns only after the transcode worker has
        claimed the recording.
        """
        kind = event.kind
        room_id = event.room_id

        if kind is None:
            logger.debug(f"<{room_id}> ignoring event type {event.event_type!r}")
            return DispatchOutcome(event_type=event.event_type)

        if kind is EventType.SESSION_STARTED:
            logger.info(f"<{room_id}> online.")
        elif kind is EventType.FILE_OPENING:
            logger.info(f"<{room_id}> \"{self.resolve_path(event.event_data.relative_path)}\" created.")
        elif kind is EventType.SESSION_ENDED:
            logger.info(f"<{room_id}> offline.")

        room_event = ROOM_EVENTS[kind]
        notification = await self.notifier.notify(room_id, room_event)
        self._publish(room_id, room_event, event)

        enqueued_path = None
        if kind is EventType.FILE_CLOSED:
            enqueued_path = self.resolve_path(event.event_data.relative_path)
            logger.info(f"<{room_id}> \"{enqueued_path}\" finished.")
            await self._enqueue(enqueued_path)

        return DispatchOutcome(event_type=event.event_type, notification=notification,
                               enqueued_path=enqueued_path)

    async def _enqueue(self, path: str) -> None:
        # Resolved from the worker thread when it claims the job
        await asyncio.wrap_future(self.job_queue.admit(path))

    def _publish(self, room_id: int, room_event: RoomEvent, event: RecorderEvent) -> None:
        if not self.topic:
            return
        try:
            pub.sendMessage(self.topic, room_id=room_id, room_event=room_event, event=event)
        except Exception as e:
            logger.warning(f"Room event listener failed for <{room_id}> {room_event.value}: {e}")
