"""Per-room lifecycle tracking over dispatched room events."""

import logging
import threading
from enum import Enum
from typing import Dict
from pubsub import pub

from ..models.events import RoomEvent, RecorderEvent

logger = logging.getLogger(__name__)


class RoomState(Enum):
    OFFLINE = "offline"
    ONLINE = "online"
    RECORDING = "recording"


# room event -> (states it is expected from, resulting state)
TRANSITIONS = {
    RoomEvent.ONLINE: ((RoomState.OFFLINE,), RoomState.ONLINE),
    RoomEvent.START: ((RoomState.ONLINE,), RoomState.RECORDING),
    RoomEvent.STOP: ((RoomState.RECORDING,), RoomState.ONLINE),
    RoomEvent.OFFLINE: ((RoomState.ONLINE, RoomState.RECORDING), RoomState.OFFLINE),
}


class RoomStateTracker:
    """Follows each room through Offline -> Online -> Recording.

    Out-of-order events are only reported; the new state is applied anyway
    and dispatch is never affected.
    """

    def __init__(self, topic: str):
        self.topic = topic
        self.states: Dict[int, RoomState] = {}
        self.unexpected_transitions = 0
        self._lock = threading.Lock()

    def subscribe(self) -> None:
        pub.subscribe(self.on_room_event, self.topic)
        logger.info(f"RoomStateTracker subscribed to topic: {self.topic}")

    def unsubscribe(self) -> None:
        try:
            pub.unsubscribe(self.on_room_event, self.topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")

    def on_room_event(self, room_id: int, room_event: RoomEvent, event: RecorderEvent) -> None:
        expected_from, new_state = TRANSITIONS[room_event]

        with self._lock:
            current = self.states.get(room_id, RoomState.OFFLINE)
            if current not in expected_from:
                self.unexpected_transitions += 1
                logger.warning(
                    f"<{room_id}> unexpected {room_event.value} while {current.value} "
                    f"(event {event.event_id or '?'})")
            self.states[room_id] = new_state

    def get_state(self, room_id: int) -> RoomState:
        with self._lock:
            return self.states.get(room_id, RoomState.OFFLINE)

