"""Room event notifier for the bot endpoint."""

import asyncio
import logging
import aiohttp
from typing import Optional

from ..models.events import RoomEvent
from ..models.results import NotifyResult

logger = logging.getLogger(__name__)


class RoomNotifier:
    """Relays room state changes to the bot with a form-encoded POST.

    Delivery is best-effort: errors are logged and returned in the result,
    never raised, and nothing is retried.
    """

    def __init__(self, api_url: str, timeout_seconds: Optional[float] = None):
        """Initialize room notifier.

        Args:
            api_url: Bot endpoint that receives ``roomid`` and ``event`` fields
            timeout_seconds: Total timeout per request; None waits indefinitely
        """
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

        logger.info(f"RoomNotifier initialized with endpoint: {api_url}")

    async def notify(self, room_id: int, event: RoomEvent) -> NotifyResult:
        """Send one room event to the bot.

        Args:
            room_id: Room identifier
            event: Room state tag

        Returns:
            NotifyResult describing the delivery
        """
        form = {
            "roomid": str(room_id),
            "event": event.value,
        }

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.api_url, data=form) as response:
                    await response.read()
                    if response.status >= 400:
                        logger.warning(
                            f"Bot rejected <{room_id}> {event.value}: HTTP {response.status}")
                        return NotifyResult(room_id, event, success=False, status=response.status,
                                            error=f"HTTP {response.status}")

                    logger.debug(f"Notified <{room_id}> {event.value}: HTTP {response.status}")
                    return NotifyResult(room_id, event, success=True, status=response.status)

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"Error: {e!r} while notifying <{room_id}> {event.value}.")
            return NotifyResult(room_id, event, success=False, error=str(e) or type(e).__name__)
