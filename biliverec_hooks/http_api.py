"""aiohttp application exposing the webhook and status endpoints."""

import asyncio
import logging
from aiohttp import web
from aiohttp.web import AppKey
from pydantic import ValidationError

from .dispatch.dispatcher import EventDispatcher
from .models.events import RecorderEvent
from .status.probe import StatusProbe, StatusProbeError
from .transcode.queue import QueueClosedError

logger = logging.getLogger(__name__)

DISPATCHER_KEY: AppKey[EventDispatcher] = web.AppKey("dispatcher", EventDispatcher)
STATUS_PROBE_KEY: AppKey[StatusProbe] = web.AppKey("status_probe", StatusProbe)


async def handle_event(request: web.Request) -> web.Response:
    """Receive one recorder webhook. Empty 200 on success, ignored types included."""
    body = await request.read()
    try:
        event = RecorderEvent.from_json(body)
    except ValidationError as e:
        logger.info(f"Rejected event body from {request.remote}: {e.error_count()} errors")
        raise web.HTTPBadRequest(text="Cannot parse body")

    dispatcher = request.app[DISPATCHER_KEY]
    try:
        await dispatcher.dispatch(event)
    except QueueClosedError as e:
        logger.warning(f"<{event.room_id}> {e}")
        raise web.HTTPServiceUnavailable(text="Shutting down")

    return web.Response(status=200)


async def handle_status(request: web.Request) -> web.Response:
    """Report whether the recorder process behind the newest log is alive."""
    probe = request.app[STATUS_PROBE_KEY]
    loop = asyncio.get_running_loop()
    try:
        report = await loop.run_in_executor(None, probe.probe)
    except StatusProbeError as e:
        logger.error(f"Status probe failed: {e}")
        return web.Response(status=500)

    return web.json_response(report.to_dict())


def build_app(dispatcher: EventDispatcher, status_probe: StatusProbe) -> web.Application:
    app = web.Application()
    app[DISPATCHER_KEY] = dispatcher
    app[STATUS_PROBE_KEY] = status_probe

    app.router.add_post("/", handle_event)
    app.router.add_get("/getStatus", handle_status, allow_head=False)
    return app
