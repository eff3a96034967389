"""Live interview room over a WebSocket.

The socket is only a transport: inbound browser messages are turned into
signals for the room's hub and media devices, and everything the room tells
its surface is queued and written back out.
"""
import asyncio
import base64
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from proctorview.core.context import AppContext
from proctorview.core.errors import RoomEntryError
from proctorview.room.media import RemoteMediaDevices
from proctorview.room.signals import BrowserSignal
from proctorview.room.state_machine import InterviewRoom
from proctorview.room.surface import QueueSurface
from proctorview.schemas.room import (
    AudioMessage,
    BeginMessage,
    BlurMessage,
    EndMessage,
    FrameMessage,
    FullscreenMessage,
    MediaMessage,
    VisibilityMessage,
    room_message_adapter,
)

logger = logging.getLogger(__name__)

router = APIRouter()

POLICY_VIOLATION = 1008


def _decode(data: str) -> bytes:
    # Browsers hand over canvas snapshots as data URLs
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    return base64.b64decode(data)


async def _write(websocket: WebSocket, surface: QueueSurface) -> None:
    async for message in surface.messages():
        try:
            await websocket.send_json(message)
        except Exception as e:
            logger.debug("Room socket write failed: %s", e)


def _log_begin_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Room start failed", exc_info=task.exception())


async def _next_text(websocket: WebSocket, room: InterviewRoom) -> Optional[str]:
    """The next inbound message, or None once the room has closed itself."""
    receive = asyncio.ensure_future(websocket.receive_text())
    closed = asyncio.ensure_future(room.wait_closed())
    done, _ = await asyncio.wait({receive, closed}, return_when=asyncio.FIRST_COMPLETED)
    closed.cancel()
    if receive in done:
        return receive.result()
    receive.cancel()
    return None


@router.websocket("/room")
async def interview_room(websocket: WebSocket, profile_id: str):
    context: AppContext = websocket.app.state.context
    await websocket.accept()

    surface = QueueSurface()
    devices = RemoteMediaDevices(context.settings.MEDIA_PERMISSION_TIMEOUT_SECONDS)
    room = context.create_room(devices, surface)
    writer = asyncio.create_task(_write(websocket, surface))
    begin_task: Optional[asyncio.Task] = None
    close_code = 1000

    try:
        try:
            await room.open(profile_id)
        except RoomEntryError as e:
            logger.warning("Room entry refused for %s: %s", profile_id, e)
            surface.fail(str(e))
            close_code = POLICY_VIOLATION
            return

        context.rooms[room.session_id] = room

        while not room.closed:
            text = await _next_text(websocket, room)
            if text is None:
                break
            try:
                message = room_message_adapter.validate_json(text)
            except ValidationError as e:
                logger.warning("Room %s: bad message ignored: %s", room.session_id, e.errors()[:1])
                continue

            if isinstance(message, BeginMessage):
                if begin_task is None or begin_task.done():
                    begin_task = asyncio.create_task(room.begin())
                    begin_task.add_done_callback(_log_begin_failure)
            elif isinstance(message, MediaMessage):
                devices.report_permission(message.granted)
            elif isinstance(message, VisibilityMessage):
                room.hub.emit(BrowserSignal.VISIBILITY_CHANGE, hidden=message.hidden)
            elif isinstance(message, BlurMessage):
                room.hub.emit(BrowserSignal.BLUR)
            elif isinstance(message, FullscreenMessage):
                room.hub.emit(BrowserSignal.FULLSCREEN_CHANGE, active=message.active)
            elif isinstance(message, (FrameMessage, AudioMessage)):
                stream = devices.stream
                if stream is None:
                    continue
                try:
                    if isinstance(message, FrameMessage):
                        stream.push_frame(message.timestamp, _decode(message.image))
                    else:
                        stream.push_audio(_decode(message.data))
                except ValueError as e:
                    logger.warning("Room %s: undecodable %s ignored: %s", room.session_id, message.type, e)
            elif isinstance(message, EndMessage):
                room.end_interview()

    except WebSocketDisconnect:
        logger.info("Room %s: candidate disconnected", room.session_id)
    finally:
        if begin_task is not None and not begin_task.done():
            begin_task.cancel()
            await asyncio.gather(begin_task, return_exceptions=True)
        await room.dispose()
        if room.session_id is not None:
            context.rooms.pop(room.session_id, None)
        surface.close()
        await writer
        try:
            await websocket.close(code=close_code)
        except RuntimeError:
            # Already closed by the client
            pass
