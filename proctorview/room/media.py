"""Camera and microphone as the room sees them.

The room only needs the latest camera frame for face counting and an audio
stream to hand to the conversation agent. Devices here are fed by the
candidate's browser over the room socket.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Protocol

from proctorview.core.errors import MediaPermissionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    timestamp_ms: float
    image: Any  # encoded image bytes or a decoded BGR array


class FrameSource(Protocol):
    def latest(self) -> Optional[Frame]:
        ...


class MediaStream(Protocol):
    frames: FrameSource

    @property
    def stopped(self) -> bool:
        ...

    def audio_chunks(self) -> AsyncIterator[bytes]:
        ...

    def stop(self) -> None:
        ...


class MediaDevices(Protocol):
    async def acquire(self) -> MediaStream:
        ...


class LatestFrame:
    def __init__(self):
        self._frame: Optional[Frame] = None

    def push(self, frame: Frame) -> None:
        self._frame = frame

    def latest(self) -> Optional[Frame]:
        return self._frame


class RemoteMediaStream:
    """Tracks pushed in by the browser. Stopping drops everything after it."""

    def __init__(self):
        self.frames = LatestFrame()
        self._audio: asyncio.Queue = asyncio.Queue()
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def push_frame(self, timestamp_ms: float, image: Any) -> None:
        if not self._stopped:
            self.frames.push(Frame(timestamp_ms=timestamp_ms, image=image))

    def push_audio(self, chunk: bytes) -> None:
        if not self._stopped:
            self._audio.put_nowait(chunk)

    async def audio_chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._audio.get()
            if chunk is None:
                return
            yield chunk

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._audio.put_nowait(None)


class RemoteMediaDevices:
    """Waits for the browser to report whether camera and microphone were granted."""

    def __init__(self, permission_timeout: float):
        self.permission_timeout = permission_timeout
        self.stream: Optional[RemoteMediaStream] = None
        self._pending: Optional[asyncio.Future] = None

    async def acquire(self) -> RemoteMediaStream:
        self._pending = asyncio.get_running_loop().create_future()
        try:
            granted = await asyncio.wait_for(self._pending, timeout=self.permission_timeout)
        except asyncio.TimeoutError:
            raise MediaPermissionError("Timed out waiting for camera and microphone access")
        finally:
            self._pending = None

        if not granted:
            raise MediaPermissionError("Camera or microphone access was denied")

        self.stream = RemoteMediaStream()
        return self.stream

    def report_permission(self, granted: bool) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(granted)
        else:
            logger.debug("Media permission report with no pending request ignored")
