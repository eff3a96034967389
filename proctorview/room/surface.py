"""Outbound side of the room: everything the candidate's screen is told to do."""
import asyncio
import base64
from typing import AsyncIterator, Optional, Protocol

from proctorview.utils.enums import RoomPhase


class RoomSurface(Protocol):
    def show_phase(self, phase: RoomPhase) -> None: ...

    def show_elapsed(self, seconds: int) -> None: ...

    def show_warning(self, message: Optional[str]) -> None: ...

    def show_error(self, message: str) -> None: ...

    def show_violation(self, reason: str) -> None: ...

    def play_audio(self, chunk: bytes) -> None: ...

    def show_volume(self, level: float) -> None: ...

    def request_fullscreen(self) -> None: ...

    def exit_fullscreen(self) -> None: ...

    def navigate_away(self, outcome: RoomPhase) -> None: ...


class QueueSurface:
    """Turns surface calls into JSON messages queued for the room socket."""

    def __init__(self):
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def _send(self, message: dict) -> None:
        if not self._closed:
            self._outbox.put_nowait(message)

    def show_phase(self, phase: RoomPhase) -> None:
        self._send({"type": "phase", "phase": phase.value})

    def show_elapsed(self, seconds: int) -> None:
        self._send({"type": "elapsed", "seconds": seconds})

    def show_warning(self, message: Optional[str]) -> None:
        self._send({"type": "warning", "message": message})

    def show_error(self, message: str) -> None:
        self._send({"type": "error", "message": message, "fatal": False})

    def fail(self, message: str) -> None:
        self._send({"type": "error", "message": message, "fatal": True})

    def show_violation(self, reason: str) -> None:
        self._send({"type": "violation", "reason": reason})

    def play_audio(self, chunk: bytes) -> None:
        self._send({"type": "audio", "data": base64.b64encode(chunk).decode("ascii")})

    def show_volume(self, level: float) -> None:
        self._send({"type": "volume", "level": round(level, 3)})

    def request_fullscreen(self) -> None:
        self._send({"type": "fullscreen", "action": "enter"})

    def exit_fullscreen(self) -> None:
        self._send({"type": "fullscreen", "action": "exit"})

    def navigate_away(self, outcome: RoomPhase) -> None:
        self._send({"type": "navigate", "outcome": outcome.value})

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._outbox.put_nowait(None)

    async def messages(self) -> AsyncIterator[dict]:
        while True:
            message = await self._outbox.get()
            if message is None:
                return
            yield message
