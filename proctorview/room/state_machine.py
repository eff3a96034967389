"""The interview room.

Phases run loading -> instructions -> connecting -> live and end in either
completed or terminated. Proctoring monitors, the conversation engine and the
candidate's own end button all report into this object; whichever terminal
signal arrives first sets the latch and every later one is ignored. All
mutations happen in plain synchronous methods on the event loop, so checking
and setting the latch can never interleave with another signal.
"""
import asyncio
import logging
from typing import Callable, Optional

from proctorview.ai.conversation import ConversationEngine, ConversationEvent
from proctorview.ai.script import build_script
from proctorview.core.config import Settings
from proctorview.core.errors import (
    ConversationStartError,
    IllegalTransitionError,
    MediaPermissionError,
)
from proctorview.room.face_presence import FaceCounter, FacePresenceMonitor, FaceThresholds
from proctorview.room.media import MediaDevices, MediaStream
from proctorview.room.monitors import FocusMonitor, FullscreenMonitor
from proctorview.room.periodic import PeriodicTask
from proctorview.room.signals import SignalHub
from proctorview.room.surface import RoomSurface
from proctorview.room.transcript import Transcript
from proctorview.services.session_context import SessionContext
from proctorview.services.session_service import mark_completed, mark_terminated
from proctorview.services.store import RecordStore
from proctorview.utils.enums import (
    ConversationEventType,
    EventType,
    RoomPhase,
    SeverityLevel,
)

logger = logging.getLogger(__name__)

PHASE_TRANSITIONS = {
    RoomPhase.LOADING: {RoomPhase.INSTRUCTIONS},
    RoomPhase.INSTRUCTIONS: {RoomPhase.CONNECTING},
    RoomPhase.CONNECTING: {RoomPhase.LIVE, RoomPhase.INSTRUCTIONS, RoomPhase.TERMINATED},
    RoomPhase.LIVE: {RoomPhase.COMPLETED, RoomPhase.TERMINATED},
    RoomPhase.COMPLETED: set(),
    RoomPhase.TERMINATED: set(),
}

MEDIA_DENIED_MESSAGE = "Please allow camera and microphone permissions."
CONNECT_FAILED_MESSAGE = "Could not connect to the interviewer. Please try again."


class InterviewRoom:
    def __init__(
        self,
        store: RecordStore,
        settings: Settings,
        engine_factory: Callable[[], ConversationEngine],
        detector: FaceCounter,
        devices: MediaDevices,
        surface: RoomSurface,
        hub: Optional[SignalHub] = None,
    ):
        self._store = store
        self._settings = settings
        self._engine_factory = engine_factory
        self._detector = detector
        self._devices = devices
        self._surface = surface
        self.hub = hub or SignalHub()

        self.phase = RoomPhase.LOADING
        self.context: Optional[SessionContext] = None
        self.transcript = Transcript()
        self.elapsed_seconds = 0
        self.termination_reason: Optional[str] = None
        self.face_monitor: Optional[FacePresenceMonitor] = None

        self._focus = FocusMonitor(self.hub, self._on_violation)
        self._fullscreen = FullscreenMonitor(self.hub, self._on_violation)
        self._engine: Optional[ConversationEngine] = None
        self._stream: Optional[MediaStream] = None
        self._face_loop: Optional[PeriodicTask] = None
        self._clock: Optional[PeriodicTask] = None

        self._latched: Optional[RoomPhase] = None
        self._torn_down = False
        self._closed = asyncio.Event()
        self._tasks = set()

    @property
    def session_id(self) -> Optional[str]:
        return self.context.session.id if self.context else None

    @property
    def outcome(self) -> Optional[RoomPhase]:
        return self._latched

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def _halted(self) -> bool:
        return self._latched is not None or self._torn_down

    def _move(self, phase: RoomPhase) -> None:
        if phase not in PHASE_TRANSITIONS[self.phase]:
            raise IllegalTransitionError(f"Room cannot move from {self.phase.value} to {phase.value}")
        logger.info("Room %s: %s -> %s", self.session_id, self.phase.value, phase.value)
        self.phase = phase
        self._surface.show_phase(phase)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Room %s task failed", self.session_id, exc_info=task.exception())

    # Entry

    async def open(self, candidate_id: str) -> None:
        """Resolve the candidate's session. RoomEntryError propagates to the caller."""
        self.context = await SessionContext.load(self._store, candidate_id)
        self._move(RoomPhase.INSTRUCTIONS)

    async def begin(self) -> None:
        """The candidate accepted the security policy and asked to start."""
        if self.phase != RoomPhase.INSTRUCTIONS or self._halted:
            return

        self._move(RoomPhase.CONNECTING)
        self._fullscreen.attach()
        self._surface.request_fullscreen()

        try:
            stream = await self._devices.acquire()
        except MediaPermissionError as exc:
            logger.warning("Room %s: media unavailable: %s", self.session_id, exc)
            if self._halted:
                return
            self._revert(MEDIA_DENIED_MESSAGE)
            return

        if self._halted:
            stream.stop()
            return
        self._stream = stream

        engine = self._engine = self._engine_factory()
        script = build_script(self.context.interview, self.context.session.candidate_name)
        try:
            await asyncio.wait_for(
                engine.start(script, stream.audio_chunks(), self.on_conversation_event),
                timeout=self._settings.HANDSHAKE_TIMEOUT_SECONDS,
            )
        except (ConversationStartError, asyncio.TimeoutError) as exc:
            logger.warning("Room %s: interviewer did not connect: %r", self.session_id, exc)
            await engine.stop()
            if not self._halted:
                self._revert(CONNECT_FAILED_MESSAGE)

    def _revert(self, message: str) -> None:
        self._fullscreen.detach()
        if self._stream is not None:
            self._stream.stop()
            self._stream = None
        self._engine = None
        self._move(RoomPhase.INSTRUCTIONS)
        self._surface.show_error(message)

    def _go_live(self) -> None:
        self._move(RoomPhase.LIVE)
        self._focus.attach()

        self.face_monitor = FacePresenceMonitor(
            detector=self._detector,
            frames=self._stream.frames,
            thresholds=FaceThresholds.from_settings(self._settings),
            on_warning=self._on_face_warning,
            on_violation=self._on_violation,
        )
        self._face_loop = PeriodicTask(
            self._settings.FACE_SAMPLE_INTERVAL_MS / 1000,
            self.face_monitor.sample,
            name=f"face-presence-{self.session_id}",
        )
        self._clock = PeriodicTask(1.0, self._tick, name=f"clock-{self.session_id}")
        self._face_loop.start()
        self._clock.start()

    def _tick(self) -> None:
        if self.phase == RoomPhase.LIVE:
            self.elapsed_seconds += 1
            self._surface.show_elapsed(self.elapsed_seconds)

    # Signals

    def on_conversation_event(self, event: ConversationEvent) -> None:
        if event.type == ConversationEventType.CALL_STARTED:
            if self.phase == RoomPhase.CONNECTING and not self._halted:
                self._go_live()
        elif event.type == ConversationEventType.CALL_ENDED:
            self._finish("interviewer ended the call")
        elif event.type == ConversationEventType.ERROR:
            if self._is_call_end(event.error):
                self._finish(f"call closed: {event.error}")
            else:
                logger.warning("Room %s: interviewer error ignored: %s", self.session_id, event.error)
        elif event.type == ConversationEventType.TRANSCRIPT:
            self.transcript.add(event.speaker, event.text)
        elif event.type == ConversationEventType.AUDIO:
            if not self._halted:
                self._surface.play_audio(event.audio)
        elif event.type == ConversationEventType.VOLUME:
            if not self._halted:
                self._surface.show_volume(event.level)

    def _is_call_end(self, error: Optional[str]) -> bool:
        text = (error or "").lower()
        return any(marker.lower() in text for marker in self._settings.CALL_END_ERROR_MARKERS)

    def end_interview(self) -> None:
        """The candidate pressed the end button."""
        self._finish("candidate ended the interview")

    def _on_face_warning(self, kind: Optional[EventType], message: Optional[str]) -> None:
        if self._halted:
            return
        self._surface.show_warning(message)
        if kind is not None:
            self._spawn(self.context.record_event(kind, SeverityLevel.WARNING, message))

    def _on_violation(self, kind: EventType, reason: str) -> None:
        if self.phase not in (RoomPhase.CONNECTING, RoomPhase.LIVE):
            return
        if not self._latch(RoomPhase.TERMINATED):
            return
        logger.warning("Room %s: terminated by %s: %s", self.session_id, kind.value, reason)
        self.termination_reason = reason
        self._move(RoomPhase.TERMINATED)
        self._surface.show_violation(reason)
        self._spawn(self._finalize_terminated(kind, reason))

    def _finish(self, trigger: str) -> None:
        if self.phase != RoomPhase.LIVE:
            return
        if not self._latch(RoomPhase.COMPLETED):
            return
        logger.info("Room %s: completed (%s)", self.session_id, trigger)
        self._move(RoomPhase.COMPLETED)
        self._spawn(self._finalize_completed())

    def _latch(self, outcome: RoomPhase) -> bool:
        if self._halted:
            return False
        self._latched = outcome
        return True

    # Exit

    async def _finalize_completed(self) -> None:
        await self._teardown()
        try:
            await self.context.save_transcript(self.transcript.render())
            await self.context.update_session(mark_completed(self.context.session))
        except Exception:
            logger.exception("Room %s: could not persist completion", self.session_id)
        self._leave(RoomPhase.COMPLETED)

    async def _finalize_terminated(self, kind: EventType, reason: str) -> None:
        await self._teardown()
        try:
            await self.context.record_event(kind, SeverityLevel.VIOLATION, reason)
            await self.context.update_session(mark_terminated(self.context.session, reason))
        except Exception:
            logger.exception("Room %s: could not persist termination", self.session_id)
        self._leave(RoomPhase.TERMINATED)

    def _leave(self, outcome: RoomPhase) -> None:
        self._surface.exit_fullscreen()
        self._surface.navigate_away(outcome)
        self._closed.set()

    async def _teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True

        for loop in (self._face_loop, self._clock):
            if loop is not None:
                loop.cancel()
        self._focus.detach()
        self._fullscreen.detach()
        if self._engine is not None:
            try:
                await self._engine.stop()
            except Exception:
                logger.exception("Room %s: error stopping interviewer", self.session_id)
        if self._stream is not None:
            self._stream.stop()

    async def dispose(self) -> None:
        """The candidate navigated away. Safe after, during or instead of a terminal exit."""
        await self._teardown()
        pending = [task for task in self._tasks if task is not asyncio.current_task()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()
