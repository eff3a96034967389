import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from proctorview.core.config import Settings
from proctorview.room.media import Frame, FrameSource
from proctorview.utils.enums import EventType

logger = logging.getLogger(__name__)

NO_FACE_WARNING = "No face detected. Please stay in front of the camera."
MULTIPLE_FACES_WARNING = "Multiple faces detected. Only the candidate may be on camera."
MULTIPLE_FACES_REASON = "Multiple faces detected in the camera frame."

# A gap in the frame stream longer than this only counts as this much time.
MAX_STEP_MS = 1000.0


class FaceCounter(Protocol):
    def count_faces(self, frame: Frame) -> int:
        ...


@dataclass(frozen=True)
class FaceThresholds:
    sample_interval_ms: float = 100.0
    no_face_warning_ms: float = 2000.0
    no_face_terminate_ms: float = 10000.0
    multi_face_terminate_ms: float = 5000.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "FaceThresholds":
        return cls(
            sample_interval_ms=settings.FACE_SAMPLE_INTERVAL_MS,
            no_face_warning_ms=settings.NO_FACE_WARNING_MS,
            no_face_terminate_ms=settings.NO_FACE_TERMINATE_MS,
            multi_face_terminate_ms=settings.MULTI_FACE_TERMINATE_MS,
        )

    @property
    def no_face_reason(self) -> str:
        return f"No face detected for more than {self.no_face_terminate_ms / 1000:g} seconds."


class FacePresenceMonitor:
    """Debounced face-count checks over the latest camera frame.

    Two accumulators (milliseconds) grow while the frame shows no face or more
    than one face, and shrink by half a step whenever exactly one face is seen.
    Crossing a terminate threshold reports a violation once; after that the
    monitor ignores further frames.
    """

    def __init__(
        self,
        detector: FaceCounter,
        frames: FrameSource,
        thresholds: FaceThresholds,
        on_warning: Callable[[Optional[EventType], Optional[str]], None],
        on_violation: Callable[[EventType, str], None],
    ):
        self._detector = detector
        self._frames = frames
        self.thresholds = thresholds
        self._on_warning = on_warning
        self._on_violation = on_violation

        self.no_face_ms = 0.0
        self.multi_face_ms = 0.0
        self.warning: Optional[EventType] = None
        self.tripped = False
        self._last_timestamp: Optional[float] = None

    async def sample(self) -> None:
        """Process the newest frame if it has not been seen yet."""
        if self.tripped:
            return

        frame = self._frames.latest()
        if frame is None:
            return
        if self._last_timestamp is not None and frame.timestamp_ms <= self._last_timestamp:
            return

        if self._last_timestamp is None:
            step = self.thresholds.sample_interval_ms
        else:
            step = min(frame.timestamp_ms - self._last_timestamp, MAX_STEP_MS)
        self._last_timestamp = frame.timestamp_ms

        try:
            count = await asyncio.to_thread(self._detector.count_faces, frame)
        except Exception as exc:
            logger.warning("Face detection skipped frame %s: %s", frame.timestamp_ms, exc)
            return

        self.observe(count, step)

    def observe(self, count: int, step_ms: float) -> None:
        """Fold one successful detection covering `step_ms` into the accumulators."""
        if self.tripped:
            return

        if count == 0:
            self.no_face_ms += step_ms
            if self.no_face_ms >= self.thresholds.no_face_terminate_ms:
                self._trip(EventType.FACE_MISSING, self.thresholds.no_face_reason)
            elif self.no_face_ms > self.thresholds.no_face_warning_ms:
                self._set_warning(EventType.FACE_MISSING, NO_FACE_WARNING)
        elif count > 1:
            self.multi_face_ms += step_ms
            if self.multi_face_ms >= self.thresholds.multi_face_terminate_ms:
                self._trip(EventType.MULTIPLE_FACES, MULTIPLE_FACES_REASON)
            else:
                self._set_warning(EventType.MULTIPLE_FACES, MULTIPLE_FACES_WARNING)
        else:
            decay = step_ms / 2
            self.no_face_ms = max(0.0, self.no_face_ms - decay)
            self.multi_face_ms = max(0.0, self.multi_face_ms - decay)
            self._set_warning(None, None)

    def _set_warning(self, kind: Optional[EventType], message: Optional[str]) -> None:
        if kind == self.warning:
            return
        self.warning = kind
        self._on_warning(kind, message)

    def _trip(self, kind: EventType, reason: str) -> None:
        self.tripped = True
        self._on_violation(kind, reason)
