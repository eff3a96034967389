from dataclasses import dataclass, field
from typing import Callable

from proctorview.ai.conversation import ConversationEngine
from proctorview.ai.gemini_client import Scorer
from proctorview.core.config import Settings
from proctorview.room.face_presence import FaceCounter
from proctorview.room.media import MediaDevices
from proctorview.room.state_machine import InterviewRoom
from proctorview.room.surface import RoomSurface
from proctorview.services.evaluation_service import EvaluationPipeline
from proctorview.services.store import RecordStore


@dataclass
class AppContext:
    """Everything the routes need, built once at startup and passed explicitly."""

    settings: Settings
    store: RecordStore
    scorer: Scorer
    conversation_factory: Callable[[], ConversationEngine]
    detector_factory: Callable[[], FaceCounter]
    rooms: dict = field(default_factory=dict)

    def __post_init__(self):
        self.evaluation = EvaluationPipeline(self.store, self.scorer, self.settings)

    def create_room(self, devices: MediaDevices, surface: RoomSurface) -> InterviewRoom:
        return InterviewRoom(
            store=self.store,
            settings=self.settings,
            engine_factory=self.conversation_factory,
            detector=self.detector_factory(),
            devices=devices,
            surface=surface,
        )


def build_default_context(settings: Settings) -> AppContext:
    """Wire the production collaborators: SQL store, Gemini and MediaPipe."""
    from google import genai

    from proctorview.ai.conversation import GeminiLiveConversation
    from proctorview.ai.face_detector import MediaPipeFaceCounter
    from proctorview.ai.gemini_client import GeminiInterviewAI
    from proctorview.core.database import SessionLocal, init_db

    init_db()
    client = genai.Client(api_key=settings.GEMINI_API_KEY)

    return AppContext(
        settings=settings,
        store=RecordStore(SessionLocal),
        scorer=GeminiInterviewAI(client, settings),
        conversation_factory=lambda: GeminiLiveConversation(client, settings),
        detector_factory=lambda: MediaPipeFaceCounter(settings.FACE_MIN_CONFIDENCE),
    )
