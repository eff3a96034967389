import asyncio
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from proctorview.ai.conversation import ConversationEvent
from proctorview.core.config import Settings
from proctorview.core.database import init_db
from proctorview.core.errors import ConversationStartError, MediaPermissionError, ScoringError
from proctorview.room.media import RemoteMediaStream
from proctorview.room.state_machine import InterviewRoom
from proctorview.schemas.evaluation import Analysis, ScoringResult, Strength
from proctorview.schemas.interview import InterviewCreate, ParameterIn, QuestionIn
from proctorview.schemas.profile import ProfileCreate
from proctorview.services.interview_service import create_interview
from proctorview.services.profile_service import register_profile
from proctorview.services.session_service import redeem_access_code
from proctorview.services.store import RecordStore
from proctorview.utils.enums import ConversationEventType, UserRole


class FakeDetector:
    def __init__(self, count=1):
        self.count = count
        self.error = None
        self.calls = 0

    def count_faces(self, frame):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.count


class FakeEngine:
    """Conversation engine that connects instantly unless told to fail or hang."""

    def __init__(self, fail=False, hang=False):
        self.fail = fail
        self.hang = hang
        self.script = None
        self.emit = None
        self.stopped = 0
        self.entered = asyncio.Event()
        self._released = asyncio.Event()

    async def start(self, script, audio, emit):
        self.script = script
        self.emit = emit
        self.entered.set()
        if self.fail:
            raise ConversationStartError("agent unreachable")
        if self.hang:
            await self._released.wait()
            return
        emit(ConversationEvent(ConversationEventType.CALL_STARTED))

    async def stop(self):
        self.stopped += 1
        self._released.set()

    def say(self, speaker, text):
        self.emit(ConversationEvent(ConversationEventType.TRANSCRIPT, text=text, speaker=speaker))


class FakeScorer:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = 0
        self.last_transcript = None

    async def evaluate_candidate(self, job_role, parameters, transcript):
        self.calls += 1
        self.last_transcript = list(transcript)
        if self.fail:
            raise ScoringError("model unavailable")
        return ScoringResult(
            overall_score=78.0,
            parameter_scores={p.name: 70.0 + i for i, p in enumerate(parameters)},
            analysis=Analysis(
                summary="Solid fundamentals.",
                strengths=[Strength(title="Clarity", description="Clear answers", evidence="Explained indexes")],
                recommendation="Proceed to the next round",
                confidence=0.8,
            ),
        )

    async def suggest_parameters(self, job_role):
        return [
            ParameterIn(name="Technical Depth", description="Core knowledge", weight=40),
            ParameterIn(name="Communication", description="Clarity", weight=30),
            ParameterIn(name="Problem Solving", description="Approach", weight=20),
            ParameterIn(name="Culture Fit", description="Values", weight=10),
        ]

    async def rephrase_question(self, text):
        return [f"{text} (1)", f"{text} (2)", f"{text} (3)"]


class RecordingSurface:
    def __init__(self):
        self.calls = []

    def _record(self, name, value=None):
        self.calls.append((name, value))

    def of(self, name):
        return [value for call, value in self.calls if call == name]

    def show_phase(self, phase):
        self._record("phase", phase)

    def show_elapsed(self, seconds):
        self._record("elapsed", seconds)

    def show_warning(self, message):
        self._record("warning", message)

    def show_error(self, message):
        self._record("error", message)

    def show_violation(self, reason):
        self._record("violation", reason)

    def play_audio(self, chunk):
        self._record("audio", chunk)

    def show_volume(self, level):
        self._record("volume", level)

    def request_fullscreen(self):
        self._record("fullscreen", "enter")

    def exit_fullscreen(self):
        self._record("fullscreen", "exit")

    def navigate_away(self, outcome):
        self._record("navigate", outcome)


class FakeDevices:
    def __init__(self, granted=True):
        self.granted = granted
        self.streams = []

    async def acquire(self):
        if not self.granted:
            raise MediaPermissionError("Camera or microphone access was denied")
        stream = RemoteMediaStream()
        self.streams.append(stream)
        return stream


@pytest.fixture
def settings():
    return Settings(
        GEMINI_API_KEY="test-key",
        HANDSHAKE_TIMEOUT_SECONDS=1.0,
        MEDIA_PERMISSION_TIMEOUT_SECONDS=1.0,
        SCORING_TIMEOUT_SECONDS=1.0,
    )


@pytest.fixture
def store(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'proctorview.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield RecordStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()


def interview_payload(**overrides):
    values = dict(
        job_role="Backend Engineer",
        company_name="Acme",
        title="Backend Engineer II",
        questions=[
            QuestionIn(text="Tell me about a system you designed."),
            QuestionIn(text="How do you approach debugging production issues?"),
        ],
        parameters=[
            ParameterIn(name="Technical Depth", description="Core knowledge", weight=60),
            ParameterIn(name="Communication", description="Clarity", weight=40),
        ],
    )
    values.update(overrides)
    return InterviewCreate(**values)


@pytest.fixture
async def recruiter(store):
    return await register_profile(store, ProfileCreate(
        email="rita@acme-corp.com", name="Rita Recruiter", role=UserRole.RECRUITER, company_name="Acme",
    ))


@pytest.fixture
async def candidate(store):
    return await register_profile(store, ProfileCreate(
        email="cam@mailbox.org", name="Cam Candidate", role=UserRole.INTERVIEWEE,
    ))


@pytest.fixture
async def interview(store, settings, recruiter):
    return await create_interview(store, settings, recruiter, interview_payload())


@pytest.fixture
async def session(store, candidate, interview):
    return await redeem_access_code(store, candidate, interview.code)


@pytest.fixture
async def make_room(store, settings):
    """Build a room with fake collaborators; returns the room plus its fakes."""
    rooms = []

    def build(engine=None, detector=None, devices=None, room_settings=None):
        fakes = SimpleNamespace(
            engine=engine or FakeEngine(),
            detector=detector or FakeDetector(),
            devices=devices or FakeDevices(),
            surface=RecordingSurface(),
        )
        room = InterviewRoom(
            store=store,
            settings=room_settings or settings,
            engine_factory=lambda: fakes.engine,
            detector=fakes.detector,
            devices=fakes.devices,
            surface=fakes.surface,
        )
        rooms.append(room)
        return room, fakes

    yield build

    for room in rooms:
        await room.dispose()
