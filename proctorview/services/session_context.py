import logging
from datetime import datetime
from uuid import uuid4

from proctorview.core.errors import InterviewDataMissingError, NoActiveSessionError
from proctorview.schemas.event import ProctoringEvent
from proctorview.schemas.interview import Interview
from proctorview.schemas.session import InterviewResponse, InterviewSession
from proctorview.services.store import RecordStore
from proctorview.utils.enums import EventType, SessionStatus, SeverityLevel

logger = logging.getLogger(__name__)

# The whole spoken interview is stored as one response against this pseudo-question.
VERBAL_QUESTION_ID = "verbal-assessment"
VERBAL_QUESTION_TEXT = "Verbal Evaluation"


class SessionContext:
    """The interview script plus the candidate's live session record.

    The interview is read once and never changes. The session record is only
    written through this object while a room is open.
    """

    def __init__(self, store: RecordStore, interview: Interview, session: InterviewSession):
        self._store = store
        self._interview = interview
        self._session = session

    @classmethod
    async def load(cls, store: RecordStore, candidate_id: str) -> "SessionContext":
        sessions = await store.get_sessions_by_candidate(candidate_id)
        active = [s for s in sessions if s.status == SessionStatus.IN_PROGRESS]
        if not active:
            raise NoActiveSessionError(candidate_id)

        session = max(active, key=lambda s: s.started_at)
        interview = await store.get_interview(session.interview_id)
        if interview is None:
            raise InterviewDataMissingError(session.interview_id)

        return cls(store, interview, session)

    @property
    def interview(self) -> Interview:
        return self._interview

    @property
    def session(self) -> InterviewSession:
        return self._session

    async def update_session(self, session: InterviewSession) -> InterviewSession:
        if session.id != self._session.id:
            raise ValueError("Session context can only update its own session")
        self._session = session
        await self._store.save_session(session)
        return session

    async def save_transcript(self, transcript: str) -> InterviewResponse:
        response = InterviewResponse(
            id=str(uuid4()),
            session_id=self._session.id,
            question_id=VERBAL_QUESTION_ID,
            question_text=VERBAL_QUESTION_TEXT,
            response_text=transcript,
            timestamp=datetime.utcnow(),
        )
        await self._store.save_response(response)
        return response

    async def record_event(
        self,
        event_type: EventType,
        severity: SeverityLevel,
        message: str,
    ) -> ProctoringEvent:
        event = ProctoringEvent(
            id=str(uuid4()),
            session_id=self._session.id,
            event_type=event_type,
            severity=severity,
            message=message,
            timestamp=datetime.utcnow(),
        )
        await self._store.add_event(event)
        return event
