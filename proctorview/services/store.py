"""Record store over SQLAlchemy.

Every entity is read and written as a pydantic schema object; ORM rows never
leave this module. Saves are upserts keyed by id (last write wins, no version
check). Public methods are coroutines that run the blocking database work in a
worker thread, so a live room sharing the event loop is never stalled by it.
"""
import asyncio
import functools
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from proctorview.models.evaluation import EvaluationResult as EvaluationRow
from proctorview.models.event import ProctoringEvent as EventRow
from proctorview.models.interview import Interview as InterviewRow
from proctorview.models.profile import Profile as ProfileRow
from proctorview.models.response import InterviewResponse as ResponseRow
from proctorview.models.session import InterviewSession as SessionRow
from proctorview.schemas.evaluation import EvaluationResult
from proctorview.schemas.event import ProctoringEvent
from proctorview.schemas.interview import Interview
from proctorview.schemas.profile import Profile
from proctorview.schemas.session import InterviewResponse, InterviewSession


def _off_loop(method):
    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        return await asyncio.to_thread(method, self, *args, **kwargs)

    return wrapper


def _row_values(record: BaseModel) -> dict:
    values = record.model_dump()
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in values.items()
    }


class RecordStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _upsert(self, row_type, record: BaseModel):
        with self._session_factory() as db:
            db.merge(row_type(**_row_values(record)))
            db.commit()

    def _first(self, db: Session, row_type, *criteria):
        return db.query(row_type).filter(*criteria).first()

    # Profiles

    @_off_loop
    def save_profile(self, profile: Profile) -> Profile:
        self._upsert(ProfileRow, profile)
        return profile

    @_off_loop
    def get_profile(self, profile_id: str) -> Optional[Profile]:
        with self._session_factory() as db:
            row = self._first(db, ProfileRow, ProfileRow.id == profile_id)
            return Profile.model_validate(row) if row else None

    @_off_loop
    def get_profile_by_email(self, email: str) -> Optional[Profile]:
        with self._session_factory() as db:
            row = self._first(db, ProfileRow, ProfileRow.email == email.strip().lower())
            return Profile.model_validate(row) if row else None

    # Interviews

    @_off_loop
    def save_interview(self, interview: Interview) -> Interview:
        self._upsert(InterviewRow, interview)
        return interview

    @_off_loop
    def get_interview(self, interview_id: str) -> Optional[Interview]:
        with self._session_factory() as db:
            row = self._first(db, InterviewRow, InterviewRow.id == interview_id)
            return Interview.model_validate(row) if row else None

    @_off_loop
    def get_interviews(self, recruiter_id: Optional[str] = None) -> list[Interview]:
        with self._session_factory() as db:
            query = db.query(InterviewRow)
            if recruiter_id is not None:
                query = query.filter(InterviewRow.recruiter_id == recruiter_id)
            rows = query.order_by(InterviewRow.created_at.desc()).all()
            return [Interview.model_validate(row) for row in rows]

    @_off_loop
    def get_interview_by_code(self, code: str) -> Optional[Interview]:
        with self._session_factory() as db:
            row = self._first(db, InterviewRow, InterviewRow.code == code.strip().upper())
            return Interview.model_validate(row) if row else None

    # Sessions

    @_off_loop
    def create_session(self, session: InterviewSession) -> InterviewSession:
        """Insert a new session; raises IntegrityError if the candidate already has one."""
        with self._session_factory() as db:
            db.add(SessionRow(**_row_values(session)))
            db.commit()
        return session

    @_off_loop
    def save_session(self, session: InterviewSession) -> InterviewSession:
        self._upsert(SessionRow, session)
        return session

    @_off_loop
    def get_session(self, session_id: str) -> Optional[InterviewSession]:
        with self._session_factory() as db:
            row = self._first(db, SessionRow, SessionRow.id == session_id)
            return InterviewSession.model_validate(row) if row else None

    @_off_loop
    def get_sessions_by_candidate(self, candidate_id: str) -> list[InterviewSession]:
        with self._session_factory() as db:
            rows = (
                db.query(SessionRow)
                .filter(SessionRow.candidate_id == candidate_id)
                .order_by(SessionRow.started_at.desc())
                .all()
            )
            return [InterviewSession.model_validate(row) for row in rows]

    @_off_loop
    def get_sessions_by_interview(self, interview_id: str) -> list[InterviewSession]:
        with self._session_factory() as db:
            rows = (
                db.query(SessionRow)
                .filter(SessionRow.interview_id == interview_id)
                .order_by(SessionRow.started_at.desc())
                .all()
            )
            return [InterviewSession.model_validate(row) for row in rows]

    # Responses

    @_off_loop
    def save_response(self, response: InterviewResponse) -> InterviewResponse:
        self._upsert(ResponseRow, response)
        return response

    @_off_loop
    def get_responses_by_session(self, session_id: str) -> list[InterviewResponse]:
        with self._session_factory() as db:
            rows = (
                db.query(ResponseRow)
                .filter(ResponseRow.session_id == session_id)
                .order_by(ResponseRow.timestamp.asc())
                .all()
            )
            return [InterviewResponse.model_validate(row) for row in rows]

    # Evaluations

    @_off_loop
    def save_evaluation(self, evaluation: EvaluationResult) -> EvaluationResult:
        with self._session_factory() as db:
            db.merge(EvaluationRow(
                id=evaluation.id,
                response_id=evaluation.response_id,
                overall_score=evaluation.overall_score,
                parameter_scores=dict(evaluation.parameter_scores),
                analysis=evaluation.analysis.model_dump(),
            ))
            db.commit()
        return evaluation

    @_off_loop
    def get_evaluation_by_session(self, session_id: str) -> Optional[EvaluationResult]:
        with self._session_factory() as db:
            row = (
                db.query(EvaluationRow)
                .join(ResponseRow, ResponseRow.id == EvaluationRow.response_id)
                .filter(ResponseRow.session_id == session_id)
                .first()
            )
            return EvaluationResult.model_validate(row) if row else None

    # Proctoring events

    @_off_loop
    def add_event(self, event: ProctoringEvent) -> ProctoringEvent:
        with self._session_factory() as db:
            db.add(EventRow(**_row_values(event)))
            db.commit()
        return event

    @_off_loop
    def get_events_by_session(self, session_id: str) -> list[ProctoringEvent]:
        with self._session_factory() as db:
            rows = (
                db.query(EventRow)
                .filter(EventRow.session_id == session_id)
                .order_by(EventRow.timestamp.asc())
                .all()
            )
            return [ProctoringEvent.model_validate(row) for row in rows]
