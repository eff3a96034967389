import logging
from datetime import datetime
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from proctorview.core.errors import (
    AccessCodeError,
    IllegalTransitionError,
    NotFoundError,
    SessionConflictError,
)
from proctorview.schemas.profile import Profile
from proctorview.schemas.session import InterviewSession
from proctorview.services.store import RecordStore
from proctorview.utils.enums import InterviewStatus, SessionDecision, SessionStatus

logger = logging.getLogger(__name__)

# Status changes a session may go through. Everything except in_progress is final.
ALLOWED_TRANSITIONS = {
    SessionStatus.IN_PROGRESS: {
        SessionStatus.COMPLETED,
        SessionStatus.TERMINATED_EARLY,
        SessionStatus.ABANDONED,
    },
    SessionStatus.COMPLETED: set(),
    SessionStatus.TERMINATED_EARLY: set(),
    SessionStatus.ABANDONED: set(),
}


def _transition(session: InterviewSession, target: SessionStatus, **changes) -> InterviewSession:
    if target not in ALLOWED_TRANSITIONS[session.status]:
        raise IllegalTransitionError(
            f"Session {session.id} cannot move from {session.status.value} to {target.value}"
        )
    return session.model_copy(update={"status": target, **changes})


def mark_completed(session: InterviewSession) -> InterviewSession:
    """Finish normally. The decision is left for the reviewer."""
    return _transition(session, SessionStatus.COMPLETED, completed_at=datetime.utcnow())


def mark_terminated(session: InterviewSession, reason: str) -> InterviewSession:
    """Finish on a proctoring violation. The decision is forced to failed."""
    if not reason:
        raise ValueError("A termination reason is required")
    return _transition(
        session,
        SessionStatus.TERMINATED_EARLY,
        completed_at=datetime.utcnow(),
        termination_reason=reason,
        decision=SessionDecision.FAILED,
    )


def mark_abandoned(session: InterviewSession) -> InterviewSession:
    return _transition(session, SessionStatus.ABANDONED, completed_at=datetime.utcnow())


async def redeem_access_code(store: RecordStore, candidate: Profile, code: str) -> InterviewSession:
    """Resolve an access code to the candidate's session for that interview.

    An in-progress session is resumed; any other earlier attempt blocks a new one.
    """
    interview = await store.get_interview_by_code(code)
    if interview is None or interview.status != InterviewStatus.ACTIVE:
        raise AccessCodeError("Invalid Access Code")

    for existing in await store.get_sessions_by_candidate(candidate.id):
        if existing.interview_id != interview.id:
            continue
        if existing.status == SessionStatus.IN_PROGRESS:
            return existing
        raise SessionConflictError("You have already completed this assessment.")

    session = InterviewSession(
        id=str(uuid4()),
        interview_id=interview.id,
        interview_title=interview.display_title,
        company_name=interview.company_name,
        candidate_id=candidate.id,
        candidate_name=candidate.name,
        candidate_email=candidate.email,
        status=SessionStatus.IN_PROGRESS,
        decision=SessionDecision.PENDING,
        started_at=datetime.utcnow(),
    )
    try:
        await store.create_session(session)
    except IntegrityError:
        # Lost a race with a duplicate redemption; the winner's session is the one to use.
        logger.warning("Duplicate redemption of %s by candidate %s", interview.id, candidate.id)
        for existing in await store.get_sessions_by_candidate(candidate.id):
            if existing.interview_id == interview.id and existing.status == SessionStatus.IN_PROGRESS:
                return existing
        raise SessionConflictError("You have already completed this assessment.")

    logger.info("Session %s created for candidate %s", session.id, candidate.id)
    return session


async def record_decision(
    store: RecordStore,
    session_id: str,
    decision: SessionDecision,
) -> InterviewSession:
    session = await store.get_session(session_id)
    if session is None:
        raise NotFoundError("Session not found")

    updated = session.model_copy(update={"decision": decision})
    await store.save_session(updated)
    logger.info("Decision for session %s set to %s", session_id, decision.value)
    return updated
