import pytest

from proctorview.core.errors import AccessCodeError, IllegalTransitionError, NotFoundError, SessionConflictError
from proctorview.schemas.profile import ProfileCreate
from proctorview.services.interview_service import archive_interview
from proctorview.services.profile_service import register_profile
from proctorview.services.session_service import (
    mark_abandoned,
    mark_completed,
    mark_terminated,
    record_decision,
    redeem_access_code,
)
from proctorview.utils.enums import SessionDecision, SessionStatus, UserRole


async def test_redeem_creates_pending_session(session, interview, candidate):
    assert session.status == SessionStatus.IN_PROGRESS
    assert session.decision == SessionDecision.PENDING
    assert session.interview_id == interview.id
    assert session.interview_title == "Backend Engineer II"
    assert session.company_name == "Acme"
    assert session.candidate_name == candidate.name
    assert session.candidate_email == "cam@mailbox.org"


async def test_redeem_is_case_insensitive_and_resumes(store, candidate, interview, session):
    again = await redeem_access_code(store, candidate, f"  {interview.code.lower()} ")
    assert again.id == session.id
    assert len(await store.get_sessions_by_candidate(candidate.id)) == 1


async def test_redeem_after_finishing_is_a_conflict(store, candidate, interview, session):
    await store.save_session(mark_completed(session))
    with pytest.raises(SessionConflictError, match="already completed"):
        await redeem_access_code(store, candidate, interview.code)


async def test_redeem_unknown_code(store, candidate):
    with pytest.raises(AccessCodeError, match="Invalid Access Code"):
        await redeem_access_code(store, candidate, "ZZZZZZ")


async def test_redeem_archived_interview(store, candidate, recruiter, interview):
    await archive_interview(store, recruiter, interview.id)
    with pytest.raises(AccessCodeError):
        await redeem_access_code(store, candidate, interview.code)


async def test_each_candidate_gets_their_own_session(store, interview, session):
    other = await register_profile(store, ProfileCreate(
        email="otto@mailbox.org", name="Otto", role=UserRole.INTERVIEWEE,
    ))
    theirs = await redeem_access_code(store, other, interview.code)
    assert theirs.id != session.id
    assert len(await store.get_sessions_by_interview(interview.id)) == 2


async def test_terminated_forces_failed_decision(session):
    terminated = mark_terminated(session, "Candidate exited full-screen mode.")
    assert terminated.status == SessionStatus.TERMINATED_EARLY
    assert terminated.decision == SessionDecision.FAILED
    assert terminated.termination_reason == "Candidate exited full-screen mode."
    assert terminated.completed_at is not None


async def test_termination_needs_a_reason(session):
    with pytest.raises(ValueError):
        mark_terminated(session, "")


async def test_completion_leaves_decision_pending(session):
    completed = mark_completed(session)
    assert completed.status == SessionStatus.COMPLETED
    assert completed.decision == SessionDecision.PENDING


async def test_final_statuses_do_not_move(session):
    completed = mark_completed(session)
    with pytest.raises(IllegalTransitionError):
        mark_terminated(completed, "late violation")
    with pytest.raises(IllegalTransitionError):
        mark_completed(mark_abandoned(session))


async def test_record_decision(store, session):
    updated = await record_decision(store, session.id, SessionDecision.PASSED)
    assert updated.decision == SessionDecision.PASSED
    assert (await store.get_session(session.id)).decision == SessionDecision.PASSED


async def test_record_decision_unknown_session(store):
    with pytest.raises(NotFoundError):
        await record_decision(store, "missing", SessionDecision.FAILED)
