from fastapi import APIRouter, Depends, HTTPException

from proctorview.api.v1.deps import candidate_only, get_context, recruiter_only
from proctorview.core.context import AppContext
from proctorview.core.errors import AccessCodeError, NotFoundError, SessionConflictError
from proctorview.schemas.profile import Profile
from proctorview.schemas.session import DecisionUpdate, InterviewSession, RedeemRequest
from proctorview.services.interview_service import get_owned_interview
from proctorview.services.session_service import record_decision, redeem_access_code

router = APIRouter()


@router.post("/sessions/redeem", response_model=InterviewSession)
async def redeem(
    payload: RedeemRequest,
    candidate: Profile = Depends(candidate_only),
    context: AppContext = Depends(get_context),
):
    try:
        return await redeem_access_code(context.store, candidate, payload.code)
    except (AccessCodeError, SessionConflictError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/sessions/mine", response_model=list[InterviewSession])
async def my_sessions(
    candidate: Profile = Depends(candidate_only),
    context: AppContext = Depends(get_context),
):
    return await context.store.get_sessions_by_candidate(candidate.id)


@router.patch("/sessions/{session_id}/decision", response_model=InterviewSession)
async def set_decision(
    session_id: str,
    payload: DecisionUpdate,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    try:
        session = await context.store.get_session(session_id)
        if session is None:
            raise NotFoundError("Session not found")
        await get_owned_interview(context.store, recruiter, session.interview_id)
        return await record_decision(context.store, session_id, payload.decision)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
