from fastapi import APIRouter, Depends, HTTPException

from proctorview.api.v1.deps import get_context, recruiter_only
from proctorview.core.context import AppContext
from proctorview.core.errors import InvalidInterviewError, NotFoundError
from proctorview.schemas.interview import (
    Interview,
    InterviewCreate,
    ParameterIn,
    ParameterSuggestionRequest,
    RephraseRequest,
)
from proctorview.schemas.profile import Profile
from proctorview.schemas.session import InterviewResults
from proctorview.services.interview_service import (
    archive_interview,
    create_interview,
    get_results,
)

router = APIRouter()


@router.post("/interviews", response_model=Interview)
async def create_new_interview(
    payload: InterviewCreate,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    try:
        return await create_interview(context.store, context.settings, recruiter, payload)
    except InvalidInterviewError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/interviews", response_model=list[Interview])
async def list_interviews(
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    return await context.store.get_interviews(recruiter_id=recruiter.id)


@router.post("/interviews/{interview_id}/archive", response_model=Interview)
async def archive(
    interview_id: str,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    try:
        return await archive_interview(context.store, recruiter, interview_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/interviews/{interview_id}/results", response_model=InterviewResults)
async def interview_results(
    interview_id: str,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    try:
        return await get_results(context.store, recruiter, interview_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# Authoring assistance

@router.post("/interviews/suggest-parameters", response_model=list[ParameterIn])
async def suggest_parameters(
    payload: ParameterSuggestionRequest,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    if not payload.job_role.strip():
        raise HTTPException(status_code=400, detail="Please enter a job role first.")
    return await context.scorer.suggest_parameters(payload.job_role.strip())


@router.post("/interviews/rephrase")
async def rephrase(
    payload: RephraseRequest,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="Question text is required")
    return {"variants": await context.scorer.rephrase_question(payload.text.strip())}
