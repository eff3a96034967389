from fastapi import APIRouter, Depends, HTTPException

from proctorview.api.v1.deps import get_context, recruiter_only
from proctorview.core.context import AppContext
from proctorview.core.errors import EvaluationUnavailableError, NotFoundError, ScoringError
from proctorview.schemas.evaluation import SessionReview
from proctorview.schemas.profile import Profile
from proctorview.services.interview_service import get_owned_interview

router = APIRouter()


@router.get("/reports/{session_id}", response_model=SessionReview)
async def get_session_review(
    session_id: str,
    recruiter: Profile = Depends(recruiter_only),
    context: AppContext = Depends(get_context),
):
    try:
        session = await context.store.get_session(session_id)
        if session is None:
            raise NotFoundError("Session not found")
        await get_owned_interview(context.store, recruiter, session.interview_id)
        return await context.evaluation.evaluate(session_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EvaluationUnavailableError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScoringError:
        raise HTTPException(status_code=502, detail="Analysis failed.")
