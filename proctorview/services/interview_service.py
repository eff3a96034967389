import logging
import secrets
import string
from datetime import datetime
from uuid import uuid4

from proctorview.core.config import Settings
from proctorview.core.errors import InvalidInterviewError, NotFoundError
from proctorview.schemas.interview import (
    EvaluationParameter,
    Interview,
    InterviewCreate,
    Question,
)
from proctorview.schemas.profile import Profile
from proctorview.schemas.session import InterviewResults
from proctorview.services.store import RecordStore
from proctorview.utils.enums import InterviewStatus, SessionDecision, SessionStatus

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 20


def validate_weights(parameters, tolerance: int) -> None:
    if not parameters:
        return
    total = sum(p.weight for p in parameters)
    if abs(total - 100) > tolerance:
        raise InvalidInterviewError(f"Total weight must equal 100. Current total: {total}")


def generate_access_code(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


async def _unused_access_code(store: RecordStore, length: int) -> str:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_access_code(length)
        if await store.get_interview_by_code(code) is None:
            return code
    raise InvalidInterviewError("Could not allocate a unique access code")


async def create_interview(
    store: RecordStore,
    settings: Settings,
    recruiter: Profile,
    payload: InterviewCreate,
) -> Interview:
    if not payload.job_role.strip() or not payload.company_name.strip():
        raise InvalidInterviewError("Please fill in the job details.")

    if not payload.questions:
        raise InvalidInterviewError("Please add at least one interview question.")

    validate_weights(payload.parameters, settings.WEIGHT_TOLERANCE)

    interview = Interview(
        id=str(uuid4()),
        recruiter_id=recruiter.id,
        company_name=payload.company_name.strip(),
        job_role=payload.job_role.strip(),
        title=(payload.title or "").strip() or payload.job_role.strip(),
        code=await _unused_access_code(store, settings.ACCESS_CODE_LENGTH),
        questions=[
            Question(id=str(uuid4()), text=q.text, variants=q.variants)
            for q in payload.questions
        ],
        parameters=[
            EvaluationParameter(
                id=str(uuid4()),
                name=p.name,
                description=p.description,
                weight=p.weight,
            )
            for p in payload.parameters
        ],
        status=InterviewStatus.ACTIVE,
        created_at=datetime.utcnow(),
    )
    await store.save_interview(interview)
    logger.info("Interview %s created with access code %s", interview.id, interview.code)
    return interview


async def get_owned_interview(store: RecordStore, recruiter: Profile, interview_id: str) -> Interview:
    interview = await store.get_interview(interview_id)
    if interview is None or interview.recruiter_id != recruiter.id:
        raise NotFoundError("Interview not found")
    return interview


async def archive_interview(store: RecordStore, recruiter: Profile, interview_id: str) -> Interview:
    interview = await get_owned_interview(store, recruiter, interview_id)
    archived = interview.model_copy(update={"status": InterviewStatus.ARCHIVED})
    await store.save_interview(archived)
    return archived


async def get_results(store: RecordStore, recruiter: Profile, interview_id: str) -> InterviewResults:
    interview = await get_owned_interview(store, recruiter, interview_id)
    sessions = await store.get_sessions_by_interview(interview.id)
    return InterviewResults(
        interview_id=interview.id,
        entries=len(sessions),
        passed=sum(1 for s in sessions if s.decision == SessionDecision.PASSED),
        failed=sum(1 for s in sessions if s.decision == SessionDecision.FAILED),
        flagged=sum(1 for s in sessions if s.status == SessionStatus.TERMINATED_EARLY),
        sessions=sessions,
    )
