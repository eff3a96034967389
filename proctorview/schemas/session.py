from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from proctorview.utils.enums import SessionStatus, SessionDecision


class InterviewSession(BaseModel):
    id: str
    interview_id: str
    interview_title: str
    company_name: str
    candidate_id: str
    candidate_name: str
    candidate_email: str
    status: SessionStatus = SessionStatus.IN_PROGRESS
    decision: SessionDecision = SessionDecision.PENDING
    started_at: datetime
    completed_at: Optional[datetime] = None
    termination_reason: Optional[str] = None

    class Config:
        from_attributes = True


class InterviewResponse(BaseModel):
    id: str
    session_id: str
    question_id: str
    question_text: str
    response_text: str
    timestamp: datetime

    class Config:
        from_attributes = True


class RedeemRequest(BaseModel):
    code: str


class DecisionUpdate(BaseModel):
    decision: SessionDecision


class InterviewResults(BaseModel):
    interview_id: str
    entries: int
    passed: int
    failed: int
    flagged: int
    sessions: list[InterviewSession]
