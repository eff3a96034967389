from sqlalchemy import Column, String, DateTime, UniqueConstraint
from datetime import datetime
from proctorview.core.database import Base


class InterviewSession(Base):
    __tablename__ = "interview_sessions"
    __table_args__ = (
        UniqueConstraint("candidate_id", "interview_id", name="uq_session_candidate_interview"),
    )

    id = Column(String, primary_key=True, index=True)
    interview_id = Column(String, index=True)
    interview_title = Column(String)
    company_name = Column(String)

    candidate_id = Column(String, index=True)
    candidate_name = Column(String)
    candidate_email = Column(String)

    status = Column(String, default="in_progress")  # in_progress | completed | abandoned | terminated_early
    decision = Column(String, default="pending")  # pending | passed | failed
    termination_reason = Column(String, nullable=True)

    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)
