from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime
from proctorview.core.database import Base


class InterviewResponse(Base):
    __tablename__ = "interview_responses"

    id = Column(String, primary_key=True, index=True)
    session_id = Column(String, index=True)

    question_id = Column(String)
    question_text = Column(String)
    response_text = Column(Text)

    timestamp = Column(DateTime, default=datetime.utcnow)
