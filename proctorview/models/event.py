from sqlalchemy import Column, String, DateTime
from proctorview.core.database import Base
from datetime import datetime


class ProctoringEvent(Base):
    __tablename__ = "proctoring_events"

    id = Column(String, primary_key=True, index=True)
    session_id = Column(String, index=True)

    event_type = Column(String, index=True)
    severity = Column(String)
    message = Column(String, nullable=True)

    timestamp = Column(DateTime, default=datetime.utcnow)
