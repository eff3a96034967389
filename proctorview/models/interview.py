from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime
from proctorview.core.database import Base


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True, index=True)
    recruiter_id = Column(String, index=True)

    company_name = Column(String)
    job_role = Column(String)
    title = Column(String, nullable=True)
    code = Column(String, unique=True, index=True)

    # [{id, text, variants}] and [{id, name, description, weight}], in order
    questions = Column(JSON, default=list)
    parameters = Column(JSON, default=list)

    status = Column(String, default="active")  # draft | active | archived
    created_at = Column(DateTime, default=datetime.utcnow)
