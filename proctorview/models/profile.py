from sqlalchemy import Column, String, DateTime
from datetime import datetime
from proctorview.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    name = Column(String)
    role = Column(String)  # recruiter | interviewee | admin
    company_name = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
