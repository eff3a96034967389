from sqlalchemy import Column, String, Float, DateTime, JSON
from datetime import datetime
from proctorview.core.database import Base


class EvaluationResult(Base):
    __tablename__ = "evaluation_results"

    id = Column(String, primary_key=True, index=True)
    response_id = Column(String, unique=True, index=True)

    overall_score = Column(Float)
    parameter_scores = Column(JSON)
    analysis = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)
