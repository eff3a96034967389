from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from proctorview.utils.enums import EventType, SeverityLevel


class ProctoringEvent(BaseModel):
    id: str
    session_id: str
    event_type: EventType
    severity: SeverityLevel
    message: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True
