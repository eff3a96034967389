from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from proctorview.utils.enums import InterviewStatus


class Question(BaseModel):
    id: str
    text: str
    # Alternate wordings. Only `text` is ever sent to the interviewer agent.
    variants: list[str] = Field(default_factory=list)


class EvaluationParameter(BaseModel):
    id: str
    name: str
    description: str = ""
    weight: int = Field(ge=0, le=100)


class QuestionIn(BaseModel):
    text: str = Field(min_length=1)
    variants: list[str] = Field(default_factory=list)


class ParameterIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    weight: int = Field(ge=0, le=100)


class InterviewCreate(BaseModel):
    job_role: str
    company_name: str
    title: Optional[str] = None
    questions: list[QuestionIn] = Field(default_factory=list)
    parameters: list[ParameterIn] = Field(default_factory=list)


class Interview(BaseModel):
    id: str
    recruiter_id: str
    company_name: str
    job_role: str
    title: Optional[str] = None
    code: str
    questions: list[Question]
    parameters: list[EvaluationParameter]
    status: InterviewStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def display_title(self) -> str:
        return self.title or self.job_role


class ParameterSuggestionRequest(BaseModel):
    job_role: str


class RephraseRequest(BaseModel):
    text: str
