from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # The scoring model answers in camelCase; we store and serve snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Strength(_CamelModel):
    title: str
    description: str = ""
    evidence: str = ""


class Weakness(_CamelModel):
    title: str
    description: str = ""
    suggestions: str = ""


class Analysis(_CamelModel):
    summary: str = ""
    strengths: list[Strength] = Field(default_factory=list)
    weaknesses: list[Weakness] = Field(default_factory=list)
    recommendation: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ScoringResult(_CamelModel):
    """What the scoring collaborator hands back for one transcript."""

    overall_score: float = Field(ge=0, le=100)
    parameter_scores: dict[str, float]
    analysis: Analysis


class EvaluationResult(BaseModel):
    id: str
    response_id: str
    overall_score: float
    parameter_scores: dict[str, float]
    analysis: Analysis

    class Config:
        from_attributes = True


class TranscriptPair(BaseModel):
    question: str
    answer: str


class ProctoringSummary(BaseModel):
    warnings: dict[str, int] = Field(default_factory=dict)
    violations: dict[str, int] = Field(default_factory=dict)
    interpretation: dict[str, str] = Field(default_factory=dict)


class SessionReview(BaseModel):
    session_id: str
    flagged: bool
    termination_reason: Optional[str] = None
    evaluation: Optional[EvaluationResult] = None
    proctoring: ProctoringSummary = Field(default_factory=ProctoringSummary)
    ai_note: str = ""
    final_decision_note: str = ""
