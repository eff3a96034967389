import json
import logging
from typing import Protocol, Sequence

from google import genai
from google.genai import types
from pydantic import ValidationError

from proctorview.core.config import Settings
from proctorview.core.errors import ScoringError
from proctorview.schemas.evaluation import ScoringResult, TranscriptPair
from proctorview.schemas.interview import EvaluationParameter, ParameterIn

logger = logging.getLogger(__name__)

EVALUATION_PROMPT = """
You are an expert HR analyst. Evaluate this candidate's interview performance for the role of "{job_role}".

EVALUATION PARAMETERS:
{parameters}

INTERVIEW TRANSCRIPT:
{transcript}

INSTRUCTIONS:
1. Score each parameter (0-100), using the exact parameter names above as keys.
2. Provide a total weighted score (0-100).
3. Identify 2-3 key strengths with evidence.
4. Identify 1-2 development areas constructively.
5. Provide a summary recommendation and confidence level (0-1).
"""


class Scorer(Protocol):
    async def evaluate_candidate(
        self,
        job_role: str,
        parameters: Sequence[EvaluationParameter],
        transcript: Sequence[TranscriptPair],
    ) -> ScoringResult:
        ...


def _string(**kwargs) -> types.Schema:
    return types.Schema(type=types.Type.STRING, **kwargs)


def _evaluation_schema(parameters: Sequence[EvaluationParameter]) -> types.Schema:
    names = [p.name for p in parameters]
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "overallScore": types.Schema(type=types.Type.NUMBER),
            "parameterScores": types.Schema(
                type=types.Type.OBJECT,
                properties={name: types.Schema(type=types.Type.NUMBER) for name in names},
                required=names,
            ),
            "analysis": types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "summary": _string(),
                    "strengths": types.Schema(
                        type=types.Type.ARRAY,
                        items=types.Schema(
                            type=types.Type.OBJECT,
                            properties={
                                "title": _string(),
                                "description": _string(),
                                "evidence": _string(),
                            },
                        ),
                    ),
                    "weaknesses": types.Schema(
                        type=types.Type.ARRAY,
                        items=types.Schema(
                            type=types.Type.OBJECT,
                            properties={
                                "title": _string(),
                                "description": _string(),
                                "suggestions": _string(),
                            },
                        ),
                    ),
                    "recommendation": _string(),
                    "confidence": types.Schema(type=types.Type.NUMBER),
                },
            ),
        },
        required=["overallScore", "parameterScores", "analysis"],
    )


def parse_scoring_result(raw: str, parameters: Sequence[EvaluationParameter]) -> ScoringResult:
    """Validate the model's JSON and keep exactly one score per supplied parameter."""
    try:
        result = ScoringResult.model_validate(json.loads(raw or "{}"))
    except (ValueError, ValidationError) as exc:
        raise ScoringError(f"Malformed scoring response: {exc}") from exc

    names = [p.name for p in parameters]
    missing = [name for name in names if name not in result.parameter_scores]
    if missing:
        raise ScoringError(f"Scoring response is missing parameters: {', '.join(missing)}")

    scores = {name: float(result.parameter_scores[name]) for name in names}
    return result.model_copy(update={"parameter_scores": scores})


class GeminiInterviewAI:
    """Gemini-backed scoring and authoring helpers."""

    def __init__(self, client: genai.Client, settings: Settings):
        self._client = client
        self._model = settings.SCORING_MODEL

    async def _generate_json(self, prompt: str, schema: types.Schema) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        return response.text or ""

    async def evaluate_candidate(
        self,
        job_role: str,
        parameters: Sequence[EvaluationParameter],
        transcript: Sequence[TranscriptPair],
    ) -> ScoringResult:
        prompt = EVALUATION_PROMPT.format(
            job_role=job_role,
            parameters="\n".join(
                f"{p.name} (Weight: {p.weight}%): {p.description}" for p in parameters
            ),
            transcript="\n\n".join(f"Q: {pair.question}\nA: {pair.answer}" for pair in transcript),
        )
        try:
            raw = await self._generate_json(prompt, _evaluation_schema(parameters))
        except Exception as exc:
            raise ScoringError(f"Scoring request failed: {exc}") from exc
        return parse_scoring_result(raw, parameters)

    async def suggest_parameters(self, job_role: str) -> list[ParameterIn]:
        prompt = (
            f'Generate 4 professional evaluation parameters for the job role: "{job_role}". '
            "Include a name, a short description, and suggested weights (total must sum to 100)."
        )
        schema = types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "name": _string(),
                    "description": _string(),
                    "weight": types.Schema(type=types.Type.NUMBER),
                },
                required=["name", "description", "weight"],
            ),
        )
        try:
            items = json.loads(await self._generate_json(prompt, schema) or "[]")
            return [
                ParameterIn(name=item["name"], description=item["description"], weight=int(round(item["weight"])))
                for item in items
            ]
        except Exception as exc:
            logger.error("Parameter suggestion failed for %r: %s", job_role, exc)
            return []

    async def rephrase_question(self, text: str) -> list[str]:
        prompt = (
            "Rephrase this interview question in 3 different ways while maintaining "
            f'the same professional intent: "{text}"'
        )
        schema = types.Schema(type=types.Type.ARRAY, items=_string())
        try:
            variants = json.loads(await self._generate_json(prompt, schema) or "[]")
            return [str(v) for v in variants if str(v).strip()] or [text]
        except Exception as exc:
            logger.error("Rephrasing failed: %s", exc)
            return [text]
