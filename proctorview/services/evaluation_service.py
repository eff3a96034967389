import asyncio
import logging
import weakref
from uuid import uuid4

from proctorview.ai.gemini_client import Scorer
from proctorview.core.config import Settings
from proctorview.core.errors import EvaluationUnavailableError, NotFoundError, ScoringError
from proctorview.schemas.evaluation import EvaluationResult, SessionReview, TranscriptPair
from proctorview.services.report_builder import build_review
from proctorview.services.store import RecordStore
from proctorview.utils.enums import SessionStatus

logger = logging.getLogger(__name__)


class EvaluationPipeline:
    """Scores a finished session at most once and serves the stored result afterwards."""

    def __init__(self, store: RecordStore, scorer: Scorer, settings: Settings):
        self._store = store
        self._scorer = scorer
        self._timeout = settings.SCORING_TIMEOUT_SECONDS
        # A lock lives only while some review of that session holds it
        self._locks = weakref.WeakValueDictionary()

    @property
    def reviews_in_flight(self) -> int:
        return len(self._locks)

    async def evaluate(self, session_id: str) -> SessionReview:
        session = await self._store.get_session(session_id)
        if session is None:
            raise NotFoundError("Session not found")

        events = await self._store.get_events_by_session(session_id)

        # Flagged sessions are never scored.
        if session.status == SessionStatus.TERMINATED_EARLY:
            return build_review(session, events)

        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()

        async with lock:
            cached = await self._store.get_evaluation_by_session(session_id)
            if cached is not None:
                return build_review(session, events, cached)

            responses = await self._store.get_responses_by_session(session_id)
            if not responses:
                raise EvaluationUnavailableError("No transcript was recorded for this session")

            interview = await self._store.get_interview(session.interview_id)
            if interview is None:
                raise NotFoundError("Interview not found")

            transcript = [
                TranscriptPair(question=r.question_text, answer=r.response_text)
                for r in responses
            ]
            try:
                result = await asyncio.wait_for(
                    self._scorer.evaluate_candidate(interview.job_role, interview.parameters, transcript),
                    timeout=self._timeout,
                )
            except ScoringError:
                logger.exception("Scoring failed for session %s", session_id)
                raise
            except asyncio.TimeoutError as exc:
                logger.error("Scoring timed out for session %s", session_id)
                raise ScoringError("Scoring timed out") from exc
            except Exception as exc:
                logger.exception("Scoring failed for session %s", session_id)
                raise ScoringError(str(exc)) from exc

            await self._store.save_evaluation(EvaluationResult(
                id=str(uuid4()),
                response_id=responses[0].id,
                overall_score=result.overall_score,
                parameter_scores=result.parameter_scores,
                analysis=result.analysis,
            ))
            logger.info("Session %s scored %.1f", session_id, result.overall_score)
            stored = await self._store.get_evaluation_by_session(session_id)
            return build_review(session, events, stored)
