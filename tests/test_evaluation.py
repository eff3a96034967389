import asyncio

import pytest

from proctorview.core.errors import EvaluationUnavailableError, NotFoundError, ScoringError
from proctorview.services.evaluation_service import EvaluationPipeline
from proctorview.services.session_context import SessionContext
from proctorview.services.session_service import mark_completed, mark_terminated
from proctorview.utils.enums import EventType, SeverityLevel

from conftest import FakeScorer

TRANSCRIPT = "Interviewer: Tell me about a system you designed.\nCandidate: A billing queue."


@pytest.fixture
async def finished_session(store, session):
    context = await SessionContext.load(store, session.candidate_id)
    await context.save_transcript(TRANSCRIPT)
    return await context.update_session(mark_completed(context.session))


async def test_scores_once_and_serves_the_stored_result(store, settings, finished_session):
    scorer = FakeScorer()
    pipeline = EvaluationPipeline(store, scorer, settings)

    first = await pipeline.evaluate(finished_session.id)
    second = await pipeline.evaluate(finished_session.id)

    assert scorer.calls == 1
    assert first.flagged is False
    assert first.evaluation.overall_score == 78.0
    assert first.model_dump_json() == second.model_dump_json()
    assert scorer.last_transcript[0].answer == TRANSCRIPT
    assert scorer.last_transcript[0].question == "Verbal Evaluation"


async def test_parameter_scores_use_interview_parameter_names(store, settings, interview, finished_session):
    review = await EvaluationPipeline(store, FakeScorer(), settings).evaluate(finished_session.id)
    assert set(review.evaluation.parameter_scores) == {p.name for p in interview.parameters}


async def test_concurrent_reviews_score_once(store, settings, finished_session):
    scorer = FakeScorer()
    pipeline = EvaluationPipeline(store, scorer, settings)
    await asyncio.gather(*(pipeline.evaluate(finished_session.id) for _ in range(3)))
    assert scorer.calls == 1


async def test_flagged_session_is_never_scored(store, settings, session):
    context = await SessionContext.load(store, session.candidate_id)
    await context.record_event(EventType.TAB_SWITCH, SeverityLevel.VIOLATION, "switched tabs")
    await context.update_session(mark_terminated(context.session, "switched tabs"))

    scorer = FakeScorer()
    review = await EvaluationPipeline(store, scorer, settings).evaluate(session.id)

    assert scorer.calls == 0
    assert review.flagged is True
    assert review.termination_reason == "switched tabs"
    assert review.evaluation is None
    assert review.proctoring.violations == {"TAB_SWITCH": 1}


async def test_failure_is_not_cached(store, settings, finished_session):
    scorer = FakeScorer(fail=True)
    pipeline = EvaluationPipeline(store, scorer, settings)

    with pytest.raises(ScoringError):
        await pipeline.evaluate(finished_session.id)
    assert await store.get_evaluation_by_session(finished_session.id) is None

    scorer.fail = False
    review = await pipeline.evaluate(finished_session.id)
    assert review.evaluation is not None
    assert scorer.calls == 2


async def test_scoring_timeout_is_a_scoring_error(store, settings, finished_session):
    class SlowScorer(FakeScorer):
        async def evaluate_candidate(self, job_role, parameters, transcript):
            await asyncio.sleep(10)

    quick = settings.model_copy(update={"SCORING_TIMEOUT_SECONDS": 0.05})
    with pytest.raises(ScoringError):
        await EvaluationPipeline(store, SlowScorer(), quick).evaluate(finished_session.id)


async def test_session_without_transcript(store, settings, session):
    with pytest.raises(EvaluationUnavailableError):
        await EvaluationPipeline(store, FakeScorer(), settings).evaluate(session.id)


async def test_unknown_session(store, settings):
    with pytest.raises(NotFoundError):
        await EvaluationPipeline(store, FakeScorer(), settings).evaluate("missing")


async def test_review_locks_are_released(store, settings, finished_session):
    scorer = FakeScorer(fail=True)
    pipeline = EvaluationPipeline(store, scorer, settings)

    with pytest.raises(ScoringError):
        await pipeline.evaluate(finished_session.id)
    assert pipeline.reviews_in_flight == 0

    scorer.fail = False
    await asyncio.gather(*(pipeline.evaluate(finished_session.id) for _ in range(3)))
    assert pipeline.reviews_in_flight == 0
