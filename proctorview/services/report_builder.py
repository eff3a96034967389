from collections import Counter
from typing import Optional, Sequence

from proctorview.schemas.evaluation import EvaluationResult, ProctoringSummary, SessionReview
from proctorview.schemas.event import ProctoringEvent
from proctorview.schemas.session import InterviewSession
from proctorview.utils.enums import EventType, SessionStatus, SeverityLevel

AI_NOTE = (
    "This report summarizes the candidate's interview answers and observed behavior. "
    "AI provides indicators only."
)
FINAL_DECISION_NOTE = "Final interview decisions should always be made by the recruiter."


def build_proctoring_summary(events: Sequence[ProctoringEvent]) -> ProctoringSummary:
    warnings = Counter(e.event_type.value for e in events if e.severity == SeverityLevel.WARNING)
    violations = Counter(e.event_type.value for e in events if e.severity == SeverityLevel.VIOLATION)

    interpretation = {}

    face_missing = warnings.get(EventType.FACE_MISSING.value, 0)
    if face_missing > 0:
        interpretation["face_presence"] = (
            f"Candidate left the camera frame {face_missing} times"
        )

    multiple_faces = warnings.get(EventType.MULTIPLE_FACES.value, 0)
    if multiple_faces > 0 or EventType.MULTIPLE_FACES.value in violations:
        interpretation["external_presence"] = (
            "More than one face was detected during the interview"
        )

    for event_type in violations:
        if event_type in (EventType.TAB_SWITCH.value, EventType.WINDOW_BLUR.value):
            interpretation["focus_behavior"] = "The interview window lost focus"
        elif event_type == EventType.FULLSCREEN_EXIT.value:
            interpretation["fullscreen_behavior"] = "The candidate left full-screen mode"

    return ProctoringSummary(
        warnings=dict(warnings),
        violations=dict(violations),
        interpretation=interpretation,
    )


def build_review(
    session: InterviewSession,
    events: Sequence[ProctoringEvent],
    evaluation: Optional[EvaluationResult] = None,
) -> SessionReview:
    flagged = session.status == SessionStatus.TERMINATED_EARLY
    return SessionReview(
        session_id=session.id,
        flagged=flagged,
        termination_reason=session.termination_reason if flagged else None,
        evaluation=evaluation,
        proctoring=build_proctoring_summary(events),
        ai_note=AI_NOTE,
        final_decision_note=FINAL_DECISION_NOTE,
    )
