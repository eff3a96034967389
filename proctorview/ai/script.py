from dataclasses import dataclass

from proctorview.schemas.interview import Interview

END_CALL_FUNCTION = "end_call"

PERSONA_TEMPLATE = """You are a professional AI interviewer for the {job_role} position at {company_name}. \
You are interviewing {candidate_name}.

Follow this protocol exactly:
1. Greet {candidate_name} by name and introduce yourself.
2. Ask each of the following {question_count} questions once, in this order:
{question_list}
3. If an answer is vague, you may ask one brief follow-up question before moving on. Never more than one.
4. After the last question, say: "{end_message}"
5. Then call the `{end_call_function}` function. You must always call it when the interview is complete.

Be polite, concise, and focused. Do not score or judge the candidate out loud."""

FIRST_MESSAGE_TEMPLATE = (
    "Hello {candidate_name}, thank you for joining. I'll be your interviewer today for the "
    "{job_role} role at {company_name}. Let's get started."
)

END_MESSAGE = "Thank you for your time. This concludes the interview. We'll be in touch soon."


@dataclass(frozen=True)
class InterviewScript:
    instructions: str
    first_message: str
    end_message: str
    questions: tuple
    end_call_function: str = END_CALL_FUNCTION


def build_script(interview: Interview, candidate_name: str) -> InterviewScript:
    # Only the canonical wording is used; phrasing variants stay unused.
    questions = tuple(q.text for q in interview.questions)
    slots = {
        "candidate_name": candidate_name,
        "job_role": interview.job_role,
        "company_name": interview.company_name,
        "question_count": len(questions),
        "question_list": "\n".join(f"   {i}. {text}" for i, text in enumerate(questions, 1)),
        "end_message": END_MESSAGE,
        "end_call_function": END_CALL_FUNCTION,
    }
    return InterviewScript(
        instructions=PERSONA_TEMPLATE.format(**slots),
        first_message=FIRST_MESSAGE_TEMPLATE.format(**slots),
        end_message=END_MESSAGE,
        questions=questions,
    )
