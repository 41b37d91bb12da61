"""Session-level roll-up of every verdict held for one subject."""

from pydantic import BaseModel


class QuestionBreakdown(BaseModel):
    question_number: int
    question_text: str = ""
    answer: str | None = None
    scores: list[int] = []
    raw_feedback: str = ""


class SessionScore(BaseModel):
    """Recomputed from stored verdicts on every request.

    ``overall_percent`` is derived only from parsed verdict scores. ``narrative``
    holds optional LLM prose and never feeds the numbers.
    """
    subject_id: str
    total_weight: int = 0
    max_possible: int = 0
    overall_percent: int = 0
    breakdown: list[QuestionBreakdown] = []
    narrative: str | None = None
