"""Stored outcome of evaluating one document against one question."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from models.score_band import ScoreBand

STATUS_AI_REVIEWED = "ai-reviewed"
STATUS_AUDITOR_FINAL = "auditor-final"
STATUS_ANSWERED = "answered"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParsedScore(BaseModel):
    band: ScoreBand
    weight: int = Field(..., ge=1, le=5)


class Verdict(BaseModel):
    """Keyed by (subject_id, question_number); later writes replace earlier ones.

    ``band`` is None when the LLM reply carried no recognizable score; the raw
    reply is kept so an auditor can review it. ``auditor_comment`` holds the note
    from a manual override and is never scanned for scores.
    """
    subject_id: str
    question_number: int
    band: ScoreBand | None = None
    raw_feedback: str = ""
    answer: str | None = None
    status: str = STATUS_AI_REVIEWED
    auditor_comment: str | None = None
    updated_at: datetime = Field(default_factory=utcnow)
