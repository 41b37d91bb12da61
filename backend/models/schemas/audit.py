"""Append-only log entries: auditor overrides and supplier disputes."""

from datetime import datetime

from pydantic import BaseModel, Field

from models.score_band import ScoreBand
from models.schemas.verdict import utcnow

KIND_DISAGREEMENT = "disagreement"
KIND_MISSING_JUSTIFICATION = "missing-justification"


class ManualOverrideEntry(BaseModel):
    subject_id: str
    question_number: int
    action: str = "Manual Score Override"
    old_band: ScoreBand | None = None
    old_feedback: str | None = None
    new_band: ScoreBand
    comment: str = ""
    auditor_id: str
    created_at: datetime = Field(default_factory=utcnow)


class DisagreementEntry(BaseModel):
    subject_id: str
    question_number: int
    kind: str = KIND_DISAGREEMENT
    requirement_text: str
    reason: str
    band: ScoreBand | None = None
    ai_feedback: str = ""
    created_at: datetime = Field(default_factory=utcnow)
