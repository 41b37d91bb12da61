"""Pydantic contracts shared by the review pipeline and the store."""

from models.schemas.audit import DisagreementEntry, ManualOverrideEntry
from models.schemas.identity import IdentityCheckResult, IdentityRecord
from models.schemas.rubric import RubricQuestion
from models.schemas.session_score import QuestionBreakdown, SessionScore
from models.schemas.verdict import ParsedScore, Verdict

__all__ = [
    "DisagreementEntry",
    "IdentityCheckResult",
    "IdentityRecord",
    "ManualOverrideEntry",
    "ParsedScore",
    "QuestionBreakdown",
    "RubricQuestion",
    "SessionScore",
    "Verdict",
]
