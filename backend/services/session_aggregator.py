"""Session roll-up: one overall compliance percentage per subject.

The number is recomputed from stored verdict text on every call. An LLM may be
asked for a prose summary, but any score it proposes is discarded so that the
percentage stays reproducible from the store alone.
"""

import logging
from typing import Awaitable, Callable, Iterable

from models.schemas.session_score import QuestionBreakdown, SessionScore
from models.schemas.verdict import Verdict
from models.score_band import MAX_WEIGHT
from services import prompt_builder
from services.llm_client import parse_json_reply
from services.rubric_registry import RubricRegistry
from services.score_parser import extract_all_scores
from services.store import BaseStore

logger = logging.getLogger(__name__)

LLMCall = Callable[[str, str | None], Awaitable[str]]


def overall_percent(total_weight: int, max_possible: int) -> int:
    """round(100 * total / max), half-up, 0 when nothing was scored."""
    if max_possible <= 0:
        return 0
    return (200 * total_weight + max_possible) // (2 * max_possible)


def aggregate_verdicts(
    subject_id: str,
    verdicts: Iterable[Verdict],
    registry: RubricRegistry | None = None,
) -> SessionScore:
    """Pure aggregation over a subject's verdicts, in ascending question order."""
    ordered = sorted(
        (v for v in verdicts if v.subject_id == subject_id),
        key=lambda v: v.question_number,
    )

    weights: list[int] = []
    breakdown: list[QuestionBreakdown] = []
    for verdict in ordered:
        scores = extract_all_scores(verdict.raw_feedback)
        weights.extend(scores)
        breakdown.append(QuestionBreakdown(
            question_number=verdict.question_number,
            question_text=registry.question_text(verdict.question_number) if registry else "",
            answer=verdict.answer,
            scores=scores,
            raw_feedback=verdict.raw_feedback,
        ))

    total = sum(weights)
    max_possible = len(weights) * MAX_WEIGHT
    return SessionScore(
        subject_id=subject_id,
        total_weight=total,
        max_possible=max_possible,
        overall_percent=overall_percent(total, max_possible),
        breakdown=breakdown,
    )


class SessionAggregator:
    def __init__(
        self,
        store: BaseStore,
        registry: RubricRegistry,
        llm: LLMCall | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.llm = llm

    async def summarize(self, subject_id: str, with_narrative: bool = False) -> SessionScore:
        verdicts = await self.store.list_verdicts(subject_id)
        session = aggregate_verdicts(subject_id, verdicts, self.registry)
        logger.info(
            "Session %s: %d/%d (%d%%) over %d questions",
            subject_id, session.total_weight, session.max_possible,
            session.overall_percent, len(session.breakdown),
        )

        if with_narrative and self.llm is not None and session.breakdown:
            session.narrative = await self._narrative(session)
        return session

    async def _narrative(self, session: SessionScore) -> str:
        prompt = prompt_builder.build_session_summary_prompt([
            {
                "question_number": item.question_number,
                "question_text": item.question_text,
                "answer": item.answer,
                "feedback": item.raw_feedback,
            }
            for item in session.breakdown
        ])
        reply = await self.llm(prompt, "You are a supplier compliance auditor.")

        data = parse_json_reply(reply)
        if data is None:
            return reply
        if "score" in data:
            logger.debug("Ignoring LLM-proposed session score %r", data.get("score"))
        return str(data.get("feedback") or reply)
