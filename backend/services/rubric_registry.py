"""Read-only registry of checklist questions and their scoring guides.

Loaded once at startup (built-in OHS checklist, or a JSON file) and handed to
the components that need it. Nothing mutates it afterwards.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from models.schemas.rubric import RubricQuestion
from models.score_band import ScoreBand

logger = logging.getLogger(__name__)

# Guide lines are listed best band first
_GUIDE_ORDER = (
    ScoreBand.STRETCH,
    ScoreBand.COMMITMENT,
    ScoreBand.ROBUST,
    ScoreBand.WARNING,
    ScoreBand.OFFTRACK,
)

DEFAULT_QUESTIONS: tuple[dict, ...] = (
    {
        "number": 1,
        "text": (
            "Does your Company have a written OHS Policy that has been approved by your "
            "top management and has been communicated throughout the organization and to "
            "your subcontractors (when applicable)?"
        ),
        "band_descriptions": {
            "stretch": "Policy includes beyond-compliance elements, communicated widely including external partners.",
            "commitment": "Policy is approved and communicated effectively to internal staff.",
            "robust": "Policy exists and is approved, but limited communication.",
            "warning": "Policy exists but is outdated or lacks clear communication.",
            "offtrack": "No written policy or evidence of communication.",
        },
    },
    {
        "number": 2,
        "text": (
            "Has your Company committed any infringements to the laws or regulations "
            "concerning Occupational Health & Safety (OHS) matters in the last three (03) "
            "years or is under any current investigation by, or in discussions with, any "
            "regulatory authority in respect of any OHS matters, accident or alleged breach "
            "of OHS laws or regulations?"
        ),
        "band_descriptions": {
            "stretch": "No infringements, with proactive legal tracking and transparent processes.",
            "commitment": "No infringements and system for monitoring legal compliance exists.",
            "robust": "No major infringements, basic legal compliance process.",
            "warning": "Past issues with weak documentation.",
            "offtrack": "Current investigations or multiple recent breaches.",
        },
    },
    {
        "number": 3,
        "text": (
            "Does the company have a process for Incident Reporting and Investigation, "
            "including a system for recording safety incidents (near misses, injuries, "
            "fatalities etc.) that meets local regulations and Ericsson's OHS Requirements "
            "at a minimum?"
        ),
        "band_descriptions": {
            "stretch": "Digital system integrated with real-time reporting and thorough root cause analysis.",
            "commitment": "Formal documented system used consistently.",
            "robust": "Procedure exists but lacks consistency in use or documentation.",
            "warning": "Manual or informal process, missing elements.",
            "offtrack": "No structured process for reporting and investigation.",
        },
    },
)


class RubricRegistry:
    """Question number -> RubricQuestion lookup."""

    def __init__(self, questions: Iterable[RubricQuestion]) -> None:
        table: dict[int, RubricQuestion] = {}
        for question in questions:
            if question.number in table:
                raise ValueError(f"Duplicate rubric question number: {question.number}")
            table[question.number] = question
        self._questions: Mapping[int, RubricQuestion] = MappingProxyType(
            dict(sorted(table.items()))
        )

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, number: object) -> bool:
        return number in self._questions

    @property
    def numbers(self) -> list[int]:
        return list(self._questions)

    def get(self, number: int) -> RubricQuestion | None:
        return self._questions.get(number)

    def question_text(self, number: int) -> str:
        """Question text, or "" for an unknown number."""
        question = self._questions.get(number)
        return question.text if question else ""

    def scoring_guide(self, number: int) -> str:
        """Band guide rendered for a prompt, or "" for an unknown number."""
        question = self._questions.get(number)
        if question is None:
            return ""
        return "\n".join(
            f"- {band.value.upper()}: {question.band_descriptions[band]}"
            for band in _GUIDE_ORDER
            if band in question.band_descriptions
        )


def _parse_questions(raw: Iterable[dict]) -> list[RubricQuestion]:
    return [RubricQuestion.model_validate(item) for item in raw]


def load_registry(path: str | Path | None = None) -> RubricRegistry:
    """Build the registry from a JSON list of questions, or the built-in checklist."""
    if not path:
        return RubricRegistry(_parse_questions(DEFAULT_QUESTIONS))

    path = Path(path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    registry = RubricRegistry(_parse_questions(raw))
    logger.info("Loaded %d rubric questions from %s", len(registry), path)
    return registry
