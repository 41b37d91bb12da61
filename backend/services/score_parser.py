"""Pull compliance scores out of free-text LLM replies.

Two independent passes:

- ``extract_single_score``: the canonical ``Score: Robust (3/5)`` line used for
  per-document verdicts. Returns one ``ParsedScore`` or None.
- ``extract_all_scores``: a permissive scan for every ``Score:`` value, used by
  session aggregation where one reply may list several sub-requirements.

Neither raises. A reply without a recognizable score is a normal outcome.
"""

import logging
import re

from models.schemas.verdict import ParsedScore
from models.score_band import band_for_weight, parse_band_name

logger = logging.getLogger(__name__)

# "Score:" as a whole word, with optional markdown emphasis, e.g. "**Score:**" or "**Score**:"
_SCORE_PREFIX = r"\bscore\**\s*:\s*\**\s*"

# Score: Robust (3/5)
_BANDED_RE = re.compile(
    _SCORE_PREFIX + r"(?P<label>[a-z]+)\**\s*\(\s*(?P<digit>\d)\s*/\s*5\s*\)",
    re.IGNORECASE,
)
# Score: 3/5  or  Score: (3/5)
_DIGIT_ONLY_RE = re.compile(
    _SCORE_PREFIX + r"\(?\s*(?P<digit>\d)\s*/\s*5\b", re.IGNORECASE
)
# Score: [Band] N[/5], N being 1-3 digits
_LOOSE_RE = re.compile(
    _SCORE_PREFIX + r"(?:[a-z]+\**\s*)?\(?\s*(?P<value>\d{1,3})(?:\s*/\s*5)?",
    re.IGNORECASE,
)


def extract_single_score(text: str | None) -> ParsedScore | None:
    """Return the first well-formed score in ``text``.

    The band name is authoritative. A digit is only used on its own when no
    band name accompanies it, and a band name without its digit is not a
    score. Unknown labels ("Strict", "Excellent") are
    skipped rather than mapped to a band.
    """
    if not text:
        return None

    for match in _BANDED_RE.finditer(text):
        band = parse_band_name(match.group("label"))
        if band is None:
            continue
        digit = int(match.group("digit"))
        if digit != band.weight:
            logger.info(
                "Score digit %d disagrees with band %s; keeping band", digit, band.label
            )
        return ParsedScore(band=band, weight=band.weight)

    for match in _DIGIT_ONLY_RE.finditer(text):
        band = band_for_weight(int(match.group("digit")))
        if band is not None:
            return ParsedScore(band=band, weight=band.weight)

    return None


def extract_all_scores(text: str | None) -> list[int]:
    """Every numeric value following a ``Score:`` marker, in document order."""
    if not text:
        return []
    return [int(m.group("value")) for m in _LOOSE_RE.finditer(text)]
