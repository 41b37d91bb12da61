"""The five compliance bands and their fixed weights."""

from enum import Enum


class ScoreBand(str, Enum):
    """Compliance band, ordered from worst (Offtrack) to best (Stretch)."""

    OFFTRACK = "offtrack"
    WARNING = "warning"
    ROBUST = "robust"
    COMMITMENT = "commitment"
    STRETCH = "stretch"

    @property
    def weight(self) -> int:
        return _WEIGHTS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_WEIGHTS: dict[ScoreBand, int] = {
    ScoreBand.OFFTRACK: 1,
    ScoreBand.WARNING: 2,
    ScoreBand.ROBUST: 3,
    ScoreBand.COMMITMENT: 4,
    ScoreBand.STRETCH: 5,
}
_BY_WEIGHT: dict[int, ScoreBand] = {w: b for b, w in _WEIGHTS.items()}

MAX_WEIGHT = 5


def weight_of(band: ScoreBand) -> int:
    return _WEIGHTS[band]


def parse_band_name(token: str | None) -> ScoreBand | None:
    """Match a band name case-insensitively. Anything else is unmatched (None)."""
    if not token:
        return None
    try:
        return ScoreBand(token.strip().lower())
    except ValueError:
        return None


def band_for_weight(weight: int) -> ScoreBand | None:
    return _BY_WEIGHT.get(weight)


def format_band(band: ScoreBand) -> str:
    """Render a band the way the LLM is asked to: ``Robust (3/5)``."""
    return f"{band.label} ({band.weight}/{MAX_WEIGHT})"
