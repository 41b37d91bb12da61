"""Audit checklist question with its per-band scoring guide."""

from pydantic import BaseModel, ConfigDict, Field

from models.score_band import ScoreBand


class RubricQuestion(BaseModel):
    """One checklist item. Frozen: the registry is never mutated after load."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., gt=0)
    text: str
    band_descriptions: dict[ScoreBand, str] = {}
