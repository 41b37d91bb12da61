from pydantic import BaseModel

from models.score_band import ScoreBand


class CheckFileResponse(BaseModel):
    success: bool
    state: str
    score: int | None = None
    band: ScoreBand | None = None
    feedback: str = ""
    require_company_name_confirmation: bool = False
    detected_company_name: str | None = None


class ReviewFeedbackResponse(BaseModel):
    success: bool = True
    score: int | None = None
    band: ScoreBand | None = None
    feedback: str = ""


class SupplierNameResponse(BaseModel):
    success: bool = True
    supplier_name: str = ""


class AckResponse(BaseModel):
    success: bool = True
