from pydantic import BaseModel, Field


class SessionSummaryRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    include_narrative: bool = False


class SetSupplierNameRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    supplier_name: str = Field(..., min_length=1, max_length=300)


class ManualScoreRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    question_number: int = Field(..., gt=0)
    new_score: str = Field(..., description="Band name, e.g. 'Robust'")
    comment: str = Field("", max_length=5000)
    auditor: str = Field(..., min_length=1, max_length=320)


class MissingFeedbackRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    question_number: int = Field(..., gt=0)
    requirement_text: str = Field(..., min_length=1, max_length=5000)
    missing_reason: str = Field(..., min_length=1, max_length=5000)


class SaveAnswerRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    question_number: int = Field(..., gt=0)
    answer: str = Field(..., min_length=1, max_length=5000)
