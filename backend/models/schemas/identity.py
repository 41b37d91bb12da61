"""Registered company identity of a subject and identity-check results."""

from datetime import datetime

from pydantic import BaseModel, Field

from models.schemas.verdict import utcnow


class IdentityRecord(BaseModel):
    subject_id: str
    company_name: str
    set_at: datetime = Field(default_factory=utcnow)


class IdentityCheckResult(BaseModel):
    matched: bool
    registered_name: str
    strategy: str
