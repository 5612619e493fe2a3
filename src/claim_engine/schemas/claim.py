"""Claim and claim line item schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .common import ClaimStatus


class ClaimLineItem(BaseModel):
    """One procedure code charge within a claim.

    The rate is the rate at time of billing and never changes once the line
    item exists.
    """

    model_config = ConfigDict(frozen=True)

    procedure_code: str
    description: str | None = None
    diagnosis_code: str | None = None
    diagnosis_description: str | None = None
    units: int = Field(default=1, ge=1)
    rate: float = Field(ge=0)
    date_of_service: date | None = None
    modifier: str | None = None

    @computed_field
    @property
    def amount(self) -> float:
        return round(self.rate * self.units, 2)


class Claim(BaseModel):
    """A bundle of billed services for one patient and insurer."""

    id: int
    patient_id: int
    insurer_id: int | None = None
    insurer_name: str | None = None
    practice_id: int | None = None
    claim_number: str | None = None
    line_items: list[ClaimLineItem] = []
    # Lifecycle
    status: ClaimStatus = ClaimStatus.DRAFT
    submitted_amount: float | None = None
    paid_amount: float | None = None
    submitted_at: datetime | None = None
    paid_at: datetime | None = None
    denied_at: datetime | None = None
    denial_reason: str | None = None
    # Review
    ai_review_score: float | None = Field(default=None, ge=0, le=100)
    ai_review_notes: str | None = None

    @computed_field
    @property
    def total_amount(self) -> float:
        return round(sum(item.amount for item in self.line_items), 2)
