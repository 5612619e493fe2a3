"""Shared types for claim lifecycle and reimbursement schemas."""

from datetime import date
from enum import Enum

from pydantic import BaseModel


class ClaimStatus(str, Enum):
    """Lifecycle status of a claim."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    PAID = "paid"
    DENIED = "denied"


class ClaimEvent(str, Enum):
    """Events that drive claim status transitions."""

    EDIT = "edit"
    SUBMIT = "submit"
    PAY = "pay"
    DENY = "deny"
    REGENERATE_APPEAL = "regenerate_appeal"


class AppealStatus(str, Enum):
    """Status of a generated appeal."""

    PENDING = "pending"
    SENT = "sent"
    COMPLETED = "completed"
    FAILED = "failed"


class PatientInfo(BaseModel):
    """Patient demographic and insurance membership information."""

    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    insurance_provider: str | None = None
    insurance_id: str | None = None

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else "[Patient Name]"


class PracticeInfo(BaseModel):
    """Billing practice information used on outgoing correspondence."""

    id: int | None = None
    name: str | None = None
    npi: str | None = None
    address: str | None = None
    phone: str | None = None
