"""Procedure code unit allocation schemas."""

from pydantic import BaseModel, computed_field


class AllocatedCode(BaseModel):
    """Units billed under one procedure code, with its audit rationale."""

    code: str
    name: str
    units: int
    rationale: str
    reimbursement: float
    activities_assigned: list[str] = []


class TimeBlock(BaseModel):
    """A single 15-minute block with its assigned procedure code."""

    block_number: int
    start_minute: int
    end_minute: int
    code: str
    code_name: str
    rate: float | None = None
    activities: list[str] = []


class SoapNote(BaseModel):
    """Session documentation produced alongside a delegated allocation."""

    subjective: str = ""
    objective: str = ""
    assessment: str = ""
    plan: str = ""


class BillingAllocation(BaseModel):
    """Complete allocation of a session's billable units."""

    codes: list[AllocatedCode] = []
    total_units: int = 0
    unit_rate: float | None = None
    strategy: str = "rule_based"
    billing_rationale: str = ""
    audit_notes: list[str] = []
    soap_note: SoapNote | None = None

    @computed_field
    @property
    def total_reimbursement(self) -> float:
        return round(sum(c.reimbursement for c in self.codes), 2)
