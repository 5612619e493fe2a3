"""Turning allocations into time blocks and claim line items."""

from datetime import date

from ..config import MINUTES_PER_UNIT
from ..errors import MissingRequiredField
from ..schemas.allocation import BillingAllocation, TimeBlock
from ..schemas.claim import ClaimLineItem


def units_for_duration(minutes: int | None, minutes_per_unit: int = MINUTES_PER_UNIT) -> int:
    """Whole billable units in a session of ``minutes``."""
    if not minutes or minutes < 0 or minutes_per_unit <= 0:
        return 0
    return minutes // minutes_per_unit


def build_time_blocks(
    allocation: BillingAllocation, minutes_per_unit: int = MINUTES_PER_UNIT
) -> list[TimeBlock]:
    """One block per billed unit, for insurers that require per-block codes."""
    blocks: list[TimeBlock] = []
    block_number = 1

    for code in allocation.codes:
        for _ in range(code.units):
            blocks.append(
                TimeBlock(
                    block_number=block_number,
                    start_minute=(block_number - 1) * minutes_per_unit,
                    end_minute=block_number * minutes_per_unit,
                    code=code.code,
                    code_name=code.name,
                    rate=allocation.unit_rate,
                    activities=code.activities_assigned[:3],
                )
            )
            block_number += 1

    return blocks


def line_items_from_allocation(
    allocation: BillingAllocation,
    date_of_service: date | None = None,
    diagnosis_code: str | None = None,
    diagnosis_description: str | None = None,
    modifier: str | None = None,
) -> list[ClaimLineItem]:
    """Claim line items billing each allocated code at the allocation rate."""
    if allocation.unit_rate is None:
        raise MissingRequiredField("unit_rate", "line item")

    items: list[ClaimLineItem] = []
    for code in allocation.codes:
        if code.units < 1:
            raise MissingRequiredField("units", f"procedure code {code.code}")
        items.append(
            ClaimLineItem(
                procedure_code=code.code,
                description=code.name,
                diagnosis_code=diagnosis_code,
                diagnosis_description=diagnosis_description,
                units=code.units,
                rate=allocation.unit_rate,
                date_of_service=date_of_service,
                modifier=modifier,
            )
        )
    return items
