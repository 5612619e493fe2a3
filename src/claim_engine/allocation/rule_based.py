"""Deterministic procedure code unit allocator.

Each activity is assigned to the highest tier whose keywords it mentions, and
the unit budget is split across the tiers in use by their weights. The split
always conserves the budget exactly: rounding remainders go to the
highest-priority tier in use.
"""

import logging
from collections.abc import Sequence

from ..config import DEFAULT_UNIT_RATE
from ..matching import first_match
from ..schemas.allocation import AllocatedCode, BillingAllocation
from .tiers import (
    CODE_CATALOG,
    DEFAULT_CODE,
    GENERIC_RATIONALE,
    PROCEDURE_TIERS,
    ProcedureTier,
)

logger = logging.getLogger(__name__)

MAX_RATIONALE_ACTIVITIES = 3


def distribute_units(total_units: int, weights: Sequence[int]) -> list[int]:
    """Split ``total_units`` across weighted slots in priority order.

    Every returned slot gets at least one unit and the result sums to
    ``total_units``. With fewer units than slots, trailing slots are dropped
    and their weight folds into the first slot, so the result can be shorter
    than ``weights``.

    Each slot takes the floor of its proportional share and the leftover units
    go to the first slot, so two slots weighted 30 and 10 split 8 units as
    [6, 2] rather than rounding the first share up to 7.
    """
    if total_units < 1 or not weights:
        return []

    slots = list(weights)
    if total_units < len(slots):
        slots[0] += sum(slots[total_units:])
        slots = slots[:total_units]

    weight_sum = sum(slots) or len(slots)
    shares = [max(1, total_units * w // weight_sum) for w in slots]

    remainder = total_units - sum(shares)
    if remainder > 0:
        shares[0] += remainder

    # The one-unit floor can overshoot; give back from the largest share
    while sum(shares) > total_units:
        index = max(range(len(shares)), key=lambda i: (shares[i], -i))
        shares[index] -= 1

    return shares


def assign_activities(
    activities: Sequence[str],
    tiers: Sequence[ProcedureTier] = PROCEDURE_TIERS,
) -> tuple[dict[str, list[str]], list[str]]:
    """Bucket activities by the highest tier they support.

    Returns the per-tier buckets (keyed by tier key, in tier order) and the
    activities that matched no tier.
    """
    buckets: dict[str, list[str]] = {tier.key: [] for tier in tiers}
    unmatched: list[str] = []

    for activity in activities:
        tier = first_match(activity, tiers, lambda t: t.keywords)
        if tier is None:
            unmatched.append(activity)
        else:
            buckets[tier.key].append(activity)

    return buckets, unmatched


class RuleBasedAllocator:
    """Keyword-tier allocator. Always available, never calls out."""

    strategy = "rule_based"

    def __init__(self, tiers: Sequence[ProcedureTier] = PROCEDURE_TIERS):
        self.tiers = tuple(tiers)

    def allocate(
        self,
        activities: Sequence[str] | None,
        total_units: int,
        unit_rate: float | None = None,
    ) -> BillingAllocation:
        """Assign ``total_units`` billable units to procedure codes."""
        rate = unit_rate if unit_rate is not None else DEFAULT_UNIT_RATE
        cleaned = [a.strip() for a in activities or [] if a and a.strip()]

        if total_units < 1:
            return BillingAllocation(
                codes=[],
                total_units=0,
                unit_rate=rate,
                strategy=self.strategy,
                billing_rationale="No billable units in session",
                audit_notes=["Session shorter than one billable unit"],
            )

        buckets, unmatched = assign_activities(cleaned, self.tiers)
        if not any(buckets.values()):
            return self._default_allocation(cleaned, total_units, rate)

        # Unsupported activities fall to the lowest tier
        buckets[self.tiers[-1].key].extend(unmatched)

        in_use = [tier for tier in self.tiers if buckets[tier.key]]
        shares = distribute_units(total_units, [tier.weight for tier in in_use])

        codes: list[AllocatedCode] = []
        for tier, units in zip(in_use, shares):
            assigned = buckets[tier.key]
            codes.append(
                AllocatedCode(
                    code=tier.code,
                    name=tier.name,
                    units=units,
                    rationale=f"{tier.rationale_label}: "
                    + ", ".join(assigned[:MAX_RATIONALE_ACTIVITIES]),
                    reimbursement=round(rate * units, 2),
                    activities_assigned=list(assigned),
                )
            )

        audit_notes = [
            "Documentation supports assigned CPT codes",
            "Activities match code descriptions",
        ]
        unbilled = [a for tier in in_use[len(shares):] for a in buckets[tier.key]]
        if unbilled:
            audit_notes.append(
                f"Unit budget too small to bill: {', '.join(unbilled)}"
            )

        return BillingAllocation(
            codes=codes,
            total_units=total_units,
            unit_rate=rate,
            strategy=self.strategy,
            billing_rationale="Billing optimized using rule-based assignment.",
            audit_notes=audit_notes,
        )

    def _default_allocation(
        self, activities: list[str], total_units: int, rate: float
    ) -> BillingAllocation:
        """Whole budget to the default code when nothing matched a tier."""
        logger.info("No activity matched a billing tier, using %s", DEFAULT_CODE)
        return BillingAllocation(
            codes=[
                AllocatedCode(
                    code=DEFAULT_CODE,
                    name=CODE_CATALOG[DEFAULT_CODE],
                    units=total_units,
                    rationale=GENERIC_RATIONALE,
                    reimbursement=round(rate * total_units, 2),
                    activities_assigned=list(activities),
                )
            ],
            total_units=total_units,
            unit_rate=rate,
            strategy=self.strategy,
            billing_rationale="No activity matched a billing tier; default code applied.",
            audit_notes=["Review documentation to support the default code"],
        )


def allocate_units(
    activities: Sequence[str] | None,
    total_units: int,
    unit_rate: float | None = None,
) -> BillingAllocation:
    """Allocate with the default tier table."""
    return RuleBasedAllocator().allocate(activities, total_units, unit_rate)
