"""Language-model backed unit allocator.

Asks an LLM for the same structure the rule-based allocator produces, plus a
SOAP note, then repairs the answer against the allocation invariants: known
codes only, one entry per code, at least one unit each, and an exact unit
total. Anything unusable falls back to the rule-based allocator.
"""

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from llama_index.core.llms import LLM
from llama_index.core.prompts import PromptTemplate

from ..config import DEFAULT_UNIT_RATE
from ..schemas.allocation import AllocatedCode, BillingAllocation, SoapNote
from .rule_based import MAX_RATIONALE_ACTIVITIES, RuleBasedAllocator
from .tiers import CODE_CATALOG, PROCEDURE_TIERS, code_priority

logger = logging.getLogger(__name__)


ALLOCATION_PROMPT = PromptTemplate(
    """You are an expert pediatric occupational therapy billing specialist.
Assign the billable units of a therapy session to CPT codes so that
reimbursement is maximized while every code stays clinically accurate and
audit defensible.

CPT codes, highest priority first:
{code_table}

Rules:
- Assign each activity to the highest-priority code that can defend it in an audit
- Each code must list the activities that justify it
- Distribute exactly {total_units} units across the codes
- Never list the same code twice

ACTIVITIES PERFORMED:
{activities}

Respond with only a JSON object of this shape:
{response_shape}"""
)

RESPONSE_SHAPE = {
    "soapNote": {
        "subjective": "Subjective section",
        "objective": "Objective section documenting the activities",
        "assessment": "Assessment with medical necessity",
        "plan": "Plan section",
    },
    "cptCodes": [
        {
            "code": "97533",
            "units": 2,
            "rationale": "Why these activities support this code",
            "activitiesAssigned": ["Activity 1", "Activity 2"],
        }
    ],
    "billingRationale": "Overall billing strategy",
    "auditNotes": ["Documentation note"],
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


class DelegatedAllocator:
    """Allocator that delegates the decision to an LLM, failing open."""

    strategy = "delegated"

    def __init__(
        self,
        llm: LLM | None,
        fallback: RuleBasedAllocator | None = None,
        prompt: PromptTemplate = ALLOCATION_PROMPT,
    ):
        self.llm = llm
        self.fallback = fallback or RuleBasedAllocator()
        self.prompt = prompt

    def allocate(
        self,
        activities: Sequence[str] | None,
        total_units: int,
        unit_rate: float | None = None,
    ) -> BillingAllocation:
        """Allocate via the LLM, or the rule-based allocator if that fails."""
        rate = unit_rate if unit_rate is not None else DEFAULT_UNIT_RATE
        cleaned = [a.strip() for a in activities or [] if a and a.strip()]

        if self.llm is None or total_units < 1 or not cleaned:
            return self.fallback.allocate(cleaned, total_units, rate)

        prompt = self.prompt.format(
            code_table="\n".join(
                f"- {tier.code} {tier.name}: {', '.join(tier.keywords)}"
                for tier in PROCEDURE_TIERS
            ),
            total_units=total_units,
            activities="\n".join(f"- {a}" for a in cleaned),
            response_shape=json.dumps(RESPONSE_SHAPE, indent=2),
        )

        try:
            response = self.llm.complete(prompt)
            payload = parse_llm_json(response.text)
        except Exception:
            logger.warning("Delegated allocation failed, using rule-based", exc_info=True)
            return self.fallback.allocate(cleaned, total_units, rate)

        allocation = repair_allocation(payload, total_units, rate)
        if allocation is None:
            logger.warning("Delegated allocation returned no usable codes, using rule-based")
            return self.fallback.allocate(cleaned, total_units, rate)
        return allocation


def parse_llm_json(text: str) -> dict[str, Any]:
    """Parse a JSON object from model output, tolerating code fences."""
    payload = json.loads(_CODE_FENCE.sub("", text.strip()))
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")
    return payload


def repair_allocation(
    payload: dict[str, Any], total_units: int, unit_rate: float
) -> BillingAllocation | None:
    """Coerce a model's allocation into one that honors the invariants.

    Returns None when no known code survives.
    """
    entries: dict[str, dict[str, Any]] = {}

    for item in payload.get("cptCodes") or []:
        if not isinstance(item, dict):
            continue
        code = str(item.get("code") or "").strip()
        if code not in CODE_CATALOG:
            continue

        units = _as_units(item.get("units"))
        activities = [str(a) for a in item.get("activitiesAssigned") or [] if a]
        entry = entries.get(code)
        if entry is None:
            entries[code] = {
                "code": code,
                "units": units,
                "rationale": str(item.get("rationale") or "").strip(),
                "activities": activities,
            }
        else:
            entry["units"] += units
            entry["activities"].extend(a for a in activities if a not in entry["activities"])

    if not entries or total_units < 1:
        return None

    ordered = sorted(entries.values(), key=lambda e: code_priority(e["code"]))
    _conserve_units(ordered, total_units)

    codes = [
        AllocatedCode(
            code=entry["code"],
            name=CODE_CATALOG[entry["code"]],
            units=entry["units"],
            rationale=entry["rationale"]
            or f"{CODE_CATALOG[entry['code']]}: "
            + ", ".join(entry["activities"][:MAX_RATIONALE_ACTIVITIES]),
            reimbursement=round(unit_rate * entry["units"], 2),
            activities_assigned=entry["activities"],
        )
        for entry in ordered
    ]

    soap = payload.get("soapNote")
    return BillingAllocation(
        codes=codes,
        total_units=total_units,
        unit_rate=unit_rate,
        strategy=DelegatedAllocator.strategy,
        billing_rationale=str(payload.get("billingRationale") or ""),
        audit_notes=[str(n) for n in payload.get("auditNotes") or []],
        soap_note=SoapNote(**{k: str(v) for k, v in soap.items() if k in SoapNote.model_fields})
        if isinstance(soap, dict)
        else None,
    )


def _conserve_units(entries: list[dict[str, Any]], total_units: int) -> None:
    """Make units sum to ``total_units``, in place.

    Shortfall goes to the highest-priority code; excess comes off the
    lowest-priority codes, dropping codes once they are down to one unit.
    """
    shortfall = total_units - sum(e["units"] for e in entries)
    if shortfall > 0:
        entries[0]["units"] += shortfall
        return

    excess = -shortfall
    for entry in reversed(entries):
        if excess <= 0:
            break
        give = min(excess, entry["units"] - 1)
        entry["units"] -= give
        excess -= give

    while excess > 0:
        excess -= entries.pop()["units"]


def _as_units(value: Any) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return 1
