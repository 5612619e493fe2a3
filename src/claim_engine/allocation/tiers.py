"""Procedure code tiers and keyword tables for unit allocation."""

from pydantic import BaseModel, ConfigDict


class ProcedureTier(BaseModel):
    """A billable procedure code with the activity keywords that support it."""

    model_config = ConfigDict(frozen=True)

    key: str
    code: str
    name: str
    weight: int
    rationale_label: str
    keywords: tuple[str, ...] = ()


# Highest-value code first. Weights are relative unit targets.
PROCEDURE_TIERS: tuple[ProcedureTier, ...] = (
    ProcedureTier(
        key="sensory",
        code="97533",
        name="Sensory Integration",
        weight=40,
        rationale_label="Sensory integrative techniques",
        keywords=(
            "swing",
            "crash",
            "weighted",
            "body sock",
            "trampoline",
            "rice bin",
            "tactile",
            "brushing",
            "compression",
            "vestibular",
            "proprioceptive",
        ),
    ),
    ProcedureTier(
        key="functional",
        code="97530",
        name="Therapeutic Activities",
        weight=30,
        rationale_label="Functional activities",
        keywords=(
            "obstacle",
            "pegboard",
            "puzzle",
            "cutting",
            "writing",
            "adl",
            "lacing",
            "buttoning",
            "feeding",
        ),
    ),
    ProcedureTier(
        key="balance",
        code="97112",
        name="Neuromuscular Re-education",
        weight=20,
        rationale_label="Balance and coordination",
        keywords=("balance", "foam beam", "one-leg", "ladder", "scooter", "yoga"),
    ),
    ProcedureTier(
        key="exercise",
        code="97110",
        name="Therapeutic Exercise",
        weight=10,
        rationale_label="Therapeutic exercises",
        keywords=(
            "curl",
            "strength",
            "stretch",
            "range of motion",
            "theraband",
            "push-up",
            "plank",
            "resistance",
            "endurance",
        ),
    ),
)

# Used when no activity supports any tier
DEFAULT_CODE = "97530"
GENERIC_RATIONALE = "General OT intervention"

# Every code the engine will bill, in priority order
CODE_CATALOG: dict[str, str] = {
    **{tier.code: tier.name for tier in PROCEDURE_TIERS},
    "97535": "Self-Care/Home Management",
    "97542": "Wheelchair Management",
}


def code_priority(code: str) -> int:
    """Position of a code in the catalog; unknown codes sort last."""
    codes = list(CODE_CATALOG)
    return codes.index(code) if code in codes else len(codes)
