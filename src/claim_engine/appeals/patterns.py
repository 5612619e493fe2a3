"""Denial pattern table and category follow-up tips."""

from ..schemas.appeal import DenialPattern

_AUTH_ARGUMENTS = (
    "Authorization was obtained prior to service (if applicable)",
    "Services were emergent/urgent and required immediate intervention",
    "Retroactive authorization request is being submitted",
)
_AUTH_ACTIONS = (
    "Submit retroactive authorization request",
    "Document clinical urgency of services",
    "Include physician order/referral",
)

# Declaration order is match order
DENIAL_PATTERNS: tuple[DenialPattern, ...] = (
    DenialPattern(
        keywords=("medical necessity",),
        category="medical_necessity",
        success_rate=65,
        key_arguments=(
            "Treatment aligns with established AOTA practice guidelines for occupational therapy",
            "Documented functional deficits require skilled therapeutic intervention",
            "Patient demonstrated measurable progress toward functional goals",
            "Services were provided at the appropriate level of care",
        ),
        suggested_actions=(
            "Include detailed functional outcome measures",
            "Attach progress notes showing improvement",
            "Reference Medicare LCD/NCD guidelines",
            "Document specific ADL limitations addressed",
        ),
    ),
    DenialPattern(
        keywords=("not covered",),
        category="coverage",
        success_rate=45,
        key_arguments=(
            "Service is a covered benefit under the patient's plan",
            "CPT code accurately reflects the skilled service provided",
            "Treatment falls within scope of occupational therapy practice",
        ),
        suggested_actions=(
            "Verify patient benefits and coverage details",
            "Request copy of plan's coverage policy",
            "Consider alternative CPT code if applicable",
        ),
    ),
    DenialPattern(
        keywords=("authorization", "prior auth"),
        category="auth_missing",
        success_rate=55,
        key_arguments=_AUTH_ARGUMENTS,
        suggested_actions=_AUTH_ACTIONS,
    ),
    DenialPattern(
        keywords=("coding",),
        category="coding_error",
        success_rate=70,
        key_arguments=(
            "Corrected claim with accurate coding is attached",
            "CPT and ICD-10 codes now properly reflect services rendered",
            "Documentation supports medical necessity for billed codes",
        ),
        suggested_actions=(
            "Review and correct CPT/ICD-10 codes",
            "Ensure modifier usage is appropriate",
            "Verify units billed match documentation",
        ),
    ),
    DenialPattern(
        keywords=("duplicate",),
        category="duplicate_claim",
        success_rate=40,
        key_arguments=(
            "This is not a duplicate claim - services were distinct",
            "Different dates of service or different procedures",
            "Original claim was not paid - this is the valid submission",
        ),
        suggested_actions=(
            "Provide documentation showing distinct services",
            "Include timeline of all related claims",
            "Request status of original claim if unpaid",
        ),
    ),
    DenialPattern(
        keywords=("timely filing",),
        category="timely_filing",
        success_rate=35,
        key_arguments=(
            "Claim was submitted within required timeframe",
            "Delay was due to circumstances beyond provider control",
            "Proof of timely submission is attached",
        ),
        suggested_actions=(
            "Gather proof of original submission date",
            "Document any payer delays or system issues",
            "Check if exception applies (coordination of benefits, etc.)",
        ),
    ),
    DenialPattern(
        keywords=("eligibility",),
        category="eligibility",
        success_rate=30,
        key_arguments=(
            "Patient was eligible on date of service",
            "Eligibility verification was performed prior to service",
            "Patient's coverage was retroactively activated",
        ),
        suggested_actions=(
            "Verify patient eligibility for date of service",
            "Contact patient about insurance status",
            "Bill patient directly if truly ineligible",
        ),
    ),
    DenialPattern(
        keywords=("bundled",),
        category="bundling",
        success_rate=50,
        key_arguments=(
            "Services are distinct and separately identifiable",
            "Modifier 59 or XE/XP/XS/XU appropriately applied",
            "Documentation supports separate therapeutic goals",
        ),
        suggested_actions=(
            "Add appropriate modifier if not already present",
            "Document distinct therapeutic purposes",
            "Consider appealing with detailed treatment notes",
        ),
    ),
)

GENERIC_PATTERN = DenialPattern(
    keywords=(),
    category="other",
    success_rate=50,
    key_arguments=(
        "Services rendered were medically necessary and appropriate",
        "Documentation supports the clinical need for treatment",
        "Request for reconsideration based on attached clinical records",
    ),
    suggested_actions=(
        "Review denial reason carefully",
        "Gather all supporting documentation",
        "Contact payer for clarification if needed",
    ),
)

CATEGORY_TIPS: dict[str, tuple[str, ...]] = {
    "medical_necessity": (
        "Include standardized assessment scores (e.g., FIM, Barthel Index)",
        "Document specific functional limitations and how they impact daily life",
        "Show progression from evaluation to current status",
        "Reference peer-reviewed literature supporting intervention",
    ),
    "coverage": (
        "Obtain a copy of the member's Summary of Benefits",
        "Cite specific policy language supporting coverage",
        "Request a peer-to-peer review if available",
    ),
    "auth_missing": (
        "Document the clinical urgency that prevented prior authorization",
        "Include any communication with the payer regarding authorization",
        "Submit retroactive authorization request simultaneously",
    ),
    "coding_error": (
        "Double-check all codes against current year's CPT/ICD-10 manuals",
        "Verify modifier usage follows payer-specific guidelines",
        "Consider whether a different code better describes the service",
    ),
    "duplicate_claim": (
        "Provide a claims timeline showing all submissions",
        "Document what makes this claim distinct from others",
        "Include any Explanation of Benefits (EOB) from related claims",
    ),
    "timely_filing": (
        "Gather electronic submission confirmations or certified mail receipts",
        "Document any payer system issues or delays",
        "Check if coordination of benefits extends the filing deadline",
    ),
    "eligibility": (
        "Verify eligibility through the payer portal for the exact date of service",
        "Check if the patient had other coverage that should be billed first",
        "Contact the patient to confirm their insurance status at time of service",
    ),
    "bundling": (
        "Document the distinct therapeutic purpose of each service",
        "Use appropriate modifiers (59, XE, XP, XS, XU)",
        "Cite CCI edits and applicable exceptions",
    ),
    "other": (
        "Request a detailed explanation of the denial reason",
        "Ask for a peer-to-peer review with the medical director",
        "Consider escalating to a formal grievance if initial appeal fails",
    ),
}
