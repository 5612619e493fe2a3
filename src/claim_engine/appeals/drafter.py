"""Appeal letter drafting for denied claims.

Rendering is a pure function of the claim, its line items, the patient and
the practice. Missing optional fields render as bracketed placeholders so a
letter is always produced; the only input that varies between two drafts of
the same claim is the current date.
"""

from collections.abc import Callable, Sequence
from datetime import date, datetime

from ..schemas.appeal import AppealRecord, AppealResult, DenialPattern
from ..schemas.claim import Claim, ClaimLineItem
from ..schemas.common import PatientInfo, PracticeInfo
from .classifier import classify_denial
from .patterns import CATEGORY_TIPS

CLINICAL_JUSTIFICATION = (
    "The occupational therapy services provided were medically necessary to "
    "address the patient's functional limitations and improve their ability "
    "to perform activities of daily living. Treatment was provided in "
    "accordance with the American Occupational Therapy Association (AOTA) "
    "practice guidelines and was appropriate for the patient's diagnosis and "
    "functional status.\n\n"
    "The patient's treatment plan was developed based on a comprehensive "
    "evaluation and targeted specific, measurable goals. Progress notes "
    "document the patient's response to treatment and demonstrate skilled "
    "therapeutic intervention was required to achieve functional outcomes."
)

RECONSIDERATION_REQUEST = (
    "Based on the clinical documentation and the grounds stated above, I "
    "respectfully request that you reconsider this claim for payment. All "
    "supporting documentation, including evaluation notes, treatment records, "
    "and progress notes, are available upon request.\n\n"
    "If you require any additional information or clarification, please do "
    "not hesitate to contact our office.\n\n"
    "Thank you for your prompt attention to this matter."
)

ENCLOSURES = (
    "Copy of original claim",
    "Clinical documentation",
    "Progress notes",
    "Treatment plan",
)


def _long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _short_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _unique(lines: list[str]) -> list[str]:
    return list(dict.fromkeys(lines))


def _service_lines(line_items: Sequence[ClaimLineItem]) -> list[str]:
    lines = []
    for item in line_items:
        description = f" - {item.description}" if item.description else ""
        plural = "s" if item.units > 1 else ""
        lines.append(f"{item.procedure_code}{description} ({item.units} unit{plural})")
    return _unique(lines)


def _diagnosis_lines(line_items: Sequence[ClaimLineItem]) -> list[str]:
    lines = []
    for item in line_items:
        if not item.diagnosis_code:
            continue
        description = f" - {item.diagnosis_description}" if item.diagnosis_description else ""
        lines.append(f"{item.diagnosis_code}{description}")
    return _unique(lines)


def _date_of_service(claim: Claim, line_items: Sequence[ClaimLineItem]) -> str:
    service_dates = [item.date_of_service for item in line_items if item.date_of_service]
    if service_dates:
        return _short_date(min(service_dates))
    if claim.submitted_at:
        return _short_date(claim.submitted_at.date())
    return "See attached documentation"


def render_appeal_letter(
    claim: Claim,
    line_items: Sequence[ClaimLineItem],
    patient: PatientInfo,
    practice: PracticeInfo,
    pattern: DenialPattern,
    today: date,
) -> str:
    """Render the appeal letter text."""
    practice_name = practice.name or "[Practice Name]"
    insurer = patient.insurance_provider or claim.insurer_name or "[Insurance Company]"
    indent = "\n    "

    services = _service_lines(line_items)
    diagnoses = _diagnosis_lines(line_items)
    grounds = "\n".join(f"{i}. {arg}" for i, arg in enumerate(pattern.key_arguments, start=1))
    enclosures = "\n".join(f"- {e}" for e in ENCLOSURES)

    letter = f"""
{practice_name}
{practice.address or '[Practice Address]'}
{practice.phone or '[Practice Phone]'}
NPI: {practice.npi or '[NPI Number]'}

{_long_date(today)}

Claims Review Department
{insurer}
[Insurance Address]

RE: APPEAL OF DENIED CLAIM
    Patient Name: {patient.full_name}
    Patient DOB: {_short_date(patient.date_of_birth) if patient.date_of_birth else 'On file'}
    Member ID: {patient.insurance_id or 'On file'}
    Claim Number: {claim.claim_number or 'See attached'}
    Date of Service: {_date_of_service(claim, line_items)}
    Billed Amount: ${claim.total_amount:.2f}
    Denial Reason: {claim.denial_reason or 'Not specified'}

Dear Claims Review Department,

I am writing to formally appeal the denial of the above-referenced claim for occupational therapy services provided to {patient.full_name}.

SERVICES PROVIDED:
    {indent.join(services) or 'See attached claim'}

DIAGNOSIS CODES:
    {indent.join(diagnoses) or 'See attached documentation'}

GROUNDS FOR APPEAL:

{grounds}

CLINICAL JUSTIFICATION:

{CLINICAL_JUSTIFICATION}

REQUEST FOR RECONSIDERATION:

{RECONSIDERATION_REQUEST}

Sincerely,


_______________________________
Provider Name
{practice_name}
NPI: {practice.npi or '[NPI]'}
Phone: {practice.phone or '[Phone]'}

Enclosures:
{enclosures}
"""
    return letter.strip()


class AppealDrafter:
    """Classify a claim's denial and draft the matching appeal letter."""

    def __init__(
        self,
        classifier: Callable[[str | None], DenialPattern] = classify_denial,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.classifier = classifier
        self.clock = clock

    def draft(
        self,
        claim: Claim,
        line_items: Sequence[ClaimLineItem] | None,
        patient: PatientInfo,
        practice: PracticeInfo,
        today: date | None = None,
    ) -> AppealResult:
        """Draft an appeal for a denied claim.

        ``today`` is the letter date; it defaults to the clock's date.
        """
        now = self.clock()
        items = list(line_items) if line_items is not None else list(claim.line_items)
        pattern = self.classifier(claim.denial_reason)

        return AppealResult(
            letter_text=render_appeal_letter(
                claim, items, patient, practice, pattern, today or now.date()
            ),
            category=pattern.category,
            success_probability=pattern.success_rate,
            suggested_actions=list(pattern.suggested_actions),
            key_arguments=list(pattern.key_arguments),
            generated_at=now,
        )


def category_tips(category: str | None) -> list[str]:
    """Follow-up tips for a denial category; unknown categories get generic tips."""
    return list(CATEGORY_TIPS.get(category or "", CATEGORY_TIPS["other"]))


def to_appeal_record(result: AppealResult, claim_id: int) -> AppealRecord:
    """A pending appeal record for persisting a drafted appeal."""
    return AppealRecord(
        claim_id=claim_id,
        category=result.category,
        letter_text=result.letter_text,
        success_probability=result.success_probability,
        suggested_actions=result.suggested_actions,
        key_arguments=result.key_arguments,
        generated_at=result.generated_at,
    )
