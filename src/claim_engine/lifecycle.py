"""Claim lifecycle state machine.

All claim status legality lives in ``CLAIM_TRANSITIONS``; callers never check
``claim.status`` themselves. Transitions are pure: they take a claim and
return an updated copy, leaving persistence to the caller. Every transition
accepts the status the caller last read, and is rejected if the claim has
moved on since (compare-and-swap on the from-state).
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from .appeals.drafter import AppealDrafter, to_appeal_record
from .errors import InvalidTransition, UnknownField
from .schemas.appeal import AppealRecord, DenialOutcome
from .schemas.claim import Claim, ClaimLineItem
from .schemas.common import (
    AppealStatus,
    ClaimEvent,
    ClaimStatus,
    PatientInfo,
    PracticeInfo,
)

logger = logging.getLogger(__name__)

CLAIM_TRANSITIONS: dict[tuple[ClaimStatus, ClaimEvent], ClaimStatus] = {
    (ClaimStatus.DRAFT, ClaimEvent.EDIT): ClaimStatus.DRAFT,
    (ClaimStatus.DRAFT, ClaimEvent.SUBMIT): ClaimStatus.SUBMITTED,
    (ClaimStatus.SUBMITTED, ClaimEvent.PAY): ClaimStatus.PAID,
    (ClaimStatus.SUBMITTED, ClaimEvent.DENY): ClaimStatus.DENIED,
    (ClaimStatus.DENIED, ClaimEvent.REGENERATE_APPEAL): ClaimStatus.DENIED,
}

APPEAL_TRANSITIONS: dict[AppealStatus, frozenset[AppealStatus]] = {
    AppealStatus.PENDING: frozenset({AppealStatus.SENT, AppealStatus.FAILED}),
    AppealStatus.SENT: frozenset({AppealStatus.COMPLETED, AppealStatus.FAILED}),
    AppealStatus.COMPLETED: frozenset(),
    AppealStatus.FAILED: frozenset(),
}

# Fields only transitions may change
LIFECYCLE_FIELDS = frozenset(
    {
        "id",
        "status",
        "submitted_amount",
        "paid_amount",
        "submitted_at",
        "paid_at",
        "denied_at",
        "denial_reason",
    }
)

DEFAULT_DENIAL_REASON = "No reason provided"


def next_status(
    claim: Claim, event: ClaimEvent, expected_status: ClaimStatus | None = None
) -> ClaimStatus:
    """The status ``event`` moves ``claim`` to, or InvalidTransition."""
    subject = f"claim {claim.id}"
    if expected_status is not None and claim.status != expected_status:
        raise InvalidTransition(
            subject,
            claim.status.value,
            event.value,
            f"status changed from '{ClaimStatus(expected_status).value}'",
        )

    target = CLAIM_TRANSITIONS.get((claim.status, event))
    if target is None:
        raise InvalidTransition(subject, claim.status.value, event.value)
    return target


class ClaimLifecycle:
    """Applies claim and appeal transitions."""

    def __init__(
        self,
        drafter: AppealDrafter | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.drafter = drafter or AppealDrafter(clock=clock)
        self.clock = clock

    def edit(
        self,
        claim: Claim,
        changes: dict[str, Any],
        expected_status: ClaimStatus | None = None,
    ) -> Claim:
        """Apply field changes to a draft claim."""
        next_status(claim, ClaimEvent.EDIT, expected_status)
        locked = LIFECYCLE_FIELDS.intersection(changes)
        if locked:
            raise InvalidTransition(
                f"claim {claim.id}",
                claim.status.value,
                ClaimEvent.EDIT.value,
                f"fields {sorted(locked)} change only through transitions",
            )
        unknown = sorted(set(changes) - set(Claim.model_fields))
        if unknown:
            raise UnknownField(unknown)
        return Claim.model_validate({**claim.model_dump(exclude={"total_amount"}), **changes})

    def submit(
        self,
        claim: Claim,
        submitted_amount: float | None = None,
        expected_status: ClaimStatus | None = None,
    ) -> Claim:
        """draft -> submitted."""
        status = next_status(claim, ClaimEvent.SUBMIT, expected_status)
        if submitted_amount is None:
            submitted_amount = claim.submitted_amount
        if submitted_amount is None:
            submitted_amount = claim.total_amount

        logger.info("Claim %s submitted for $%.2f", claim.id, submitted_amount)
        return claim.model_copy(
            update={
                "status": status,
                "submitted_at": self.clock(),
                "submitted_amount": submitted_amount,
            }
        )

    def mark_paid(
        self,
        claim: Claim,
        paid_amount: float | None = None,
        expected_status: ClaimStatus | None = None,
    ) -> Claim:
        """submitted -> paid."""
        status = next_status(claim, ClaimEvent.PAY, expected_status)
        if paid_amount is None:
            paid_amount = claim.submitted_amount
        if paid_amount is None:
            paid_amount = claim.total_amount

        logger.info("Claim %s paid $%.2f", claim.id, paid_amount)
        return claim.model_copy(
            update={"status": status, "paid_at": self.clock(), "paid_amount": paid_amount}
        )

    def deny(
        self,
        claim: Claim,
        reason: str | None = None,
        *,
        line_items: Sequence[ClaimLineItem] | None = None,
        patient: PatientInfo | None = None,
        practice: PracticeInfo | None = None,
        expected_status: ClaimStatus | None = None,
    ) -> DenialOutcome:
        """submitted -> denied, then draft an appeal on a best-effort basis.

        The denial stands even when drafting fails; ``appeal_generated``
        reports whether an appeal came out of it.
        """
        status = next_status(claim, ClaimEvent.DENY, expected_status)
        denied = claim.model_copy(
            update={
                "status": status,
                "denied_at": self.clock(),
                "denial_reason": (reason or "").strip() or DEFAULT_DENIAL_REASON,
            }
        )
        logger.info("Claim %s denied: %s", claim.id, denied.denial_reason)

        if patient is None or practice is None:
            logger.warning("Claim %s denied without patient/practice data, no appeal drafted", claim.id)
            return DenialOutcome(claim=denied)

        try:
            appeal = self._draft(denied, line_items, patient, practice)
        except Exception:
            logger.exception("Appeal drafting failed for claim %s", claim.id)
            return DenialOutcome(claim=denied)

        return DenialOutcome(claim=denied, appeal_generated=True, appeal=appeal)

    def regenerate_appeal(
        self,
        claim: Claim,
        line_items: Sequence[ClaimLineItem] | None,
        patient: PatientInfo,
        practice: PracticeInfo,
    ) -> AppealRecord:
        """Draft a fresh appeal for a denied claim; the claim is unchanged."""
        next_status(claim, ClaimEvent.REGENERATE_APPEAL)
        return self._draft(claim, line_items, patient, practice)

    def transition_appeal(
        self,
        record: AppealRecord,
        status: AppealStatus,
        at: datetime | None = None,
    ) -> AppealRecord:
        """Move an appeal along pending -> sent -> completed/failed."""
        status = AppealStatus(status)
        if status not in APPEAL_TRANSITIONS[record.status]:
            raise InvalidTransition(f"appeal {record.id}", record.status.value, status.value)
        return record.model_copy(
            update={"status": status, "status_changed_at": at or self.clock()}
        )

    def _draft(
        self,
        claim: Claim,
        line_items: Sequence[ClaimLineItem] | None,
        patient: PatientInfo,
        practice: PracticeInfo,
    ) -> AppealRecord:
        result = self.drafter.draft(claim, line_items, patient, practice)
        return to_appeal_record(result, claim.id)
