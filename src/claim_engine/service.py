"""Claim operations over a repository.

Reads a claim, applies a lifecycle transition, writes back only the fields
that changed. Repository errors (NotFound) and lifecycle errors
(InvalidTransition) propagate to the caller; appeal drafting during a denial
does not.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from .allocation import Allocator, get_allocator, line_items_from_allocation, units_for_duration
from .config import EngineSettings, get_settings
from .errors import MissingRequiredField
from .lifecycle import ClaimLifecycle
from .prediction import ReimbursementPredictor, code_family
from .repository import ClaimRepository, PartyDirectory
from .schemas.allocation import BillingAllocation
from .schemas.appeal import AppealRecord, DenialOutcome
from .schemas.claim import Claim, ClaimLineItem
from .schemas.common import AppealStatus, ClaimStatus, PatientInfo, PracticeInfo
from .schemas.reimbursement import (
    HistoricalReimbursementRecord,
    HistoryFilter,
    Prediction,
    PredictionQuery,
)

logger = logging.getLogger(__name__)


def _patch(before: Claim, after: Claim) -> dict[str, Any]:
    """Fields that differ between two versions of a claim."""
    old = before.model_dump(exclude={"total_amount"})
    new = after.model_dump(exclude={"total_amount"})
    return {key: getattr(after, key) for key, value in new.items() if old.get(key) != value}


class ClaimService:
    """Claim lifecycle, billing and estimates backed by a repository."""

    def __init__(
        self,
        repository: ClaimRepository,
        directory: PartyDirectory | None = None,
        lifecycle: ClaimLifecycle | None = None,
        allocator: Allocator | None = None,
        settings: EngineSettings | None = None,
    ):
        self.repository = repository
        self.directory = directory if directory is not None else repository
        self.lifecycle = lifecycle or ClaimLifecycle()
        self.settings = settings or get_settings()
        self.allocator = allocator or get_allocator(self.settings)

    # --- Lifecycle ---

    def edit_claim(
        self,
        claim_id: int,
        changes: dict[str, Any],
        expected_status: ClaimStatus | None = None,
    ) -> Claim:
        claim = self.repository.get_claim(claim_id)
        updated = self.lifecycle.edit(claim, changes, expected_status)
        return self.repository.update_claim(claim_id, _patch(claim, updated))

    def submit(
        self,
        claim_id: int,
        submitted_amount: float | None = None,
        expected_status: ClaimStatus | None = None,
    ) -> Claim:
        claim = self.repository.get_claim(claim_id)
        updated = self.lifecycle.submit(claim, submitted_amount, expected_status)
        return self.repository.update_claim(claim_id, _patch(claim, updated))

    def mark_paid(
        self,
        claim_id: int,
        paid_amount: float | None = None,
        expected_status: ClaimStatus | None = None,
    ) -> Claim:
        claim = self.repository.get_claim(claim_id)
        updated = self.lifecycle.mark_paid(claim, paid_amount, expected_status)
        return self.repository.update_claim(claim_id, _patch(claim, updated))

    def deny(
        self,
        claim_id: int,
        reason: str | None = None,
        expected_status: ClaimStatus | None = None,
        draft_appeal: bool = True,
    ) -> DenialOutcome:
        """Deny a claim and, unless told not to, draft and store an appeal.

        Only the denial itself can fail this call.
        """
        claim = self.repository.get_claim(claim_id)

        context: dict[str, Any] = {}
        if draft_appeal:
            try:
                context = self._appeal_context(claim)
            except Exception:
                logger.exception("Could not load appeal context for claim %s", claim_id)

        outcome = self.lifecycle.deny(claim, reason, expected_status=expected_status, **context)
        denied = self.repository.update_claim(claim_id, _patch(claim, outcome.claim))

        if outcome.appeal is None:
            return DenialOutcome(claim=denied)

        try:
            appeal = self.repository.create_appeal_record(outcome.appeal)
        except Exception:
            logger.exception("Could not store appeal for claim %s", claim_id)
            return DenialOutcome(claim=denied)

        denied = self._note_appeal(claim_id, appeal) or denied
        return DenialOutcome(claim=denied, appeal_generated=True, appeal=appeal)

    def regenerate_appeal(self, claim_id: int) -> AppealRecord:
        """Draft and store another appeal for a denied claim."""
        claim = self.repository.get_claim(claim_id)
        context = self._appeal_context(claim)
        record = self.lifecycle.regenerate_appeal(claim, **context)
        appeal = self.repository.create_appeal_record(record)
        self._note_appeal(claim_id, appeal)
        return appeal

    def update_appeal_status(
        self,
        appeal: AppealRecord,
        status: AppealStatus,
        at: datetime | None = None,
    ) -> AppealRecord:
        """Mark an appeal sent, completed or failed."""
        moved = self.lifecycle.transition_appeal(appeal, status, at)
        return self.repository.update_appeal_status(
            moved.id, moved.status, moved.status_changed_at
        )

    # --- Billing ---

    def bill_session(
        self,
        claim_id: int,
        activities: Sequence[str],
        total_units: int | None = None,
        duration_minutes: int | None = None,
        unit_rate: float | None = None,
        date_of_service: date | None = None,
        diagnosis_code: str | None = None,
        diagnosis_description: str | None = None,
    ) -> tuple[Claim, BillingAllocation]:
        """Allocate a session's units and add them to a draft claim."""
        claim = self.repository.get_claim(claim_id)
        if total_units is None:
            if duration_minutes is None:
                raise MissingRequiredField("total_units", f"claim {claim_id}")
            total_units = units_for_duration(duration_minutes, self.settings.minutes_per_unit)

        rate = unit_rate if unit_rate is not None else self.settings.default_unit_rate
        allocation = self.allocator.allocate(activities, total_units, rate)
        new_items = line_items_from_allocation(
            allocation,
            date_of_service=date_of_service,
            diagnosis_code=diagnosis_code,
            diagnosis_description=diagnosis_description,
        )

        updated = self.lifecycle.edit(claim, {"line_items": [*claim.line_items, *new_items]})
        stored = self.repository.update_claim(claim_id, _patch(claim, updated))
        return stored, allocation

    # --- Estimates ---

    def record_payments(self, records: Iterable[HistoricalReimbursementRecord]) -> None:
        """Append observed payments to the history store."""
        self.repository.append_historical_records(list(records))

    def estimate(self, query: PredictionQuery) -> Prediction:
        """Predict one code's payment from stored history."""
        history = self.repository.query_historical_records(
            HistoryFilter(procedure_codes=sorted(code_family(query.procedure_code)))
        )
        return ReimbursementPredictor(history).predict(query)

    def estimate_claim(self, claim_id: int, as_of: date | None = None) -> dict[str, Prediction]:
        """Predict every distinct code on a claim for the claim's insurer."""
        claim = self.repository.get_claim(claim_id)
        codes = list(dict.fromkeys(item.procedure_code for item in claim.line_items))
        related = set().union(*(code_family(code) for code in codes)) if codes else set()
        history = self.repository.query_historical_records(
            HistoryFilter(procedure_codes=sorted(related))
        )
        insurer = claim.insurer_name or ""
        return ReimbursementPredictor(history).predict_many(
            insurer, codes, PredictionQuery(insurer=insurer, procedure_code="", as_of=as_of)
        )

    # --- Helpers ---

    def _appeal_context(self, claim: Claim) -> dict[str, Any]:
        line_items: list[ClaimLineItem] = self.repository.get_line_items(claim.id)
        patient: PatientInfo = self.directory.get_patient(claim.patient_id)
        practice: PracticeInfo = self.directory.get_practice(
            claim.practice_id if claim.practice_id is not None else self.settings.practice_id
        )
        return {"line_items": line_items, "patient": patient, "practice": practice}

    def _note_appeal(self, claim_id: int, appeal: AppealRecord) -> Claim | None:
        """Summarize the latest appeal on the claim; None if the write fails."""
        try:
            return self.repository.update_claim(
                claim_id,
                {
                    "ai_review_notes": f"AI Appeal Generated ({appeal.success_probability}% "
                    f"success probability). Category: {appeal.category}"
                },
            )
        except Exception:
            logger.exception("Could not update review notes for claim %s", claim_id)
            return None
