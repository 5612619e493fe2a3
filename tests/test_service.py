"""Tests for claim operations over the in-memory repository."""

from datetime import date, timedelta

import pytest

from claim_engine.errors import InvalidTransition, MissingRequiredField, NotFound, UnknownField
from claim_engine.schemas import (
    AppealStatus,
    Claim,
    ClaimStatus,
    HistoricalReimbursementRecord,
    PredictionQuery,
)

AS_OF = date(2026, 10, 17)


def _payment(paid: float, code: str = "97530", insurer: str = "Aetna", days_ago: int = 20):
    return HistoricalReimbursementRecord(
        insurer=insurer,
        procedure_code=code,
        charged_amount=289.0,
        paid_amount=paid,
        date_of_service=AS_OF - timedelta(days=days_ago),
    )


# ============================================================================
# LIFECYCLE OPERATIONS
# ============================================================================


class TestLifecycleOperations:
    """Tests for persisted claim transitions."""

    def test_submit_and_pay(self, service, repository):
        service.submit(1)
        paid = service.mark_paid(1, paid_amount=400.0)

        assert paid.status == ClaimStatus.PAID
        assert repository.get_claim(1).paid_amount == 400.0
        assert repository.get_claim(1).submitted_amount == 578.0

    def test_edit_claim(self, service, repository):
        service.edit_claim(1, {"claim_number": "CLM-X"})
        assert repository.get_claim(1).claim_number == "CLM-X"

    def test_edit_unknown_field_rejected(self, service, repository):
        with pytest.raises(UnknownField, match="insurer"):
            service.edit_claim(1, {"insurer": "Cigna"})
        assert repository.get_claim(1).insurer_name == "Aetna"

    def test_unknown_claim(self, service):
        with pytest.raises(NotFound, match="Claim 99 not found"):
            service.submit(99)

    def test_rejected_transition_leaves_claim_unchanged(self, service, repository):
        with pytest.raises(InvalidTransition):
            service.deny(1, "Not covered")
        assert repository.get_claim(1).status == ClaimStatus.DRAFT
        assert repository.appeals == {}

    def test_stale_status_rejected(self, service, repository):
        service.submit(1)
        with pytest.raises(InvalidTransition):
            service.mark_paid(1, expected_status=ClaimStatus.DRAFT)
        assert repository.get_claim(1).status == ClaimStatus.SUBMITTED


# ============================================================================
# DENIAL AND APPEALS
# ============================================================================


class TestDenialAndAppeals:
    """Tests for denial, appeal storage and regeneration."""

    def test_deny_stores_appeal(self, service, repository):
        service.submit(1)
        outcome = service.deny(1, "Service denied - prior auth not obtained")

        assert outcome.appeal_generated
        assert outcome.appeal.id == 1
        assert outcome.claim.status == ClaimStatus.DENIED
        assert outcome.claim.ai_review_notes == (
            "AI Appeal Generated (55% success probability). Category: auth_missing"
        )
        assert repository.appeals_for_claim(1) == [outcome.appeal]
        assert "Bright Steps Pediatric OT" in outcome.appeal.letter_text

    def test_deny_without_appeal(self, service, repository):
        service.submit(1)
        outcome = service.deny(1, "Not covered", draft_appeal=False)

        assert repository.get_claim(1).status == ClaimStatus.DENIED
        assert not outcome.appeal_generated
        assert repository.appeals_for_claim(1) == []

    def test_missing_patient_still_denies(self, service, repository):
        repository.patients.clear()
        service.submit(1)
        outcome = service.deny(1, "Not covered")

        assert repository.get_claim(1).status == ClaimStatus.DENIED
        assert repository.get_claim(1).denial_reason == "Not covered"
        assert not outcome.appeal_generated
        assert repository.appeals_for_claim(1) == []

    def test_appeal_storage_failure_still_denies(self, service, repository, monkeypatch):
        def fail(record):
            raise RuntimeError("disk full")

        monkeypatch.setattr(repository, "create_appeal_record", fail)
        service.submit(1)
        outcome = service.deny(1, "Not covered")

        assert outcome.claim.status == ClaimStatus.DENIED
        assert not outcome.appeal_generated

    def test_notes_failure_keeps_stored_appeal(self, service, repository, monkeypatch):
        """The appeal is stored before the notes write, so it is still reported."""
        update_claim = repository.update_claim
        def fail_on_notes(claim_id, patch):
            if "ai_review_notes" in patch:
                raise RuntimeError("write conflict")
            return update_claim(claim_id, patch)

        monkeypatch.setattr(repository, "update_claim", fail_on_notes)
        service.submit(1)
        outcome = service.deny(1, "Not covered")

        assert outcome.claim.status == ClaimStatus.DENIED
        assert outcome.appeal_generated
        assert outcome.appeal is not None
        assert repository.appeals_for_claim(1) == [outcome.appeal]
        assert repository.get_claim(1).ai_review_notes is None

    def test_regenerate_adds_second_appeal(self, service, repository):
        service.submit(1)
        first = service.deny(1, "Coding error").appeal
        second = service.regenerate_appeal(1)

        assert second.id == 2
        assert second.category == first.category == "coding_error"
        assert len(repository.appeals_for_claim(1)) == 2
        assert repository.get_claim(1).status == ClaimStatus.DENIED

    def test_regenerate_writes_review_notes(self, service, repository):
        service.submit(1)
        service.deny(1, "Medical necessity not established", draft_appeal=False)
        assert repository.get_claim(1).ai_review_notes is None

        service.regenerate_appeal(1)
        assert repository.get_claim(1).ai_review_notes == (
            "AI Appeal Generated (65% success probability). Category: medical_necessity"
        )

    def test_regenerate_requires_denied_claim(self, service):
        with pytest.raises(InvalidTransition):
            service.regenerate_appeal(1)

    def test_practice_defaults_from_settings(self, service, repository):
        repository.add_claim(Claim(id=2, patient_id=10, status=ClaimStatus.SUBMITTED))
        repository.add_practice(1, repository.get_practice(5).model_copy(update={"name": "Default OT"}))

        outcome = service.deny(2, "Not covered")
        assert outcome.appeal.letter_text.startswith("Default OT")

    def test_update_appeal_status(self, service, repository):
        service.submit(1)
        appeal = service.deny(1, "Not covered").appeal

        sent = service.update_appeal_status(appeal, AppealStatus.SENT)
        assert repository.appeals[appeal.id].status == AppealStatus.SENT

        with pytest.raises(InvalidTransition):
            service.update_appeal_status(sent, AppealStatus.PENDING)


# ============================================================================
# BILLING AND ESTIMATES
# ============================================================================


class TestBilling:
    """Tests for billing a session onto a claim."""

    def test_bill_session_from_duration(self, service, repository):
        claim, allocation = service.bill_session(
            1,
            ["Swinging on platform swing", "Obstacle course", "Balance beam walking", "Theraband rows"],
            duration_minutes=60,
            date_of_service=date(2026, 10, 2),
            diagnosis_code="F84.0",
        )

        assert allocation.total_units == 4
        assert len(claim.line_items) == 5
        assert claim.total_amount == pytest.approx(578.0 + 4 * 289.0)
        assert repository.get_claim(1).total_amount == claim.total_amount

    def test_bill_session_needs_units(self, service):
        with pytest.raises(MissingRequiredField):
            service.bill_session(1, ["Puzzle"])

    def test_bill_session_needs_draft(self, service, repository):
        service.submit(1)
        with pytest.raises(InvalidTransition):
            service.bill_session(1, ["Puzzle"], total_units=2)
        assert len(repository.get_claim(1).line_items) == 1


class TestEstimates:
    """Tests for predictions from stored history."""

    def test_estimate_uses_history(self, service):
        service.record_payments([_payment(70), _payment(74, code="97110")])
        prediction = service.estimate(
            PredictionQuery(insurer="Aetna", procedure_code="97530", as_of=AS_OF)
        )

        assert prediction.data_points == 2
        assert not prediction.is_fallback

    def test_estimate_without_history(self, service):
        prediction = service.estimate(
            PredictionQuery(insurer="Aetna", procedure_code="97166", as_of=AS_OF)
        )
        assert prediction.is_fallback
        assert prediction.predicted_reimbursement == 82

    def test_estimate_claim(self, service):
        service.record_payments([_payment(71)])
        predictions = service.estimate_claim(1, as_of=AS_OF)

        assert list(predictions) == ["97530"]
        assert predictions["97530"].predicted_reimbursement == 71
