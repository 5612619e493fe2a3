"""Unit tests for the claim lifecycle state machine."""

from datetime import date, datetime

import pytest

from claim_engine.errors import InvalidTransition, UnknownField
from claim_engine.lifecycle import CLAIM_TRANSITIONS, ClaimLifecycle
from claim_engine.schemas import (
    AppealStatus,
    Claim,
    ClaimEvent,
    ClaimLineItem,
    ClaimStatus,
    PatientInfo,
    PracticeInfo,
)

NOW = datetime(2026, 10, 17, 12, 0)

PATIENT = PatientInfo(first_name="Maya", last_name="Lopez", insurance_provider="Aetna")
PRACTICE = PracticeInfo(name="Bright Steps Pediatric OT", npi="1234567890")


def _make_claim(status: ClaimStatus = ClaimStatus.DRAFT, **fields) -> Claim:
    """Helper to create a claim with one 97530 line item."""
    return Claim(
        id=1,
        patient_id=1,
        status=status,
        line_items=[
            ClaimLineItem(
                procedure_code="97530",
                description="Therapeutic Activities",
                units=2,
                rate=289.0,
                date_of_service=date(2026, 10, 1),
            )
        ],
        **fields,
    )


class _BrokenDrafter:
    def draft(self, *args, **kwargs):
        raise RuntimeError("template error")


@pytest.fixture
def lifecycle() -> ClaimLifecycle:
    return ClaimLifecycle(clock=lambda: NOW)


# ============================================================================
# CLAIM TRANSITION TESTS
# ============================================================================


class TestClaimTransitions:
    """Tests for the claim transition table."""

    def test_submit_then_pay(self, lifecycle):
        submitted = lifecycle.submit(_make_claim())

        assert submitted.status == ClaimStatus.SUBMITTED
        assert submitted.submitted_at == NOW
        assert submitted.submitted_amount == 578.0

        paid = lifecycle.mark_paid(submitted)
        assert paid.status == ClaimStatus.PAID
        assert paid.paid_at == NOW
        assert paid.paid_amount == 578.0

    def test_explicit_amounts(self, lifecycle):
        submitted = lifecycle.submit(_make_claim(), submitted_amount=500.0)
        paid = lifecycle.mark_paid(submitted, paid_amount=412.5)

        assert submitted.submitted_amount == 500.0
        assert paid.paid_amount == 412.5

    def test_transitions_do_not_mutate_input(self, lifecycle):
        claim = _make_claim()
        lifecycle.submit(claim)
        assert claim.status == ClaimStatus.DRAFT
        assert claim.submitted_at is None

    def test_draft_cannot_be_paid(self, lifecycle):
        with pytest.raises(InvalidTransition) as exc_info:
            lifecycle.mark_paid(_make_claim())
        assert exc_info.value.current == "draft"
        assert exc_info.value.event == "pay"

    @pytest.mark.parametrize(
        "status", [ClaimStatus.SUBMITTED, ClaimStatus.PAID, ClaimStatus.DENIED]
    )
    def test_only_drafts_submit(self, lifecycle, status):
        with pytest.raises(InvalidTransition):
            lifecycle.submit(_make_claim(status))

    @pytest.mark.parametrize("status", [ClaimStatus.DRAFT, ClaimStatus.PAID, ClaimStatus.DENIED])
    def test_only_submitted_claims_deny(self, lifecycle, status):
        with pytest.raises(InvalidTransition):
            lifecycle.deny(_make_claim(status), "Not covered")

    def test_paid_is_terminal(self):
        assert not [event for (status, event) in CLAIM_TRANSITIONS if status == ClaimStatus.PAID]

    def test_stale_expected_status_rejected(self, lifecycle):
        """A claim that moved on since it was read cannot be transitioned."""
        with pytest.raises(InvalidTransition, match="status changed from 'submitted'"):
            lifecycle.submit(_make_claim(), expected_status=ClaimStatus.SUBMITTED)

    def test_matching_expected_status_accepted(self, lifecycle):
        submitted = lifecycle.submit(_make_claim(), expected_status=ClaimStatus.DRAFT)
        assert submitted.status == ClaimStatus.SUBMITTED


class TestEdit:
    """Tests for editing claims."""

    def test_draft_can_be_edited(self, lifecycle):
        edited = lifecycle.edit(_make_claim(), {"claim_number": "CLM-1"})
        assert edited.claim_number == "CLM-1"
        assert edited.status == ClaimStatus.DRAFT

    def test_total_follows_line_items(self, lifecycle):
        claim = _make_claim()
        edited = lifecycle.edit(
            claim,
            {"line_items": [*claim.line_items, ClaimLineItem(procedure_code="97110", units=1, rate=100.0)]},
        )
        assert edited.total_amount == 678.0

    def test_submitted_claim_is_locked(self, lifecycle):
        with pytest.raises(InvalidTransition):
            lifecycle.edit(_make_claim(ClaimStatus.SUBMITTED), {"claim_number": "CLM-1"})

    def test_lifecycle_fields_only_change_through_transitions(self, lifecycle):
        with pytest.raises(InvalidTransition, match="status"):
            lifecycle.edit(_make_claim(), {"status": ClaimStatus.PAID})

    def test_unknown_fields_rejected(self, lifecycle):
        """A misspelled field is an error, not a silent no-op."""
        with pytest.raises(UnknownField) as excinfo:
            lifecycle.edit(_make_claim(), {"insurer": "Cigna", "claim_numbr": "CLM-1"})
        assert excinfo.value.fields == ["claim_numbr", "insurer"]

    def test_computed_total_is_not_editable(self, lifecycle):
        with pytest.raises(UnknownField, match="total_amount"):
            lifecycle.edit(_make_claim(), {"total_amount": 1.0})


# ============================================================================
# DENIAL TESTS
# ============================================================================


class TestDeny:
    """Tests for denial with best-effort appeal drafting."""

    def test_deny_drafts_appeal(self, lifecycle):
        outcome = lifecycle.deny(
            _make_claim(ClaimStatus.SUBMITTED),
            "Service denied - prior auth not obtained",
            patient=PATIENT,
            practice=PRACTICE,
        )

        assert outcome.claim.status == ClaimStatus.DENIED
        assert outcome.claim.denied_at == NOW
        assert outcome.appeal_generated
        assert outcome.appeal.category == "auth_missing"
        assert outcome.appeal.success_probability == 55
        assert outcome.appeal.status == AppealStatus.PENDING
        assert outcome.appeal.claim_id == 1

    def test_missing_reason_gets_default(self, lifecycle):
        outcome = lifecycle.deny(_make_claim(ClaimStatus.SUBMITTED), "   ")
        assert outcome.claim.denial_reason == "No reason provided"

    def test_deny_without_letter_inputs(self, lifecycle):
        outcome = lifecycle.deny(_make_claim(ClaimStatus.SUBMITTED), "Not covered")

        assert outcome.claim.status == ClaimStatus.DENIED
        assert not outcome.appeal_generated
        assert outcome.appeal is None

    def test_drafting_failure_keeps_denial(self):
        lifecycle = ClaimLifecycle(drafter=_BrokenDrafter(), clock=lambda: NOW)
        outcome = lifecycle.deny(
            _make_claim(ClaimStatus.SUBMITTED), "Not covered", patient=PATIENT, practice=PRACTICE
        )

        assert outcome.claim.status == ClaimStatus.DENIED
        assert not outcome.appeal_generated

    def test_regenerate_appeal(self, lifecycle):
        denied = lifecycle.deny(_make_claim(ClaimStatus.SUBMITTED), "Duplicate claim").claim
        record = lifecycle.regenerate_appeal(denied, None, PATIENT, PRACTICE)

        assert record.category == "duplicate_claim"
        assert denied.status == ClaimStatus.DENIED

    def test_regenerate_requires_denied_claim(self, lifecycle):
        with pytest.raises(InvalidTransition):
            lifecycle.regenerate_appeal(_make_claim(ClaimStatus.SUBMITTED), None, PATIENT, PRACTICE)

    def test_denied_claim_cannot_be_denied_again(self, lifecycle):
        denied = lifecycle.deny(_make_claim(ClaimStatus.SUBMITTED), "Not covered").claim
        with pytest.raises(InvalidTransition):
            lifecycle.deny(denied, "Not covered")


# ============================================================================
# APPEAL TRANSITION TESTS
# ============================================================================


class TestAppealTransitions:
    """Tests for appeal status transitions."""

    def _appeal(self, lifecycle):
        return lifecycle.deny(
            _make_claim(ClaimStatus.SUBMITTED), "Not covered", patient=PATIENT, practice=PRACTICE
        ).appeal

    def test_sent_then_completed(self, lifecycle):
        sent = lifecycle.transition_appeal(self._appeal(lifecycle), AppealStatus.SENT)
        completed = lifecycle.transition_appeal(sent, AppealStatus.COMPLETED, at=datetime(2026, 11, 1))

        assert sent.status_changed_at == NOW
        assert completed.status == AppealStatus.COMPLETED
        assert completed.status_changed_at == datetime(2026, 11, 1)

    def test_pending_can_fail(self, lifecycle):
        failed = lifecycle.transition_appeal(self._appeal(lifecycle), "failed")
        assert failed.status == AppealStatus.FAILED

    def test_pending_cannot_complete(self, lifecycle):
        with pytest.raises(InvalidTransition):
            lifecycle.transition_appeal(self._appeal(lifecycle), AppealStatus.COMPLETED)

    def test_decided_appeal_is_final(self, lifecycle):
        failed = lifecycle.transition_appeal(self._appeal(lifecycle), AppealStatus.FAILED)
        with pytest.raises(InvalidTransition):
            lifecycle.transition_appeal(failed, AppealStatus.SENT)


def test_event_names_match_transition_table():
    assert {event for _, event in CLAIM_TRANSITIONS} == set(ClaimEvent)
