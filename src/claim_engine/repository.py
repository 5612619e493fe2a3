"""Storage interfaces the engine consumes, plus an in-memory implementation.

The engine never owns persistence. ``ClaimRepository`` and ``PartyDirectory``
are the only calls it makes; ``InMemoryRepository`` implements both for
tests and local development.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from .errors import NotFound
from .schemas.appeal import AppealRecord
from .schemas.claim import Claim, ClaimLineItem
from .schemas.common import AppealStatus, PatientInfo, PracticeInfo
from .schemas.reimbursement import HistoricalReimbursementRecord, HistoryFilter


class ClaimRepository(Protocol):
    """Claim, appeal and reimbursement history storage."""

    def get_claim(self, claim_id: int) -> Claim: ...

    def update_claim(self, claim_id: int, patch: dict[str, Any]) -> Claim: ...

    def get_line_items(self, claim_id: int) -> list[ClaimLineItem]: ...

    def create_appeal_record(self, record: AppealRecord) -> AppealRecord: ...

    def update_appeal_status(
        self, appeal_id: int, status: AppealStatus, at: datetime
    ) -> AppealRecord: ...

    def append_historical_records(
        self, records: Iterable[HistoricalReimbursementRecord]
    ) -> None: ...

    def query_historical_records(
        self, filter: HistoryFilter
    ) -> list[HistoricalReimbursementRecord]: ...


class PartyDirectory(Protocol):
    """Read-only patient and practice lookups."""

    def get_patient(self, patient_id: int) -> PatientInfo: ...

    def get_practice(self, practice_id: int) -> PracticeInfo: ...


class InMemoryRepository:
    """Dictionary-backed repository and directory."""

    def __init__(self) -> None:
        self.claims: dict[int, Claim] = {}
        self.appeals: dict[int, AppealRecord] = {}
        self.history: list[HistoricalReimbursementRecord] = []
        self.patients: dict[int, PatientInfo] = {}
        self.practices: dict[int, PracticeInfo] = {}
        self._next_appeal_id = 1

    # --- Setup helpers ---

    def add_claim(self, claim: Claim) -> Claim:
        self.claims[claim.id] = claim
        return claim

    def add_patient(self, patient_id: int, patient: PatientInfo) -> PatientInfo:
        self.patients[patient_id] = patient
        return patient

    def add_practice(self, practice_id: int, practice: PracticeInfo) -> PracticeInfo:
        self.practices[practice_id] = practice
        return practice

    def appeals_for_claim(self, claim_id: int) -> list[AppealRecord]:
        return [a for a in self.appeals.values() if a.claim_id == claim_id]

    # --- ClaimRepository ---

    def get_claim(self, claim_id: int) -> Claim:
        try:
            return self.claims[claim_id]
        except KeyError:
            raise NotFound("Claim", claim_id) from None

    def update_claim(self, claim_id: int, patch: dict[str, Any]) -> Claim:
        current = self.get_claim(claim_id)
        updated = Claim.model_validate(
            {**current.model_dump(exclude={"total_amount"}), **patch}
        )
        self.claims[claim_id] = updated
        return updated

    def get_line_items(self, claim_id: int) -> list[ClaimLineItem]:
        return list(self.get_claim(claim_id).line_items)

    def create_appeal_record(self, record: AppealRecord) -> AppealRecord:
        stored = record.model_copy(update={"id": self._next_appeal_id})
        self.appeals[stored.id] = stored
        self._next_appeal_id += 1
        return stored

    def update_appeal_status(
        self, appeal_id: int, status: AppealStatus, at: datetime
    ) -> AppealRecord:
        if appeal_id not in self.appeals:
            raise NotFound("Appeal", appeal_id)
        updated = self.appeals[appeal_id].model_copy(
            update={"status": AppealStatus(status), "status_changed_at": at}
        )
        self.appeals[appeal_id] = updated
        return updated

    def append_historical_records(
        self, records: Iterable[HistoricalReimbursementRecord]
    ) -> None:
        self.history.extend(records)

    def query_historical_records(
        self, filter: HistoryFilter
    ) -> list[HistoricalReimbursementRecord]:
        return [
            r
            for r in self.history
            if (filter.insurer is None or r.insurer == filter.insurer)
            and (not filter.procedure_codes or r.procedure_code in filter.procedure_codes)
            and (filter.since is None or r.date_of_service >= filter.since)
        ]

    # --- PartyDirectory ---

    def get_patient(self, patient_id: int) -> PatientInfo:
        try:
            return self.patients[patient_id]
        except KeyError:
            raise NotFound("Patient", patient_id) from None

    def get_practice(self, practice_id: int) -> PracticeInfo:
        try:
            return self.practices[practice_id]
        except KeyError:
            raise NotFound("Practice", practice_id) from None
