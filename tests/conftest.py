"""Shared fixtures: an in-memory repository seeded with one practice, patient and claim."""

from datetime import date, datetime

import pytest

from claim_engine.config import EngineSettings
from claim_engine.lifecycle import ClaimLifecycle
from claim_engine.repository import InMemoryRepository
from claim_engine.schemas import Claim, ClaimLineItem, PatientInfo, PracticeInfo
from claim_engine.service import ClaimService

FIXED_NOW = datetime(2026, 10, 17, 12, 0)


@pytest.fixture
def repository() -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.add_practice(
        5,
        PracticeInfo(
            id=5,
            name="Bright Steps Pediatric OT",
            npi="1234567890",
            address="12 Main St, Springfield",
            phone="555-0100",
        ),
    )
    repo.add_patient(
        10,
        PatientInfo(
            id=10,
            first_name="Maya",
            last_name="Lopez",
            insurance_provider="Aetna",
            insurance_id="W123456789",
        ),
    )
    repo.add_claim(
        Claim(
            id=1,
            patient_id=10,
            insurer_name="Aetna",
            practice_id=5,
            claim_number="CLM-2026-0001",
            line_items=[
                ClaimLineItem(
                    procedure_code="97530",
                    description="Therapeutic Activities",
                    diagnosis_code="F84.0",
                    diagnosis_description="Autistic disorder",
                    units=2,
                    rate=289.0,
                    date_of_service=date(2026, 10, 1),
                )
            ],
        )
    )
    return repo


@pytest.fixture
def service(repository: InMemoryRepository) -> ClaimService:
    return ClaimService(
        repository,
        lifecycle=ClaimLifecycle(clock=lambda: FIXED_NOW),
        settings=EngineSettings(allocator_strategy="rule_based"),
    )
