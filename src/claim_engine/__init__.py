"""Claim lifecycle and reimbursement optimization engine."""

from .allocation import DelegatedAllocator, RuleBasedAllocator, get_allocator
from .appeals import AppealDrafter, category_tips, classify_denial
from .errors import (
    ClaimEngineError,
    InvalidTransition,
    MissingRequiredField,
    NotFound,
    UnknownField,
)
from .lifecycle import ClaimLifecycle
from .prediction import ReimbursementPredictor
from .repository import ClaimRepository, InMemoryRepository, PartyDirectory
from .service import ClaimService

__all__ = [
    "ClaimEngineError",
    "InvalidTransition",
    "MissingRequiredField",
    "NotFound",
    "UnknownField",
    "ReimbursementPredictor",
    "RuleBasedAllocator",
    "DelegatedAllocator",
    "get_allocator",
    "classify_denial",
    "AppealDrafter",
    "category_tips",
    "ClaimLifecycle",
    "ClaimRepository",
    "PartyDirectory",
    "InMemoryRepository",
    "ClaimService",
]
