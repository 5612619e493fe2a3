"""Claim lifecycle and reimbursement schemas."""

from .allocation import AllocatedCode, BillingAllocation, SoapNote, TimeBlock
from .appeal import (
    AppealRecord,
    AppealResult,
    AppealSummary,
    DenialOutcome,
    DenialPattern,
)
from .claim import Claim, ClaimLineItem
from .common import (
    AppealStatus,
    ClaimEvent,
    ClaimStatus,
    PatientInfo,
    PracticeInfo,
)
from .reimbursement import (
    HistoricalReimbursementRecord,
    HistoryFilter,
    Prediction,
    PredictionQuery,
    PredictionTrends,
    TrainingDataExport,
)

__all__ = [
    # Common
    "ClaimStatus",
    "ClaimEvent",
    "AppealStatus",
    "PatientInfo",
    "PracticeInfo",
    # Claims
    "Claim",
    "ClaimLineItem",
    # Reimbursement
    "HistoricalReimbursementRecord",
    "HistoryFilter",
    "PredictionQuery",
    "PredictionTrends",
    "Prediction",
    "TrainingDataExport",
    # Allocation
    "AllocatedCode",
    "TimeBlock",
    "SoapNote",
    "BillingAllocation",
    # Appeals
    "DenialPattern",
    "AppealResult",
    "AppealRecord",
    "DenialOutcome",
    "AppealSummary",
]
