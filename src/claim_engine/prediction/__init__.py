"""Reimbursement prediction from historical insurer payments."""

from .predictor import FALLBACK_RATES, ReimbursementPredictor, relevance_score
from .similarity import are_similar_codes, are_similar_insurers, code_family

__all__ = [
    "ReimbursementPredictor",
    "FALLBACK_RATES",
    "relevance_score",
    "are_similar_insurers",
    "are_similar_codes",
    "code_family",
]
