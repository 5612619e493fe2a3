"""Denial classification and appeal drafting."""

from .classifier import classify_denial
from .drafter import AppealDrafter, category_tips, render_appeal_letter, to_appeal_record
from .metrics import summarize_appeals
from .patterns import CATEGORY_TIPS, DENIAL_PATTERNS, GENERIC_PATTERN
from .pdf import render_appeal_pdf

__all__ = [
    "classify_denial",
    "AppealDrafter",
    "render_appeal_letter",
    "category_tips",
    "to_appeal_record",
    "summarize_appeals",
    "render_appeal_pdf",
    "DENIAL_PATTERNS",
    "GENERIC_PATTERN",
    "CATEGORY_TIPS",
]
