"""Denial reason classification."""

from collections.abc import Sequence

from ..matching import first_match
from ..schemas.appeal import DenialPattern
from .patterns import DENIAL_PATTERNS, GENERIC_PATTERN


def classify_denial(
    denial_reason: str | None,
    patterns: Sequence[DenialPattern] = DENIAL_PATTERNS,
    fallback: DenialPattern = GENERIC_PATTERN,
) -> DenialPattern:
    """Map free-text denial reason to a known pattern.

    First pattern (in declaration order) with a phrase contained in the
    reason wins; no match, empty or missing text gives the generic pattern.
    """
    matched = first_match(denial_reason, patterns, lambda p: p.keywords)
    return matched or fallback
