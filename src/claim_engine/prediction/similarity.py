"""Insurer name and procedure code similarity heuristics."""

import re

# Codes within a family are interchangeable evidence for each other.
SIMILAR_CODE_FAMILIES: list[frozenset[str]] = [
    frozenset({"97165", "97166", "97167"}),  # evaluations
    frozenset({"97110", "97112", "97530", "97535", "97140"}),  # therapy
]

_NON_LETTERS = re.compile(r"[^A-Za-z]+")
_CAPITAL = re.compile(r"(?=[A-Z])")
MIN_TOKEN_LENGTH = 3


def insurer_tokens(name: str | None) -> list[str]:
    """Split an insurer name into lower-case word tokens.

    Non-letters are removed first, so words only break before a capital and
    all-caps suffixes fall apart into single letters that are dropped:
    "UnitedHealthcare PPO" -> ["united", "healthcare"]
    """
    joined = _NON_LETTERS.sub("", name or "")
    return [
        part.lower() for part in _CAPITAL.split(joined) if len(part) >= MIN_TOKEN_LENGTH
    ]


def are_similar_insurers(first: str | None, second: str | None) -> bool:
    """Whether two insurer names look like the same company.

    True when any token of one name is contained in a token of the other.
    """
    first_tokens = insurer_tokens(first)
    second_tokens = insurer_tokens(second)
    return any(
        a in b or b in a for a in first_tokens for b in second_tokens
    )


def are_similar_codes(first: str, second: str) -> bool:
    """Whether two procedure codes belong to the same declared family."""
    return any(first in family and second in family for family in SIMILAR_CODE_FAMILIES)


def code_family(code: str) -> set[str]:
    """All codes usable as evidence for ``code``, including itself."""
    related = {code}
    for family in SIMILAR_CODE_FAMILIES:
        if code in family:
            related |= family
    return related
