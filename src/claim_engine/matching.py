"""Generic first-match lookup over declarative keyword tables."""

from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")


def first_match(
    text: str | None,
    table: Iterable[T],
    phrases: Callable[[T], Iterable[str]],
) -> T | None:
    """Return the first table entry with a phrase contained in ``text``.

    Matching is case-insensitive substring containment, in table order.
    Empty or missing text matches nothing.
    """
    haystack = (text or "").lower()
    if not haystack:
        return None
    for entry in table:
        if any(phrase.lower() in haystack for phrase in phrases(entry)):
            return entry
    return None
