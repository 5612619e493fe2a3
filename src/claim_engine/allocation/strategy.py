"""Allocator selection."""

import logging
from collections.abc import Sequence
from typing import Protocol

from llama_index.core.llms import LLM

from ..config import EngineSettings, get_settings
from ..schemas.allocation import BillingAllocation
from .delegated import DelegatedAllocator
from .rule_based import RuleBasedAllocator

logger = logging.getLogger(__name__)


class Allocator(Protocol):
    """Anything that turns activities and a unit budget into an allocation."""

    strategy: str

    def allocate(
        self,
        activities: Sequence[str] | None,
        total_units: int,
        unit_rate: float | None = None,
    ) -> BillingAllocation: ...


def get_allocator(
    settings: EngineSettings | None = None, llm: LLM | None = None
) -> Allocator:
    """Build the configured allocator.

    The delegated allocator needs an LLM; if none is passed and one cannot be
    built, the rule-based allocator is used instead.
    """
    settings = settings or get_settings()
    if settings.allocator_strategy != "delegated":
        return RuleBasedAllocator()

    if llm is None:
        from ..llm import get_llm

        try:
            llm = get_llm(settings)
        except Exception:
            logger.warning("LLM unavailable, falling back to rule-based allocation", exc_info=True)
            return RuleBasedAllocator()

    return DelegatedAllocator(llm)
