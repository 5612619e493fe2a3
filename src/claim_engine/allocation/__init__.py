"""Procedure code unit allocation for billed therapy sessions."""

from .billing import build_time_blocks, line_items_from_allocation, units_for_duration
from .delegated import DelegatedAllocator, repair_allocation
from .rule_based import RuleBasedAllocator, allocate_units, distribute_units
from .strategy import Allocator, get_allocator
from .tiers import CODE_CATALOG, PROCEDURE_TIERS, ProcedureTier

__all__ = [
    "Allocator",
    "RuleBasedAllocator",
    "DelegatedAllocator",
    "get_allocator",
    "allocate_units",
    "distribute_units",
    "repair_allocation",
    "units_for_duration",
    "build_time_blocks",
    "line_items_from_allocation",
    "PROCEDURE_TIERS",
    "CODE_CATALOG",
    "ProcedureTier",
]
