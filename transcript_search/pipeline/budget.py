"""
Budget profiles: the one table of size limits, keyed by QueryScope.

Read-only and shared by every request.
"""

from __future__ import annotations

from types import MappingProxyType

from transcript_search.schemas.scope import BudgetProfile, QueryScope

# Sibling passages kept per source during series expansion, for every scope.
MAX_SIBLING_CHUNKS_PER_SOURCE = 3

BUDGET_PROFILES: MappingProxyType[QueryScope, BudgetProfile] = MappingProxyType({
    QueryScope.NARROW: BudgetProfile(
        top_k=100,
        max_context_chunks=80,
        max_chunks_per_source=12,
        sibling_reserve=12,
        max_sources_for_series=40,
    ),
    QueryScope.MEDIUM: BudgetProfile(
        top_k=120,
        max_context_chunks=100,
        max_chunks_per_source=16,
        sibling_reserve=20,
        max_sources_for_series=60,
    ),
    QueryScope.BROAD: BudgetProfile(
        top_k=150,
        max_context_chunks=120,
        max_chunks_per_source=20,
        sibling_reserve=28,
        max_sources_for_series=100,
    ),
})


def get_budget_profile(scope: QueryScope | str) -> BudgetProfile:
    return BUDGET_PROFILES[QueryScope(scope)]
