"""
Schemas for the query-understanding stage.

ScopeDecision and QueryExpansion are tagged results: they always carry a
usable value, and ``is_fallback`` records whether that value came from
the auxiliary model or from the safe default.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class QueryScope(str, Enum):
    """Coarse breadth of a query.  Selects the active BudgetProfile."""
    NARROW = "narrow"
    MEDIUM = "medium"
    BROAD = "broad"


DEFAULT_SCOPE = QueryScope.MEDIUM


class BudgetProfile(BaseModel):
    """Size limits applied to one request, keyed by QueryScope."""
    top_k: int = Field(gt=0)  # Primary (and per-series) retrieval width
    max_context_chunks: int = Field(gt=0)  # Hard ceiling on the final passage set
    max_chunks_per_source: int = Field(gt=0)  # Stops one long transcript dominating
    sibling_reserve: int = Field(ge=0)  # Slots held back for series siblings
    max_sources_for_series: int = Field(gt=0)  # Top sources that contribute series IDs

    class Config:
        frozen = True


class ScopeDecision(BaseModel):
    scope: QueryScope = DEFAULT_SCOPE
    is_fallback: bool = False
    fallback_reason: str | None = None


class QueryExpansion(BaseModel):
    original: str
    expanded: str
    is_fallback: bool = False
    fallback_reason: str | None = None
