"""
PipelineContext carries per-request state between the engine stages.

Created once per build_context() call and discarded with it; nothing
here is shared between requests.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field

from transcript_search.schemas.retrieval import (
    AllocationResult,
    PassageRecord,
    SiblingExpansion,
)
from transcript_search.schemas.scope import BudgetProfile, QueryExpansion, ScopeDecision


class PipelineContext(BaseModel):
    """
    Shared context object threaded through the stages of one request.

    Progressively enriched by each stage; the orchestrator turns it
    into RetrievalMetadata at the end.
    """

    # ── Inputs ───────────────────────────────────────────────────────
    query: str

    # ── Stage outputs (populated progressively) ─────────────────────
    scope_decision: ScopeDecision | None = None
    expansion: QueryExpansion | None = None
    budget: BudgetProfile | None = None
    raw_passages: list[PassageRecord] = Field(default_factory=list)
    quality_passages: list[PassageRecord] = Field(default_factory=list)
    siblings: SiblingExpansion | None = None
    allocation: AllocationResult | None = None

    # ── Timing ──────────────────────────────────────────────────────
    start_time: float = Field(default_factory=time.time)
    stage_timings: dict[str, float] = Field(default_factory=dict)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time
