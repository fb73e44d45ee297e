"""
Pipeline Orchestrator — top-level entry point.

    classify ‖ expand  →  embed  →  primary query  →  adaptive cutoff
      →  series expansion  →  budget allocation  →  context assembly

Every provider client is passed in explicitly; nothing here keeps state
between requests.  Cancelling the task that awaits build_context()
cancels the in-flight network call and no later stage starts.
"""

from __future__ import annotations

import asyncio

from transcript_search.pipeline.budget import get_budget_profile
from transcript_search.pipeline.chunk_scorer import (
    allocate_context_budget,
    select_quality_passages,
)
from transcript_search.pipeline.context_builder import assemble_context
from transcript_search.pipeline.query_expansion import expand_query
from transcript_search.pipeline.retrieval import embed_query, retrieve_primary
from transcript_search.pipeline.scope import classify_query_scope
from transcript_search.pipeline.siblings import expand_series_siblings
from transcript_search.schemas.pipeline import PipelineContext
from transcript_search.schemas.response import ContextPayload, ContextResult, RetrievalMetadata
from transcript_search.services.embedding import EmbeddingClient, create_embedding_client
from transcript_search.services.llm import AuxiliaryModel, OpenAIAuxiliaryModel, count_tokens
from transcript_search.services.vector_store import ChromaVectorIndex, VectorIndex
from transcript_search.utils.logging import get_logger
from transcript_search.utils.text import preview
from transcript_search.utils.timing import Timer

logger = get_logger("transcript_search.pipeline.orchestrator")


async def build_context(
    query: str,
    *,
    llm: AuxiliaryModel,
    embedder: EmbeddingClient,
    index: VectorIndex,
) -> ContextResult:
    """
    Build the bounded, cited passage set for one query.

    Returns a ContextPayload, or NoRelevantContent when nothing
    survives retrieval.  Raises ValueError for a blank query and
    RetrievalUnavailableError when embedding or the primary vector
    query fails.
    """
    if not query or not query.strip():
        raise ValueError("Query is required")

    ctx = PipelineContext(query=query.strip())
    logger.info("[PIPELINE] Started | query: %s", preview(ctx.query))

    # ── Stage 1: Scope + expansion (concurrent) ─────────────────────
    async with Timer("stage_1_query_understanding") as t1:
        ctx.scope_decision, ctx.expansion = await asyncio.gather(
            classify_query_scope(ctx.query, llm),
            expand_query(ctx.query, llm),
        )
    ctx.stage_timings["query_understanding"] = t1.elapsed_s
    ctx.budget = get_budget_profile(ctx.scope_decision.scope)

    # ── Stage 2: Primary retrieval + cutoff ─────────────────────────
    async with Timer("stage_2_primary_retrieval") as t2:
        vector = await embed_query(ctx.expansion.expanded, embedder)
        ctx.raw_passages = await retrieve_primary(vector, ctx.budget, index)
    ctx.stage_timings["primary_retrieval"] = t2.elapsed_s

    ctx.quality_passages = select_quality_passages(ctx.raw_passages, ctx.budget)
    logger.info(
        "[PIPELINE] scope=%s | top_k=%d | raw=%d | after adaptive cutoff=%d",
        ctx.scope_decision.scope.value, ctx.budget.top_k,
        len(ctx.raw_passages), len(ctx.quality_passages),
    )

    # ── Stage 3: Series expansion ───────────────────────────────────
    async with Timer("stage_3_series_expansion") as t3:
        ctx.siblings = await expand_series_siblings(
            vector, ctx.quality_passages, ctx.budget, index,
        )
    ctx.stage_timings["series_expansion"] = t3.elapsed_s

    # ── Stage 4: Allocation + assembly ──────────────────────────────
    ctx.allocation = allocate_context_budget(
        ctx.quality_passages, ctx.siblings.passages, ctx.budget,
    )
    result = assemble_context(ctx.allocation.passages, ctx.scope_decision.scope)
    result.metadata = _build_metadata(ctx, result)

    if isinstance(result, ContextPayload):
        logger.info(
            "[PIPELINE] Done (%.2fs) | chunks=%d | sources=%d | tokens=%d",
            ctx.elapsed_seconds, result.metadata.final_chunks,
            len(result.sources), result.metadata.context_tokens,
        )
    else:
        logger.info("[PIPELINE] Done (%.2fs) | no relevant content", ctx.elapsed_seconds)
    return result


class ContextEngine:
    """Holds the injected clients so callers can just call ``build_context(query)``."""

    def __init__(
        self,
        llm: AuxiliaryModel,
        embedder: EmbeddingClient,
        index: VectorIndex,
    ):
        self.llm = llm
        self.embedder = embedder
        self.index = index

    @classmethod
    def from_settings(cls) -> "ContextEngine":
        return cls(
            llm=OpenAIAuxiliaryModel(),
            embedder=create_embedding_client(),
            index=ChromaVectorIndex.from_settings(),
        )

    async def build_context(self, query: str) -> ContextResult:
        return await build_context(
            query, llm=self.llm, embedder=self.embedder, index=self.index,
        )


# ── Helpers ─────────────────────────────────────────────────────────

def _build_metadata(ctx: PipelineContext, result: ContextResult) -> RetrievalMetadata:
    raw = ctx.raw_passages
    allocation = ctx.allocation
    siblings = ctx.siblings
    return RetrievalMetadata(
        expanded_query=ctx.expansion.expanded if ctx.expansion else ctx.query,
        scope_fallback=bool(ctx.scope_decision and ctx.scope_decision.is_fallback),
        expansion_fallback=bool(ctx.expansion and ctx.expansion.is_fallback),
        raw_matches=len(raw),
        after_cutoff=len(ctx.quality_passages),
        series_searched=len(siblings.series_ids) if siblings else 0,
        sibling_chunks=allocation.sibling_count if allocation else 0,
        main_chunks=allocation.main_count if allocation else 0,
        final_chunks=len(allocation.passages) if allocation else 0,
        sources_count=len(result.sources) if isinstance(result, ContextPayload) else 0,
        context_tokens=count_tokens(result.context) if isinstance(result, ContextPayload) else 0,
        score_range=(raw[0].score, raw[-1].score) if raw else None,
        stage_timings=dict(ctx.stage_timings),
    )
