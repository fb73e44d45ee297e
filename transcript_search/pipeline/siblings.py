"""
Stage 2b: Series (sibling) expansion.

Similarity search alone misses other parts of a series that are less
textually similar to the query.  For every series represented among
the top sources, one extra filtered query pulls in a few passages from
the series' other transcripts.

1. Collect series IDs from the first N distinct sources (score order)
2. One series-filtered vector query per series, run concurrently
3. Keep up to MAX_SIBLING_CHUNKS_PER_SOURCE passages per new source

Best-effort: a failed series query is skipped and logged.
"""

from __future__ import annotations

import asyncio

from transcript_search.pipeline.budget import MAX_SIBLING_CHUNKS_PER_SOURCE
from transcript_search.schemas.retrieval import PassageRecord, SiblingExpansion
from transcript_search.schemas.scope import BudgetProfile
from transcript_search.services.vector_store import VectorIndex, series_filter
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.pipeline.siblings")


def collect_series_ids(
    quality_passages: list[PassageRecord],
    max_sources: int,
) -> list[str]:
    """
    Series IDs of the first ``max_sources`` distinct sources, in the
    order those sources are first seen.
    """
    series_ids: list[str] = []
    seen_sources: set[str] = set()
    for passage in quality_passages:
        if passage.source_id in seen_sources:
            continue
        seen_sources.add(passage.source_id)
        if passage.series_id and passage.series_id not in series_ids:
            series_ids.append(passage.series_id)
        if len(seen_sources) >= max_sources:
            break
    return series_ids


async def _query_series(
    series_id: str,
    vector: list[float],
    top_k: int,
    index: VectorIndex,
) -> list[PassageRecord]:
    matches = await index.query(vector, top_k, where=series_filter(series_id))
    return sorted(matches, key=lambda p: p.score, reverse=True)


async def expand_series_siblings(
    vector: list[float],
    quality_passages: list[PassageRecord],
    budget: BudgetProfile,
    index: VectorIndex,
) -> SiblingExpansion:
    series_ids = collect_series_ids(quality_passages, budget.max_sources_for_series)
    if not series_ids:
        return SiblingExpansion()

    results = await asyncio.gather(
        *(_query_series(sid, vector, budget.top_k, index) for sid in series_ids),
        return_exceptions=True,
    )

    # Merge in series order so the outcome does not depend on which
    # query finished first.
    primary_sources = {p.source_id for p in quality_passages}
    by_source: dict[str, list[PassageRecord]] = {}
    failed: list[str] = []

    for series_id, result in zip(series_ids, results):
        if isinstance(result, BaseException):
            logger.warning("[SIBLINGS] Series query failed for %s, skipping: %s", series_id, result)
            failed.append(series_id)
            continue
        for passage in result:
            if passage.source_id in primary_sources:
                continue
            kept = by_source.setdefault(passage.source_id, [])
            if len(kept) >= MAX_SIBLING_CHUNKS_PER_SOURCE:
                continue
            kept.append(passage)

    passages = [p for kept in by_source.values() for p in kept]
    logger.info(
        "[SIBLINGS] series=%d failed=%d sibling sources=%d chunks=%d",
        len(series_ids), len(failed), len(by_source), len(passages),
    )
    return SiblingExpansion(series_ids=series_ids, passages=passages, failed_series=failed)
