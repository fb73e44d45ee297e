"""
Adaptive relevance cutoff and context-budget allocation.

All functions here are pure: no I/O, no LLM.
"""

from __future__ import annotations

import math
from collections import defaultdict

from transcript_search.schemas.retrieval import AllocationResult, PassageRecord
from transcript_search.schemas.scope import BudgetProfile
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.pipeline.chunk_scorer")

MIN_KEEP_FLOOR = 8
MIN_KEEP_FRACTION = 0.3
GAP_THRESHOLD = 0.03  # Absolute similarity units


def min_keep_for(max_context_chunks: int) -> int:
    return max(MIN_KEEP_FLOOR, math.ceil(max_context_chunks * MIN_KEEP_FRACTION))


def find_adaptive_cutoff(scores: list[float], max_context_chunks: int) -> int:
    """
    Return the cut index ``c`` such that results ``[0, c)`` are kept.

    Scores must be in descending order.  Past a floor of ``min_keep``
    results, the largest drop between neighbours that is at least
    GAP_THRESHOLD becomes the cut.  Only a strictly larger gap replaces
    the current one, so the lowest index wins a tie.  When no gap
    qualifies the whole list is kept.
    """
    min_keep = min_keep_for(max_context_chunks)
    if len(scores) <= min_keep:
        return len(scores)

    largest_gap = 0.0
    cut_index = len(scores)
    for i in range(min_keep, len(scores)):
        gap = scores[i - 1] - scores[i]
        if gap > largest_gap and gap >= GAP_THRESHOLD:
            largest_gap = gap
            cut_index = i

    return cut_index


def select_quality_passages(
    passages: list[PassageRecord],
    budget: BudgetProfile,
) -> list[PassageRecord]:
    """Trim score-ordered passages at the adaptive cutoff."""
    cutoff = find_adaptive_cutoff([p.score for p in passages], budget.max_context_chunks)
    if cutoff < len(passages):
        logger.info(
            "[CUTOFF] Kept %d of %d passages (cliff %.3f -> %.3f)",
            cutoff, len(passages), passages[cutoff - 1].score, passages[cutoff].score,
        )
    return passages[:cutoff]


def allocate_context_budget(
    quality_passages: list[PassageRecord],
    sibling_passages: list[PassageRecord],
    budget: BudgetProfile,
) -> AllocationResult:
    """
    Merge primary and sibling passages into one bounded list.

    Slots are *reserved* for siblings only as far as siblings exist, so
    a query without siblings gives the whole budget back to primary
    passages.  One per-source counter is shared across both phases.
    """
    sibling_reserved = min(len(sibling_passages), budget.sibling_reserve)
    main_budget = max(0, budget.max_context_chunks - sibling_reserved)

    per_source: dict[str, int] = defaultdict(int)
    selected: list[PassageRecord] = []

    for passage in quality_passages:
        if len(selected) >= main_budget:
            break
        if per_source[passage.source_id] >= budget.max_chunks_per_source:
            continue
        per_source[passage.source_id] += 1
        selected.append(passage)
    main_count = len(selected)

    for passage in sibling_passages:
        if len(selected) >= budget.max_context_chunks:
            break
        if per_source[passage.source_id] >= budget.max_chunks_per_source:
            continue
        per_source[passage.source_id] += 1
        selected.append(passage)

    result = AllocationResult(
        passages=selected,
        main_budget=main_budget,
        main_count=main_count,
        sibling_count=len(selected) - main_count,
        chunks_per_source=dict(per_source),
    )
    logger.info(
        "[BUDGET] final=%d (main=%d/%d, siblings=%d) | sources=%d",
        len(selected), main_count, main_budget, result.sibling_count, len(per_source),
    )
    return result
