"""
Stage 1b: LLM-based query expansion.

Rewrites the query into one dense paragraph of related vocabulary so
that colloquial phrasing still lands on the corpus's technical terms.
On any failure the original query is used unchanged.
"""

from __future__ import annotations

from transcript_search.core.config import settings
from transcript_search.prompts.query_expansion import build_expansion_prompt
from transcript_search.schemas.scope import QueryExpansion
from transcript_search.services.llm import AuxiliaryModel
from transcript_search.utils.logging import get_logger
from transcript_search.utils.text import preview

logger = get_logger("transcript_search.pipeline.query_expansion")


async def expand_query(query: str, llm: AuxiliaryModel) -> QueryExpansion:
    system_prompt, user_prompt = build_expansion_prompt(query)
    try:
        raw = await llm.complete(
            system_prompt,
            user_prompt,
            max_tokens=settings.expander_max_tokens,
        )
    except Exception as e:
        logger.error("[EXPAND] Expander call failed, using original query: %s", e)
        return QueryExpansion(
            original=query,
            expanded=query,
            is_fallback=True,
            fallback_reason=f"provider_error: {e}",
        )

    expanded = (raw or "").strip()
    if not expanded:
        logger.warning("[EXPAND] Expander returned empty content, using original query")
        return QueryExpansion(
            original=query,
            expanded=query,
            is_fallback=True,
            fallback_reason="empty_reply",
        )

    # Collapse any line breaks; the embedding input is a single paragraph.
    expanded = " ".join(expanded.split())
    logger.info("[EXPAND] Expanded query: %s", preview(expanded, 120))
    return QueryExpansion(original=query, expanded=expanded)
