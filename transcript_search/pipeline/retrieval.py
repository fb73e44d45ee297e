"""
Stage 2a: Primary retrieval.

1. Embed the expanded query
2. One unfiltered vector query at the profile's top_k
3. Sort matches by descending score

Both calls are required inputs for everything that follows, so any
failure here aborts the request with RetrievalUnavailableError.
"""

from __future__ import annotations

from transcript_search.schemas.retrieval import PassageRecord
from transcript_search.schemas.scope import BudgetProfile
from transcript_search.services.embedding import EmbeddingClient
from transcript_search.services.vector_store import VectorIndex
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.pipeline.retrieval")

UNAVAILABLE_MESSAGE = "Search is temporarily unavailable. Please try again."


class RetrievalUnavailableError(Exception):
    """Raised when the embedding service or the vector index cannot serve a query."""
    pass


async def embed_query(text: str, embedder: EmbeddingClient) -> list[float]:
    try:
        vector = await embedder.embed(text)
    except Exception as e:
        logger.error("[RETRIEVAL] Embedding failed: %s", e)
        raise RetrievalUnavailableError(UNAVAILABLE_MESSAGE) from e
    if not vector:
        logger.error("[RETRIEVAL] Embedding service returned an empty vector")
        raise RetrievalUnavailableError(UNAVAILABLE_MESSAGE)
    return vector


async def retrieve_primary(
    vector: list[float],
    budget: BudgetProfile,
    index: VectorIndex,
) -> list[PassageRecord]:
    try:
        matches = await index.query(vector, budget.top_k)
    except Exception as e:
        logger.error("[RETRIEVAL] Primary vector query failed: %s", e)
        raise RetrievalUnavailableError(UNAVAILABLE_MESSAGE) from e

    passages = sorted(matches, key=lambda p: p.score, reverse=True)
    if passages:
        logger.info(
            "[RETRIEVAL] Primary query: top_k=%d raw=%d score range=%.3f-%.3f",
            budget.top_k, len(passages), passages[0].score, passages[-1].score,
        )
    else:
        logger.warning("[RETRIEVAL] Primary query returned no matches (top_k=%d)", budget.top_k)
    return passages
