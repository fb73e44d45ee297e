"""
Stage 1a: LLM-based query scope classification.

One small completion call returns narrow / medium / broad.  The result
is a ScopeDecision; provider errors and unparseable replies produce a
``medium`` fallback instead of failing the request.
"""

from __future__ import annotations

from transcript_search.core.config import settings
from transcript_search.prompts.query_scope import build_scope_prompt
from transcript_search.schemas.scope import DEFAULT_SCOPE, QueryScope, ScopeDecision
from transcript_search.services.llm import AuxiliaryModel
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.pipeline.scope")


def parse_scope(raw: str | None) -> QueryScope | None:
    """Map a model reply onto a QueryScope, or None if it is not one."""
    if not raw:
        return None
    word = raw.strip().strip(".\"'`").lower()
    try:
        return QueryScope(word)
    except ValueError:
        return None


async def classify_query_scope(query: str, llm: AuxiliaryModel) -> ScopeDecision:
    system_prompt, user_prompt = build_scope_prompt(query)
    try:
        raw = await llm.complete(
            system_prompt,
            user_prompt,
            max_tokens=settings.classifier_max_tokens,
        )
    except Exception as e:
        logger.error("[SCOPE] Classifier call failed, defaulting to %s: %s", DEFAULT_SCOPE.value, e)
        return ScopeDecision(
            scope=DEFAULT_SCOPE,
            is_fallback=True,
            fallback_reason=f"provider_error: {e}",
        )

    scope = parse_scope(raw)
    if scope is None:
        logger.warning(
            "[SCOPE] Unexpected classifier reply %r, defaulting to %s",
            raw, DEFAULT_SCOPE.value,
        )
        return ScopeDecision(
            scope=DEFAULT_SCOPE,
            is_fallback=True,
            fallback_reason=f"unparseable_reply: {raw!r}",
        )

    logger.info("[SCOPE] Classified: %s", scope.value)
    return ScopeDecision(scope=scope)
