"""
Auxiliary language-model client and token counting.

The engine only needs one short-form completion call (system
instruction + user text -> plain text), shared by the scope classifier
and the query expander.  ``AuxiliaryModel`` is that contract;
``OpenAIAuxiliaryModel`` is the production implementation.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol

import tiktoken
from openai import AsyncOpenAI

from transcript_search.core.config import settings
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.services.llm")


class AuxiliaryModel(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
    ) -> str:
        ...


def create_openai_client(api_key: str | None = None) -> AsyncOpenAI:
    """
    Build an AsyncOpenAI client from settings.

    Retries are disabled: transient provider errors surface to the
    pipeline, which decides whether they are degradable or fatal.
    Raises RuntimeError when no API key is configured.
    """
    key = api_key or settings.openai_api_key
    if not key:
        raise RuntimeError("OpenAI API key not configured (OPENAI_API_KEY).")
    client = AsyncOpenAI(
        api_key=key,
        timeout=settings.openai_timeout_seconds,
        max_retries=0,
    )
    logger.info("OpenAI client initialized.")
    return client


class OpenAIAuxiliaryModel:
    """Chat-completions wrapper used for classification and expansion."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        *,
        model: str | None = None,
        reasoning_effort: str | None = None,
    ):
        self._client = client or create_openai_client()
        self.model = model or settings.utility_model
        self.reasoning_effort = (
            reasoning_effort
            if reasoning_effort is not None
            else settings.utility_reasoning_effort
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_completion_tokens": max_tokens,
        }
        if self.reasoning_effort:
            kwargs["reasoning_effort"] = self.reasoning_effort

        response = await self._client.chat.completions.create(**kwargs)
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


# ── Token counting ──────────────────────────────────────────────────
_encoder_lock = threading.Lock()
_encoder: Any | None = None


def _get_encoder() -> Any:
    global _encoder
    if _encoder is not None:
        return _encoder

    with _encoder_lock:
        if _encoder is None:
            _encoder = tiktoken.get_encoding("cl100k_base")
        return _encoder


def count_tokens(text: str) -> int:
    """Count tokens with the cl100k_base encoding."""
    if not text:
        return 0
    return len(_get_encoder().encode(text))
