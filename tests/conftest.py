"""Shared fixtures and in-memory doubles for the three provider protocols."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from transcript_search.schemas.retrieval import PassageRecord


def make_passage(
    source_id: str,
    chunk_index: int = 0,
    score: float = 0.5,
    *,
    series_id: str | None = None,
    text: str | None = None,
    title: str | None = None,
    speaker: str = "Rev. Smith",
    date: str = "2021-03-14",
    reference: str = "John 3:16",
) -> PassageRecord:
    return PassageRecord(
        id=f"{source_id}_{chunk_index}",
        source_id=source_id,
        series_id=series_id,
        chunk_index=chunk_index,
        text=text if text is not None else f"text of {source_id} chunk {chunk_index}",
        score=score,
        title=title if title is not None else f"Sermon {source_id}",
        speaker=speaker,
        date=date,
        reference=reference,
    )


class FakeAuxiliaryModel:
    """
    Answers classification and expansion prompts independently.
    A reply that is an Exception instance is raised instead of returned.
    """

    def __init__(self, scope_reply: Any = "medium", expansion_reply: Any = "expanded query"):
        self.scope_reply = scope_reply
        self.expansion_reply = expansion_reply
        self.calls: list[tuple[str, str, int]] = []

    async def complete(self, system_prompt: str, user_prompt: str, *, max_tokens: int) -> str:
        self.calls.append((system_prompt, user_prompt, max_tokens))
        reply = self.scope_reply if system_prompt.startswith("Classify") else self.expansion_reply
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeEmbedder:
    def __init__(self, vector: list[float] | None = None, error: Exception | None = None):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.texts: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.texts.append(text)
        if self.error:
            raise self.error
        return list(self.vector)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.texts.extend(texts)
        if self.error:
            raise self.error
        return [[float(len(t)), 0.0, 1.0] for t in texts]


class FakeVectorIndex:
    """
    Unfiltered queries return ``primary``; series-filtered queries return
    ``by_series[series_id]``.  Series listed in ``failing_series`` raise.
    """

    def __init__(
        self,
        primary: list[PassageRecord] | None = None,
        by_series: dict[str, list[PassageRecord]] | None = None,
        failing_series: set[str] | None = None,
        primary_error: Exception | None = None,
    ):
        self.primary = primary or []
        self.by_series = by_series or {}
        self.failing_series = failing_series or set()
        self.primary_error = primary_error
        self.calls: list[tuple[int, dict | None]] = []

    async def query(self, vector, top_k, where=None):
        self.calls.append((top_k, where))
        await asyncio.sleep(0)
        if where is None:
            if self.primary_error:
                raise self.primary_error
            return list(self.primary[:top_k])
        series_id = where["series_id"]["$eq"]
        if series_id in self.failing_series:
            raise ConnectionError(f"index unavailable for {series_id}")
        return list(self.by_series.get(series_id, [])[:top_k])

    @property
    def series_queried(self) -> list[str]:
        return [w["series_id"]["$eq"] for _, w in self.calls if w is not None]


class FakeWritableIndex:
    def __init__(self, existing: set[str] | None = None):
        self.existing = set(existing or ())
        self.upserts: list[tuple[list[PassageRecord], list[list[float]]]] = []

    async def existing_ids(self, ids):
        return {i for i in ids if i in self.existing}

    async def upsert(self, passages, embeddings):
        self.upserts.append((list(passages), list(embeddings)))
        self.existing.update(p.id for p in passages)


@pytest.fixture(autouse=True)
def word_token_counter(monkeypatch):
    """Count whitespace tokens so tests never need the tiktoken BPE download."""
    monkeypatch.setattr(
        "transcript_search.pipeline.orchestrator.count_tokens",
        lambda text: len(text.split()),
    )
