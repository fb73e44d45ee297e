"""
ChromaDB-backed vector index.

Passages live in a single cosine-space collection.  Chroma reports
cosine *distance*; the index converts it to similarity (1 - distance)
so callers always see "higher score = better match".

The chromadb client is synchronous, so every call is pushed onto a
worker thread with ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Protocol

import chromadb

from transcript_search.core.config import settings
from transcript_search.schemas.retrieval import PassageRecord
from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.services.vector_store")

SERIES_FIELD = "series_id"


class VectorIndex(Protocol):
    async def query(
        self,
        vector: list[float],
        top_k: int,
        where: dict[str, Any] | None = None,
    ) -> list[PassageRecord]:
        ...


def series_filter(series_id: str) -> dict[str, Any]:
    """Metadata filter restricting a query to one series."""
    return {SERIES_FIELD: {"$eq": series_id}}


def _get_persist_directory(persist_directory: str | None = None) -> str:
    """
    Resolve the directory where ChromaDB data is stored.
    Defaults to <project>/vector_db/chroma_db.
    """
    if persist_directory is not None:
        return persist_directory

    if settings.chromadb_persist_directory:
        return settings.chromadb_persist_directory

    base_dir = Path(__file__).resolve().parents[2]
    return str(base_dir / "vector_db" / "chroma_db")


def get_chroma_client(persist_directory: str | None = None) -> chromadb.ClientAPI:
    return chromadb.PersistentClient(
        path=_get_persist_directory(persist_directory),
        settings=chromadb.Settings(anonymized_telemetry=False),
    )


def passage_to_metadata(passage: PassageRecord) -> dict[str, Any]:
    """
    Flatten a passage into Chroma metadata.  Chroma rejects None values,
    so a passage without a series simply has no series_id key.
    """
    metadata: dict[str, Any] = {
        "source_id": passage.source_id,
        "chunk_index": passage.chunk_index,
        "title": passage.title,
        "speaker": passage.speaker,
        "date": passage.date,
        "reference": passage.reference,
    }
    if passage.series_id:
        metadata[SERIES_FIELD] = passage.series_id
    return metadata


def passage_from_result(
    passage_id: str,
    document: str | None,
    metadata: dict[str, Any] | None,
    distance: float | None,
) -> PassageRecord | None:
    """Convert one Chroma match; matches without a source_id return None."""
    meta = metadata or {}
    if not meta.get("source_id"):
        return None
    score = 1.0 - float(distance) if distance is not None else 0.0
    return PassageRecord(
        id=str(passage_id),
        source_id=str(meta["source_id"]),
        series_id=meta.get(SERIES_FIELD) or None,
        chunk_index=int(meta.get("chunk_index") or 0),
        text=document or "",
        score=score,
        title=str(meta.get("title") or ""),
        speaker=str(meta.get("speaker") or ""),
        date=str(meta.get("date") or ""),
        reference=str(meta.get("reference") or ""),
    )


class ChromaVectorIndex:
    def __init__(self, collection: chromadb.Collection):
        self.collection = collection

    @classmethod
    def from_client(
        cls,
        client: chromadb.ClientAPI,
        collection_name: str | None = None,
    ) -> "ChromaVectorIndex":
        collection = client.get_or_create_collection(
            name=collection_name or settings.chromadb_collection,
            metadata={"hnsw:space": "cosine"},
        )
        return cls(collection)

    @classmethod
    def from_settings(cls) -> "ChromaVectorIndex":
        return cls.from_client(get_chroma_client())

    # ── Query ───────────────────────────────────────────────────────

    async def query(
        self,
        vector: list[float],
        top_k: int,
        where: dict[str, Any] | None = None,
    ) -> list[PassageRecord]:
        return await asyncio.to_thread(self._query_sync, vector, top_k, where)

    def _query_sync(
        self,
        vector: list[float],
        top_k: int,
        where: dict[str, Any] | None,
    ) -> list[PassageRecord]:
        total = self.collection.count()
        if total == 0:
            return []

        results = self.collection.query(
            query_embeddings=[vector],
            n_results=min(top_k, total),
            where=where,
            include=["documents", "metadatas", "distances"],
        )
        if not results.get("ids") or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = results["documents"][0] if results.get("documents") else [None] * len(ids)
        metadatas = results["metadatas"][0] if results.get("metadatas") else [None] * len(ids)
        distances = results["distances"][0] if results.get("distances") else [None] * len(ids)

        passages = []
        for pid, doc, meta, dist in zip(ids, documents, metadatas, distances):
            passage = passage_from_result(pid, doc, meta, dist)
            if passage is None:
                logger.warning("[VECTOR] Skipping match %s with no source_id", pid)
                continue
            passages.append(passage)
        passages.sort(key=lambda p: p.score, reverse=True)
        return passages

    # ── Indexing ────────────────────────────────────────────────────

    async def existing_ids(self, ids: list[str]) -> set[str]:
        """Return the subset of ``ids`` already stored in the collection."""
        if not ids:
            return set()
        return await asyncio.to_thread(self._existing_ids_sync, ids)

    def _existing_ids_sync(self, ids: list[str]) -> set[str]:
        found = self.collection.get(ids=ids, include=[])
        return set(found.get("ids") or [])

    async def upsert(
        self,
        passages: list[PassageRecord],
        embeddings: list[list[float]],
    ) -> None:
        if len(passages) != len(embeddings):
            raise ValueError(
                f"Got {len(passages)} passages but {len(embeddings)} embeddings"
            )
        if not passages:
            return
        await asyncio.to_thread(
            self.collection.upsert,
            ids=[p.id for p in passages],
            embeddings=embeddings,
            documents=[p.text for p in passages],
            metadatas=[passage_to_metadata(p) for p in passages],
        )

    async def count(self) -> int:
        return await asyncio.to_thread(self.collection.count)
