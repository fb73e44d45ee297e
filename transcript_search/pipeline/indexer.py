"""
Offline corpus indexing.

1. Load transcript JSON files
2. Split each transcript into overlapping word windows
3. Skip passages whose IDs are already in the index
4. Embed the rest in batches and upsert them in batches

Passage IDs are ``{source_id}_{chunk_index}``, so re-running only
indexes transcripts added since the previous run.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from transcript_search.core.config import settings
from transcript_search.schemas.retrieval import PassageRecord
from transcript_search.schemas.transcript import IndexingReport, TranscriptRecord
from transcript_search.services.embedding import EmbeddingClient
from transcript_search.utils.logging import get_logger
from transcript_search.utils.text import chunk_transcript

logger = get_logger("transcript_search.pipeline.indexer")


class WritableIndex(Protocol):
    async def existing_ids(self, ids: list[str]) -> set[str]:
        ...

    async def upsert(
        self,
        passages: list[PassageRecord],
        embeddings: list[list[float]],
    ) -> None:
        ...


def load_transcripts(directory: str | Path) -> list[TranscriptRecord]:
    path = Path(directory)
    files = sorted(path.glob("*.json"))
    logger.info("Found %d transcript files in %s", len(files), path)
    transcripts = []
    for f in files:
        data = json.loads(f.read_text(encoding="utf-8"))
        transcripts.append(TranscriptRecord.model_validate(data))
    return transcripts


def build_passages(
    transcripts: list[TranscriptRecord],
    chunk_size: int | None = None,
    overlap: int | None = None,
) -> list[PassageRecord]:
    size = chunk_size if chunk_size is not None else settings.chunk_size_words
    ovl = overlap if overlap is not None else settings.chunk_overlap_words

    passages: list[PassageRecord] = []
    for t in transcripts:
        for i, text in enumerate(chunk_transcript(t.transcript, size, ovl)):
            passages.append(PassageRecord(
                id=f"{t.source_id}_{i}",
                source_id=t.source_id,
                series_id=t.series_id or None,
                chunk_index=i,
                text=text,
                title=t.title or t.display_title,
                speaker=t.speaker,
                date=t.date or "",
                reference=t.reference or "",
            ))
    return passages


def _batches(items: list, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


async def index_transcripts(
    transcripts: list[TranscriptRecord],
    embedder: EmbeddingClient,
    index: WritableIndex,
    *,
    embedding_batch_size: int | None = None,
    upsert_batch_size: int | None = None,
) -> IndexingReport:
    embed_size = embedding_batch_size or settings.embedding_batch_size
    upsert_size = upsert_batch_size or settings.upsert_batch_size

    report = IndexingReport(transcripts=len(transcripts))
    report.skipped_empty = sum(1 for t in transcripts if not t.transcript.strip())

    passages = build_passages(transcripts)
    report.total_chunks = len(passages)
    logger.info("Total chunks: %d from %d transcripts", len(passages), len(transcripts))

    existing: set[str] = set()
    for batch in _batches([p.id for p in passages], upsert_size):
        existing |= await index.existing_ids(batch)
    report.existing_chunks = len(existing)

    new_passages = [p for p in passages if p.id not in existing]
    if not new_passages:
        logger.info("All chunks already indexed. Nothing to do.")
        return report

    logger.info("New chunks to index: %d", len(new_passages))
    embeddings: list[list[float]] = []
    for batch in _batches(new_passages, embed_size):
        embeddings.extend(await embedder.embed_batch([p.text for p in batch]))
        logger.info("Embedded %d/%d chunks", len(embeddings), len(new_passages))

    for start in range(0, len(new_passages), upsert_size):
        await index.upsert(
            new_passages[start:start + upsert_size],
            embeddings[start:start + upsert_size],
        )
        report.indexed_chunks = min(start + upsert_size, len(new_passages))

    logger.info("Indexed %d new chunks", report.indexed_chunks)
    return report
