"""Embed transcript JSON files and upsert them into the Chroma collection.

Reads every ``*.json`` file in ``TRANSCRIPTS_DIR`` (default data/sermons),
splits transcripts into overlapping word windows and indexes the chunks
that are not already present.

Usage:
  python index_transcripts.py [transcripts_dir]

Safe to re-run.
"""

from __future__ import annotations

import asyncio
import sys

from transcript_search.core.config import settings
from transcript_search.pipeline.indexer import index_transcripts, load_transcripts
from transcript_search.services.embedding import create_embedding_client
from transcript_search.services.vector_store import ChromaVectorIndex


async def _run(directory: str) -> None:
    transcripts = load_transcripts(directory)
    index = ChromaVectorIndex.from_settings()
    report = await index_transcripts(transcripts, create_embedding_client(), index)
    total = await index.count()
    print(
        f"Done! Indexed {report.indexed_chunks} new chunks "
        f"({report.existing_chunks} already present, {report.skipped_empty} empty transcripts skipped)."
    )
    print(f"Total vectors: {total}")


def main() -> None:
    directory = sys.argv[1] if len(sys.argv) > 1 else settings.transcripts_dir
    asyncio.run(_run(directory))


if __name__ == "__main__":
    main()
