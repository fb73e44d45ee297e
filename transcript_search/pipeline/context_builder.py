"""
Stage 3: Context assembly.

Turns the final passage list into the text block handed to the answer
model plus one citation per source.
"""

from __future__ import annotations

from transcript_search.schemas.response import (
    ContextPayload,
    ContextResult,
    NoRelevantContent,
    SourceCitation,
)
from transcript_search.schemas.retrieval import PassageRecord
from transcript_search.schemas.scope import QueryScope

PASSAGE_SEPARATOR = "\n\n---\n\n"


def build_citations(passages: list[PassageRecord]) -> list[SourceCitation]:
    """One citation per source_id; the first passage seen supplies the metadata."""
    citations: dict[str, SourceCitation] = {}
    for p in passages:
        if p.source_id in citations:
            continue
        citations[p.source_id] = SourceCitation(
            source_id=p.source_id,
            title=p.title,
            speaker=p.speaker,
            date=p.date,
            reference=p.reference,
        )
    return list(citations.values())


def format_passage_header(position: int, passage: PassageRecord) -> str:
    header = f'[Source {position}: "{passage.title}" by {passage.speaker}'
    if passage.reference:
        header += f" ({passage.reference})"
    if passage.date:
        header += f", {passage.date}"
    return header + "]"


def format_context(passages: list[PassageRecord]) -> str:
    return PASSAGE_SEPARATOR.join(
        f"{format_passage_header(i, p)}\n{p.text}"
        for i, p in enumerate(passages, start=1)
    )


def assemble_context(passages: list[PassageRecord], scope: QueryScope) -> ContextResult:
    if not passages:
        return NoRelevantContent(scope=scope)
    return ContextPayload(
        context=format_context(passages),
        sources=build_citations(passages),
        scope=scope,
    )
