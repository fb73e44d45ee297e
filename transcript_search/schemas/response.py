"""
Schemas for the engine's externally visible result.

ContextPayload is what a request handler serializes or hands to the
answer-generation model.  NoRelevantContent is the normal, non-error
outcome when nothing survives retrieval.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field

from transcript_search.schemas.scope import QueryScope

NO_CONTENT_MESSAGE = "No relevant sermon content found"


class SourceCitation(BaseModel):
    source_id: str
    title: str = ""
    speaker: str = ""
    date: str = ""
    reference: str = ""


class RetrievalMetadata(BaseModel):
    """Diagnostic metadata attached to every payload."""
    expanded_query: str = ""
    scope_fallback: bool = False
    expansion_fallback: bool = False
    raw_matches: int = 0
    after_cutoff: int = 0
    series_searched: int = 0
    sibling_chunks: int = 0
    main_chunks: int = 0
    final_chunks: int = 0
    sources_count: int = 0
    context_tokens: int = 0
    score_range: tuple[float, float] | None = None
    stage_timings: dict[str, float] = Field(default_factory=dict)


class ContextPayload(BaseModel):
    status: Literal["ok"] = "ok"
    context: str
    sources: list[SourceCitation]
    scope: QueryScope
    metadata: RetrievalMetadata = Field(default_factory=RetrievalMetadata)


class NoRelevantContent(BaseModel):
    status: Literal["no_content"] = "no_content"
    message: str = NO_CONTENT_MESSAGE
    scope: QueryScope | None = None
    metadata: RetrievalMetadata = Field(default_factory=RetrievalMetadata)


ContextResult = Union[ContextPayload, NoRelevantContent]
