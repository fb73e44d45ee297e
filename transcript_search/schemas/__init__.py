"""
Pydantic schemas for every engine boundary.
Each module covers one stage or cross-cutting concern.
"""

from transcript_search.schemas.scope import (
    BudgetProfile,
    QueryExpansion,
    QueryScope,
    ScopeDecision,
)
from transcript_search.schemas.retrieval import (
    AllocationResult,
    PassageRecord,
    SiblingExpansion,
)
from transcript_search.schemas.response import (
    ContextPayload,
    ContextResult,
    NoRelevantContent,
    RetrievalMetadata,
    SourceCitation,
)
from transcript_search.schemas.transcript import IndexingReport, TranscriptRecord
from transcript_search.schemas.pipeline import PipelineContext

__all__ = [
    # Scope
    "BudgetProfile",
    "QueryExpansion",
    "QueryScope",
    "ScopeDecision",
    # Retrieval
    "AllocationResult",
    "PassageRecord",
    "SiblingExpansion",
    # Response
    "ContextPayload",
    "ContextResult",
    "NoRelevantContent",
    "RetrievalMetadata",
    "SourceCitation",
    # Indexing
    "IndexingReport",
    "TranscriptRecord",
    # Pipeline
    "PipelineContext",
]
