"""
Schemas for the retrieval stage.

Every PassageRecord carries its source_id, series_id and score as
typed fields so downstream code never digs through raw index metadata.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PassageRecord(BaseModel):
    """One scored chunk of transcript text returned by the vector index."""
    id: str
    source_id: str
    series_id: str | None = None
    chunk_index: int = 0
    text: str = ""
    score: float = 0.0  # Similarity, higher = more relevant

    # Display metadata
    title: str = ""
    speaker: str = ""
    date: str = ""
    reference: str = ""  # e.g. the Bible passage preached on


class SiblingExpansion(BaseModel):
    """Output of series (sibling) expansion."""
    series_ids: list[str] = Field(default_factory=list)
    passages: list[PassageRecord] = Field(default_factory=list)
    failed_series: list[str] = Field(default_factory=list)


class AllocationResult(BaseModel):
    """Output of the budget allocator."""
    passages: list[PassageRecord] = Field(default_factory=list)
    main_budget: int = 0
    main_count: int = 0
    sibling_count: int = 0
    chunks_per_source: dict[str, int] = Field(default_factory=dict)
