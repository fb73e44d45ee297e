"""
Schemas for offline corpus indexing.

TranscriptRecord accepts the camelCase field names of the exported
transcript JSON files as well as the snake_case names used in code.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class TranscriptRecord(BaseModel):
    source_id: str = Field(alias="sermonID")
    title: str = ""
    display_title: str = Field(default="", alias="displayTitle")
    speaker: str = Field(default="", alias="preacher")
    date: str | None = Field(default=None, alias="preachDate")
    reference: str | None = Field(default=None, alias="bibleText")
    series_id: str | None = Field(default=None, alias="series")
    transcript: str = ""

    class Config:
        populate_by_name = True
        extra = "ignore"


class IndexingReport(BaseModel):
    transcripts: int = 0
    skipped_empty: int = 0
    total_chunks: int = 0
    existing_chunks: int = 0
    indexed_chunks: int = 0
