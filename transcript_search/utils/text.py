"""
Text utilities:
  - Word-window chunking of long transcripts
  - Log-safe previews of user text

All functions are pure (no I/O, no LLM).
"""

from __future__ import annotations


def chunk_transcript(
    transcript: str,
    chunk_size: int = 500,
    overlap: int = 50,
) -> list[str]:
    """
    Split a transcript into overlapping windows of ``chunk_size`` words.

    Consecutive windows share ``overlap`` words.  A transcript that fits
    in one window is returned as-is (original whitespace preserved).
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be in [0, chunk_size)")

    words = (transcript or "").split()
    if not words:
        return []
    if len(words) <= chunk_size:
        return [transcript.strip()]

    chunks: list[str] = []
    step = chunk_size - overlap
    start = 0
    while start < len(words):
        end = min(start + chunk_size, len(words))
        chunks.append(" ".join(words[start:end]))
        if end >= len(words):
            break
        start += step
    return chunks


def preview(text: str, limit: int = 80) -> str:
    """Single-line, truncated rendering of ``text`` for log messages."""
    flat = " ".join((text or "").split())
    if len(flat) <= limit:
        return flat
    return flat[:limit] + "..."
