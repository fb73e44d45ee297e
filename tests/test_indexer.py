"""Tests for transcript chunking and incremental indexing."""

import json

import pytest

from transcript_search.pipeline.indexer import build_passages, index_transcripts, load_transcripts
from transcript_search.schemas.transcript import TranscriptRecord
from transcript_search.utils.text import chunk_transcript, preview
from tests.conftest import FakeEmbedder, FakeWritableIndex


def _words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


class TestChunkTranscript:
    def test_short_transcript_is_one_chunk(self):
        assert chunk_transcript("  In the beginning  ", 500, 50) == ["In the beginning"]

    def test_blank_transcript_has_no_chunks(self):
        assert chunk_transcript("   ", 500, 50) == []

    def test_windows_overlap(self):
        chunks = chunk_transcript(_words(25), chunk_size=10, overlap=2)
        assert [c.split()[0] for c in chunks] == ["w0", "w8", "w16"]
        assert chunks[0].split()[-2:] == chunks[1].split()[:2]
        assert chunks[-1].split()[-1] == "w24"

    def test_last_window_ends_at_text_end(self):
        chunks = chunk_transcript(_words(18), chunk_size=10, overlap=2)
        assert len(chunks) == 2
        assert chunks[1] == " ".join(f"w{i}" for i in range(8, 18))

    @pytest.mark.parametrize("size, overlap", [(0, 0), (10, 10), (10, -1)])
    def test_invalid_parameters(self, size, overlap):
        with pytest.raises(ValueError):
            chunk_transcript("a b c", size, overlap)


def test_preview_truncates_and_flattens():
    assert preview("one\ntwo   three") == "one two three"
    assert preview("x" * 100, limit=10) == "x" * 10 + "..."


def _record(source_id: str, transcript: str, **kwargs) -> TranscriptRecord:
    return TranscriptRecord(source_id=source_id, transcript=transcript, **kwargs)


class TestBuildPassages:
    def test_ids_and_metadata(self):
        record = _record(
            "1234", _words(15), display_title="Romans 8 (part 2)", speaker="J. Brown",
            date="2022-01-09", reference="Romans 8:28", series_id="romans",
        )
        passages = build_passages([record], chunk_size=10, overlap=2)

        assert [p.id for p in passages] == ["1234_0", "1234_1"]
        assert all(p.title == "Romans 8 (part 2)" for p in passages)
        assert all(p.series_id == "romans" for p in passages)
        assert passages[1].chunk_index == 1

    def test_empty_transcripts_are_skipped(self):
        assert build_passages([_record("1", "")], chunk_size=10, overlap=2) == []

    def test_zero_chunk_size_is_rejected(self):
        with pytest.raises(ValueError):
            build_passages([_record("1", _words(15))], chunk_size=0, overlap=0)

    def test_missing_optional_fields_become_empty_strings(self):
        passages = build_passages([_record("1", "short text", title="T")], chunk_size=10, overlap=2)
        assert passages[0].date == ""
        assert passages[0].reference == ""
        assert passages[0].series_id is None


def test_load_transcripts_reads_export_format(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps({
        "sermonID": "111",
        "title": "The Good Shepherd",
        "displayTitle": "Good Shepherd",
        "preacher": "A. Preacher",
        "preacherID": 7,
        "preachDate": "2023-04-02",
        "bibleText": "John 10",
        "series": "john",
        "transcript": "I am the good shepherd.",
    }))
    (tmp_path / "notes.txt").write_text("ignored")

    transcripts = load_transcripts(tmp_path)

    assert len(transcripts) == 1
    t = transcripts[0]
    assert (t.source_id, t.speaker, t.reference, t.series_id) == ("111", "A. Preacher", "John 10", "john")


class TestIndexTranscripts:
    async def test_indexes_only_new_chunks(self, monkeypatch):
        monkeypatch.setattr("transcript_search.pipeline.indexer.settings.chunk_size_words", 10)
        monkeypatch.setattr("transcript_search.pipeline.indexer.settings.chunk_overlap_words", 2)
        transcripts = [_record("a", _words(15)), _record("b", _words(5)), _record("c", "")]
        index = FakeWritableIndex(existing={"a_0"})
        embedder = FakeEmbedder()

        report = await index_transcripts(
            transcripts, embedder, index, embedding_batch_size=1, upsert_batch_size=1,
        )

        assert report.transcripts == 3
        assert report.skipped_empty == 1
        assert report.total_chunks == 3
        assert report.existing_chunks == 1
        assert report.indexed_chunks == 2
        assert [[p.id for p in batch] for batch, _ in index.upserts] == [["a_1"], ["b_0"]]
        assert len(embedder.texts) == 2

    async def test_nothing_to_do(self):
        index = FakeWritableIndex(existing={"a_0"})
        embedder = FakeEmbedder()
        report = await index_transcripts([_record("a", "short")], embedder, index)
        assert report.indexed_chunks == 0
        assert index.upserts == []
        assert embedder.texts == []
