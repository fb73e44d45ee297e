"""Tests for the Chroma-backed vector index, using an in-memory client."""

import uuid

import chromadb
import pytest

from transcript_search.services.vector_store import (
    ChromaVectorIndex,
    passage_from_result,
    passage_to_metadata,
    series_filter,
)
from tests.conftest import make_passage


@pytest.fixture
def index():
    client = chromadb.EphemeralClient(settings=chromadb.Settings(anonymized_telemetry=False))
    return ChromaVectorIndex.from_client(client, f"test_{uuid.uuid4().hex}")


def test_metadata_omits_missing_series():
    meta = passage_to_metadata(make_passage("a", 2))
    assert "series_id" not in meta
    assert meta["source_id"] == "a"
    assert meta["chunk_index"] == 2


def test_distance_becomes_similarity():
    passage = passage_from_result(
        "a_0", "text", {"source_id": "a", "series_id": "romans", "chunk_index": 0}, 0.25,
    )
    assert passage.score == pytest.approx(0.75)
    assert passage.series_id == "romans"


async def test_empty_collection_returns_nothing(index):
    assert await index.query([1.0, 0.0, 0.0], 10) == []


async def test_query_orders_by_similarity_and_filters_by_series(index):
    passages = [
        make_passage("a", 0, series_id="romans", text="exact match"),
        make_passage("b", 0, series_id="psalms", text="close match"),
        make_passage("c", 0, text="far match"),
    ]
    await index.upsert(passages, [[1.0, 0.0, 0.0], [0.9, 0.1, 0.0], [0.0, 1.0, 0.0]])

    results = await index.query([1.0, 0.0, 0.0], 10)
    assert [p.source_id for p in results] == ["a", "b", "c"]
    assert results[0].score == pytest.approx(1.0, abs=1e-4)
    assert results[0].text == "exact match"
    assert results[2].series_id is None

    filtered = await index.query([1.0, 0.0, 0.0], 10, where=series_filter("psalms"))
    assert [p.id for p in filtered] == ["b_0"]


async def test_existing_ids_and_upsert_is_idempotent(index):
    passages = [make_passage("a", 0), make_passage("a", 1)]
    await index.upsert(passages, [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    await index.upsert(passages[:1], [[1.0, 0.0, 0.0]])

    assert await index.existing_ids(["a_0", "a_1", "zzz"]) == {"a_0", "a_1"}
    assert await index.count() == 2


async def test_upsert_rejects_mismatched_lengths(index):
    with pytest.raises(ValueError):
        await index.upsert([make_passage("a")], [])


def test_match_without_source_id_is_dropped():
    assert passage_from_result("orphan", "text", {"title": "Untitled"}, 0.1) is None
    assert passage_from_result("orphan", "text", None, 0.1) is None


async def test_query_skips_records_without_source(index):
    await index.upsert([make_passage("a", 0)], [[1.0, 0.0, 0.0]])
    index.collection.add(
        ids=["orphan_0"],
        embeddings=[[0.9, 0.1, 0.0]],
        documents=["stray text"],
        metadatas=[{"title": "Untitled"}],
    )

    results = await index.query([1.0, 0.0, 0.0], 10)

    assert [p.id for p in results] == ["a_0"]
