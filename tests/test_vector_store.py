"""Unit tests for FaissVectorStore."""

import sqlite3

import numpy as np
import pytest

from conftest import TestConstants
from pdfqa import (
    DocumentChunk,
    EmbeddingModelMismatchError,
    FaissVectorStore,
    IndexNotFoundError,
)


def test_faiss_add_and_search(temp_faiss_store, sample_embedded_chunks):
    store = temp_faiss_store
    store.add_chunks(sample_embedded_chunks)

    assert len(store) == len(sample_embedded_chunks)
    assert store.dimension == TestConstants.DEFAULT_EMBEDDING_DIMENSION

    results = store.search(sample_embedded_chunks[0].embedding, top_k=2)

    assert len(results) == 2
    chunk, score = results[0]
    assert chunk.content == sample_embedded_chunks[0].content
    assert isinstance(score, float)
    assert score == pytest.approx(1.0, abs=1e-5)
    assert results[0][1] >= results[1][1]


def test_search_on_empty_store_returns_nothing(temp_faiss_store, mock_embeddings):
    assert temp_faiss_store.search(mock_embeddings("anything"), top_k=3) == []


def test_search_caps_results_at_store_size(temp_faiss_store, sample_embedded_chunks):
    temp_faiss_store.add_chunks(sample_embedded_chunks[:2])

    results = temp_faiss_store.search(sample_embedded_chunks[0].embedding, top_k=5)

    assert len(results) == 2


def test_add_chunk_without_embedding_fails(temp_faiss_store, sample_text_chunks):
    with pytest.raises(ValueError, match="has no embedding"):
        temp_faiss_store.add_chunks(sample_text_chunks)
    assert len(temp_faiss_store) == 0


def test_dimension_mismatch_is_rejected(temp_faiss_store, sample_embedded_chunks):
    temp_faiss_store.add_chunks(sample_embedded_chunks[:1])
    odd_chunk = DocumentChunk(
        content="short vector", metadata={"source": "x"}, embedding=np.ones(3)
    )

    with pytest.raises(ValueError, match="does not match"):
        temp_faiss_store.add_chunks([odd_chunk])
    with pytest.raises(ValueError, match="does not match"):
        temp_faiss_store.search(np.ones(3), top_k=1)


def test_faiss_persistence_roundtrip(temp_faiss_store, sample_embedded_chunks):
    store = temp_faiss_store
    store.add_chunks(sample_embedded_chunks)
    store.save()

    assert FaissVectorStore.exists(store.index_dir)

    reloaded = FaissVectorStore.load(store.index_dir, TestConstants.MOCK_EMBEDDING_MODEL)

    assert len(reloaded) == len(sample_embedded_chunks)
    results = reloaded.search(sample_embedded_chunks[2].embedding, top_k=1)
    chunk, _score = results[0]
    assert chunk.content == sample_embedded_chunks[2].content
    assert chunk.metadata == sample_embedded_chunks[2].metadata


def test_save_records_embedding_model(temp_faiss_store, sample_embedded_chunks):
    temp_faiss_store.add_chunks(sample_embedded_chunks)
    temp_faiss_store.save()

    with sqlite3.connect(temp_faiss_store.db_path) as conn:
        info = dict(conn.execute("SELECT key, value FROM store_info").fetchall())

    assert info == {
        "embedding_model": TestConstants.MOCK_EMBEDDING_MODEL,
        "dimension": str(TestConstants.DEFAULT_EMBEDDING_DIMENSION),
    }


def test_save_empty_store_fails(temp_faiss_store):
    with pytest.raises(ValueError, match="empty vector store"):
        temp_faiss_store.save()


def test_load_missing_store(tmp_path):
    assert not FaissVectorStore.exists(tmp_path / "missing")

    with pytest.raises(IndexNotFoundError):
        FaissVectorStore.load(tmp_path / "missing", "any-model")


def test_load_with_other_embedding_model_is_refused(
    temp_faiss_store, sample_embedded_chunks
):
    temp_faiss_store.add_chunks(sample_embedded_chunks)
    temp_faiss_store.save()

    with pytest.raises(EmbeddingModelMismatchError, match="rebuild the index"):
        FaissVectorStore.load(temp_faiss_store.index_dir, "text-embedding-3-large")


def test_ids_continue_after_reload(temp_faiss_store, sample_embedded_chunks):
    temp_faiss_store.add_chunks(sample_embedded_chunks[:3])
    temp_faiss_store.save()
    reloaded = FaissVectorStore.load(
        temp_faiss_store.index_dir, TestConstants.MOCK_EMBEDDING_MODEL
    )

    reloaded.add_chunks(sample_embedded_chunks[3:])

    assert sorted(reloaded.chunks) == [0, 1, 2, 3, 4]
    results = reloaded.search(sample_embedded_chunks[4].embedding, top_k=1)
    assert results[0][0].content == sample_embedded_chunks[4].content
