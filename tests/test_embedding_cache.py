"""
Lazy embedding cache tests - compute on first use, persist, isolate failures.
"""

from unittest.mock import MagicMock

import pytest

from ramanya.core.errors import StoreError
from ramanya.core.schema import STATUS_APPROVED, STATUS_PENDING
from ramanya.vector.embedding_cache import EmbeddingCache
from conftest import StaticEmbedder, make_record


def test_missing_embedding_is_computed_and_persisted(any_store):
    record_id = any_store.create(make_record("hello", "မင်္ဂလာပါ"))
    embedder = StaticEmbedder({"hello": [0.5, 0.5]})
    cache = EmbeddingCache(any_store, embedder)

    record = any_store.get(record_id)
    result = cache.ensure_embedding(record)

    assert result is not None
    assert result.embedding == [0.5, 0.5]
    assert any_store.get(record_id).embedding == [0.5, 0.5]


def test_existing_embedding_is_not_recomputed(memory_store):
    record_id = memory_store.create(make_record("hello", "x", embedding=[1.0, 0.0]))
    embedder = StaticEmbedder({"hello": [0.0, 1.0]})
    cache = EmbeddingCache(memory_store, embedder)

    result = cache.ensure_embedding(memory_store.get(record_id))

    assert result.embedding == [1.0, 0.0]
    assert embedder.calls == []


def test_unembeddable_record_is_skipped_not_deleted(memory_store):
    record_id = memory_store.create(make_record("no vector for me", "x"))
    cache = EmbeddingCache(memory_store, StaticEmbedder({}))

    assert cache.ensure_embedding(memory_store.get(record_id)) is None
    stored = memory_store.get(record_id)
    assert stored is not None
    assert stored.embedding is None


def test_embedder_exception_is_isolated(memory_store):
    memory_store.create(make_record("boom", "x"))
    memory_store.create(make_record("fine", "y"))
    embedder = StaticEmbedder({"fine": [1.0, 0.0]}, fail_on={"boom"})
    cache = EmbeddingCache(memory_store, embedder)

    ready = cache.ensure_embeddings(memory_store.query_by_status(STATUS_APPROVED))

    assert [r.original for r in ready] == ["fine"]


def test_persistence_failure_excludes_record_from_batch():
    store = MagicMock()
    store.update_field.side_effect = [StoreError("disk full"), None]
    cache = EmbeddingCache(store, StaticEmbedder({"a": [1.0], "b": [0.5]}))
    records = [make_record("a", "x"), make_record("b", "y")]
    records[0].id, records[1].id = "id-a", "id-b"

    ready = cache.ensure_embeddings(records)

    assert [r.id for r in ready] == ["id-b"]
    assert store.update_field.call_count == 2


def test_ensure_embeddings_preserves_order(memory_store):
    for text in ["c", "a", "b"]:
        memory_store.create(make_record(text, text.upper()))
    cache = EmbeddingCache(memory_store, StaticEmbedder({"a": [1.0], "b": [2.0], "c": [3.0]}))

    ready = cache.ensure_embeddings(memory_store.query_by_status(STATUS_APPROVED))

    assert [r.original for r in ready] == ["c", "a", "b"]


def test_concurrent_embedding_is_last_writer_wins(memory_store):
    """Two readers loaded the record before either wrote; both writes succeed."""
    record_id = memory_store.create(make_record("hello", "x"))
    first_reader_copy = memory_store.get(record_id)
    second_reader_copy = memory_store.get(record_id)

    EmbeddingCache(memory_store, StaticEmbedder({"hello": [0.1, 0.2]})).ensure_embedding(first_reader_copy)
    EmbeddingCache(memory_store, StaticEmbedder({"hello": [0.1, 0.2]})).ensure_embedding(second_reader_copy)

    assert memory_store.get(record_id).embedding == [0.1, 0.2]


class TestReindex:

    def test_reindex_fills_missing_embeddings(self, any_store):
        any_store.create(make_record("a", "x"))
        any_store.create(make_record("b", "y", embedding=[9.0]))
        any_store.create(make_record("blank", "z"))
        any_store.create(make_record("pending", "p", status=STATUS_PENDING))
        cache = EmbeddingCache(any_store, StaticEmbedder({"a": [1.0], "b": [2.0], "pending": [3.0]}))

        stats = cache.reindex()

        assert stats == {"scanned": 3, "embedded": 1, "skipped": 1, "failed": 1}
        by_original = {r.original: r for r in any_store.query_by_status(STATUS_APPROVED)}
        assert by_original["a"].embedding == [1.0]
        assert by_original["b"].embedding == [9.0]
        assert by_original["blank"].embedding is None

    def test_forced_reindex_recomputes_everything(self, memory_store):
        memory_store.create(make_record("b", "y", embedding=[9.0]))
        cache = EmbeddingCache(memory_store, StaticEmbedder({"b": [2.0]}))

        stats = cache.reindex(force=True)

        assert stats["embedded"] == 1
        assert memory_store.query_by_status(STATUS_APPROVED)[0].embedding == [2.0]

    def test_reindex_pending_records(self, memory_store):
        memory_store.create(make_record("pending", "p", status=STATUS_PENDING))
        cache = EmbeddingCache(memory_store, StaticEmbedder({"pending": [3.0]}))

        stats = cache.reindex(status=STATUS_PENDING)

        assert stats["embedded"] == 1
        assert memory_store.query_by_status(STATUS_PENDING)[0].embedding == [3.0]
