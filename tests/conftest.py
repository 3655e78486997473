"""
Shared fixtures for relay tests.
"""

import math
from datetime import datetime

import pytest

from ramanya.core.schema import CorrectionRecord, STATUS_APPROVED, STATUS_PENDING
from ramanya.core.store import InMemoryCorrectionStore, SQLiteCorrectionStore


def unit_vector_with_score(score: float) -> list:
    """2-d unit vector whose cosine similarity with [1, 0] equals score."""
    return [score, math.sqrt(max(0.0, 1 - score * score))]


def make_record(original: str, suggestion: str, status: str = STATUS_APPROVED,
                embedding=None, context=None) -> CorrectionRecord:
    return CorrectionRecord(
        id="",
        original=original,
        suggestion=suggestion,
        context=context,
        status=status,
        embedding=embedding,
        created_at=datetime(2024, 1, 1, 12, 0, 0)
    )


class StaticEmbedder:
    """Embed collaborator returning fixed vectors per text; unknown text embeds to None."""

    def __init__(self, vectors: dict = None, fail_on: set = None):
        self.vectors = dict(vectors or {})
        self.fail_on = set(fail_on or [])
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if text in self.fail_on:
            raise RuntimeError(f"embedding backend down for {text!r}")
        return self.vectors.get(text)


@pytest.fixture
def memory_store():
    return InMemoryCorrectionStore()


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteCorrectionStore(str(tmp_path / "corrections.db"))


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    """Run a test against both store backends."""
    if request.param == "memory":
        return InMemoryCorrectionStore()
    return SQLiteCorrectionStore(str(tmp_path / "corrections.db"))
