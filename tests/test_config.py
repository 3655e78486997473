"""
Configuration tests.
"""

import pytest

from ramanya.core.config import RelayConfig, parse_model_list


def test_parse_model_list_keeps_order():
    assert parse_model_list("gemma3:27b, gemma3:12b ,,llama3.1") == ["gemma3:27b", "gemma3:12b", "llama3.1"]
    assert parse_model_list("") == []
    assert parse_model_list(None) == []


def test_from_env_reads_environment(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("RAG_ENABLED", "false")
    monkeypatch.setenv("RAG_TOP_K", "3")
    monkeypatch.setenv("RAG_MIN_SCORE", "0.45")
    monkeypatch.setenv("TRANSLATION_MODELS", "primary,secondary")
    monkeypatch.setenv("ADMIN_TOKEN", "token")

    config = RelayConfig.from_env()

    assert config.store_backend == "memory"
    assert config.rag_enabled is False
    assert config.top_k == 3
    assert config.min_score == pytest.approx(0.45)
    assert config.model_ids == ["primary", "secondary"]
    assert config.admin_token == "token"


def test_defaults(monkeypatch):
    for name in ["RAG_TOP_K", "RAG_MIN_SCORE", "RAG_ENABLED"]:
        monkeypatch.delenv(name, raising=False)

    config = RelayConfig.from_env()

    assert config.top_k == 5
    assert config.min_score == pytest.approx(0.3)
    assert config.rag_enabled is True
