"""
HTTP API tests using FastAPI's TestClient and an injected pipeline.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from ramanya.agents.generators import MockGenerator
from ramanya.api.main import create_app
from ramanya.core.config import RelayConfig
from ramanya.core.errors import StoreError
from ramanya.core.pipeline import TranslationPipeline
from ramanya.core.store import InMemoryCorrectionStore, SQLiteCorrectionStore
from ramanya.vector.embeddings import DeterministicHashEmbedding, EmbeddingService

ANSWER = json.dumps({"source_language": "Mon", "translation": "How are you doing?", "notes": "informal"})


def make_pipeline(admin_token=None, responses=None, debug=False):
    config = RelayConfig(store_backend="memory", model_ids=["m1", "m2"], admin_token=admin_token, debug=debug)
    return TranslationPipeline(
        config,
        InMemoryCorrectionStore(),
        EmbeddingService(DeterministicHashEmbedding(dimension=64)),
        MockGenerator(responses if responses is not None else {"m1": ANSWER})
    )


@pytest.fixture
def client():
    with TestClient(create_app(make_pipeline())) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["approved_count"] == 0
    assert data["models"] == ["m1", "m2"]


def test_health_reports_generator_status(client):
    data = client.get("/health").json()

    assert data["generator"] == {"generator_type": "MockGenerator", "status": "ready"}


def test_health_detects_missing_corrections_table(tmp_path):
    db_path = tmp_path / "relay.db"
    config = RelayConfig(store_backend="sqlite", db_path=str(db_path), model_ids=["m1"])
    pipeline = TranslationPipeline(
        config,
        SQLiteCorrectionStore(str(db_path)),
        EmbeddingService(DeterministicHashEmbedding(dimension=64)),
        MockGenerator()
    )
    with TestClient(create_app(pipeline)) as client:
        assert client.get("/health").json()["db_health"] is True

        db_path.unlink()
        data = client.get("/health").json()

    assert data["status"] == "unhealthy"
    assert data["db_health"] is False
    assert data["approved_count"] == 0


@pytest.mark.parametrize("debug,expected", [(False, 404), (True, 200)])
def test_docs_follow_configured_debug_flag(debug, expected):
    with TestClient(create_app(make_pipeline(debug=debug))) as client:
        assert client.get("/docs").status_code == expected


def test_translate(client):
    response = client.post("/translate", json={"message": "မၞး မံင်မိပ်မံင်ဟာ"})

    assert response.status_code == 200
    assert response.json() == {"source_language": "Mon", "translation": "How are you doing?", "notes": "informal"}


def test_translate_with_vocabulary(client):
    response = client.post("/translate", json={
        "message": "I am eating rice.",
        "vocabulary": [{"original": "rice", "suggestion": "ပုင်", "context": "food"}]
    })

    assert response.status_code == 200
    instruction = client.app.state.pipeline.generator.calls[-1]["system_instruction"]
    assert '"rice" → "ပုင်" (Context: food)' in instruction


@pytest.mark.parametrize("term", [{"original": "", "suggestion": "ပုင်"}, {"original": "rice", "suggestion": "  "}])
def test_translate_rejects_blank_vocabulary_terms(client, term):
    response = client.post("/translate", json={"message": "I am eating rice.", "vocabulary": [term]})

    assert response.status_code == 400
    assert client.app.state.pipeline.generator.calls == []


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
def test_translate_rejects_missing_message(client, payload):
    response = client.post("/translate", json=payload)

    assert response.status_code == 400


def test_translate_degraded_output(client):
    client.app.state.pipeline.generator.responses = {"m1": "not json"}

    response = client.post("/translate", json={"message": "hello"})

    assert response.status_code == 200
    assert response.json() == {"source_language": "unknown", "translation": "not json"}


def test_translate_all_models_down_returns_503():
    pipeline = make_pipeline(responses={"m1": RuntimeError("down"), "m2": ""})
    with TestClient(create_app(pipeline)) as client:
        response = client.post("/translate", json={"message": "hello"})

    assert response.status_code == 503


def test_suggestion_lifecycle(client):
    created = client.post("/suggestions", json={"original": "Good night", "suggestion": "ဂိတ်ညာ"})
    assert created.status_code == 201
    pending_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    pending = client.get("/suggestions").json()["items"]
    assert [item["id"] for item in pending] == [pending_id]

    approved = client.post(f"/suggestions/{pending_id}/approve")
    assert approved.status_code == 200
    approved_id = approved.json()["id"]
    assert approved.json()["status"] == "approved"

    assert client.get("/suggestions").json()["items"] == []
    approved_items = client.get("/suggestions", params={"status": "approved"}).json()["items"]
    assert [item["id"] for item in approved_items] == [approved_id]
    assert "embedding" not in approved_items[0]


def test_submit_suggestion_validation(client):
    response = client.post("/suggestions", json={"original": "hello", "suggestion": " "})

    assert response.status_code == 400


def test_list_suggestions_rejects_unknown_status(client):
    assert client.get("/suggestions", params={"status": "archived"}).status_code == 400


def test_approve_unknown_returns_404(client):
    assert client.post("/suggestions/missing/approve").status_code == 404


def test_reject_suggestion(client):
    pending_id = client.post("/suggestions", json={"original": "a", "suggestion": "b"}).json()["id"]

    assert client.delete(f"/suggestions/{pending_id}").status_code == 204
    assert client.delete(f"/suggestions/{pending_id}").status_code == 404


def test_store_failures_return_503():
    store = MagicMock()
    store.create.side_effect = StoreError("database is locked")
    store.query_by_status.side_effect = StoreError("database is locked")
    store.promote.side_effect = StoreError("database is locked")
    store.get.side_effect = StoreError("database is locked")
    pipeline = make_pipeline()
    pipeline.suggestions.store = store

    with TestClient(create_app(pipeline)) as client:
        assert client.post("/suggestions", json={"original": "a", "suggestion": "b"}).status_code == 503
        assert client.get("/suggestions").status_code == 503
        assert client.post("/suggestions/abc/approve").status_code == 503
        response = client.delete("/suggestions/abc")

    assert response.status_code == 503
    assert response.json() == {"detail": "Correction store unavailable"}


def test_reindex(client):
    pipeline = client.app.state.pipeline
    pipeline.suggestions.approve(pipeline.suggestions.submit("a", "b"))

    response = client.post("/admin/reindex")

    assert response.status_code == 200
    assert response.json() == {"scanned": 1, "embedded": 1, "skipped": 0, "failed": 0}
    assert client.get("/suggestions", params={"status": "approved"}).json()["items"][0]["has_embedding"] is True


class TestAdminToken:

    @pytest.fixture
    def secured_client(self):
        with TestClient(create_app(make_pipeline(admin_token="s3cret"))) as test_client:
            yield test_client

    def test_admin_endpoints_require_token(self, secured_client):
        pending_id = secured_client.post("/suggestions", json={"original": "a", "suggestion": "b"}).json()["id"]

        assert secured_client.post(f"/suggestions/{pending_id}/approve").status_code == 401
        assert secured_client.post("/admin/reindex",
                                   headers={"Authorization": "Bearer wrong"}).status_code == 401

    def test_admin_endpoints_accept_token(self, secured_client):
        pending_id = secured_client.post("/suggestions", json={"original": "a", "suggestion": "b"}).json()["id"]

        response = secured_client.post(f"/suggestions/{pending_id}/approve",
                                       headers={"Authorization": "Bearer s3cret"})

        assert response.status_code == 200

    def test_public_endpoints_stay_open(self, secured_client):
        assert secured_client.post("/translate", json={"message": "hi"}).status_code == 200
