"""API tests using FastAPI TestClient."""
import pytest
from fastapi.testclient import TestClient

from masterypath import container
from masterypath.api.auth import create_access_token
from masterypath.main import app


@pytest.fixture
def client(graph_service, engine, resolver):
    app.dependency_overrides[container.get_concept_graph_service] = lambda: graph_service
    app.dependency_overrides[container.get_unlock_engine] = lambda: engine
    app.dependency_overrides[container.get_recommendation_resolver] = lambda: resolver
    yield TestClient(app)
    app.dependency_overrides.clear()
    container.reset()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token('learner-1')}"}


# ------------------------------------------------------------------
# Health / graph
# ------------------------------------------------------------------
def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_list_concepts(client):
    data = client.get("/concepts").json()
    assert data["version"] == 1
    assert data["concepts"][2] == {"id": "C", "title": "C", "prerequisites": ["A", "B"]}


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------
def test_recommendation_requires_token(client):
    assert client.get("/recommendation/C").status_code == 401


def test_bad_token_rejected(client):
    resp = client.get("/recommendation/C", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


# ------------------------------------------------------------------
# Recommendation
# ------------------------------------------------------------------
def test_recommendation_for_caller(client, auth_headers, engine):
    engine.record_attempt("learner-1", "A", 0.9)
    resp = client.get("/recommendation/C", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["goal_concept_id"] == "C"
    assert data["path"] == ["B", "C"]
    assert [s["locked"] for s in data["steps"]] == [False, True]


def test_recommendation_is_per_learner(client, auth_headers, engine):
    engine.record_attempt("someone-else", "A", 0.9)
    data = client.get("/recommendation/C", headers=auth_headers).json()
    assert data["path"] == ["A", "B", "C"]


def test_recommendation_mastered_goal(client, auth_headers, engine):
    engine.record_attempt("learner-1", "A", 0.9)
    assert client.get("/recommendation/A", headers=auth_headers).json()["path"] == []


def test_recommendation_unknown_goal(client, auth_headers):
    resp = client.get("/recommendation/missing", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "concept_not_found"


def test_recommendation_unreachable_goal(client, auth_headers, mastery_repo):
    mastery_repo.apply_observation("learner-1", "A", 0.65, 0.6)
    resp = client.get("/recommendation/C", headers=auth_headers)
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "goal_unreachable"
    assert body["blocked"] == ["A"]


# ------------------------------------------------------------------
# Learner state
# ------------------------------------------------------------------
def test_unlocked_and_frontier(client, auth_headers, engine):
    engine.record_attempt("learner-1", "A", 0.9)
    data = client.get("/learners/me/unlocked", headers=auth_headers).json()
    assert data == {"unlocked": ["A", "B"], "frontier": ["B"]}


def test_progress_states(client, auth_headers, engine):
    engine.record_attempt("learner-1", "A", 0.9)
    rows = {r["concept_id"]: r for r in client.get("/learners/me/progress", headers=auth_headers).json()}
    assert rows["A"]["state"] == "mastered"
    assert rows["A"]["progress"]["attempts"] == 1
    assert rows["B"]["state"] == "unlocked"
    assert rows["C"]["state"] == "locked"
    assert rows["C"]["progress"] is None
