import threading
import time

import pytest
from fastapi.testclient import TestClient

from mediawatch.core.config import Settings
from mediawatch.main import app
from mediawatch.services import container as container_module
from mediawatch.services.container import build_container, get_container


@pytest.fixture
def client(tmp_path):
    container = build_container(Settings(model_path=str(tmp_path / "sentiment.joblib")))
    app.dependency_overrides[get_container] = lambda: container
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_classify(client):
    r = client.post("/api/v1/classify", json={"text": "Hebat, sukses terus!"})
    assert r.status_code == 200
    data = r.json()
    assert data["label"] in ("Positive", "Negative", "Neutral")
    assert -1.0 <= data["score"] <= 1.0
    assert isinstance(data["confident"], bool)


def test_ingest_triggers_alert(client):
    r = client.post("/api/v1/alerts/rules", json={"keyword": "leak", "severity": "High"})
    assert r.status_code == 201
    rule_id = r.json()["id"]

    payload = {
        "posts": [
            {"source": "Twitter", "content": "Customer records exposed", "tags": ["leak"]},
            {"source": "Kompas", "content": "Timnas menang telak"},
        ]
    }
    r = client.post("/api/v1/posts", json=payload)
    assert r.status_code == 200
    data = r.json()
    assert len(data["posts"]) == 2
    assert len(data["alerts"]) == 1
    assert data["alerts"][0]["rule"]["keyword"] == "leak"

    r = client.get(f"/api/v1/alerts/rules/{rule_id}")
    assert r.json()["trigger_count"] == 1

    r = client.post("/api/v1/alerts/evaluate")
    assert r.status_code == 200
    assert len(r.json()) == 1


def test_unknown_rule(client):
    assert client.get("/api/v1/alerts/rules/nope").status_code == 404


def test_trends_with_no_data(client):
    r = client.get("/api/v1/trends", params={"hours_ahead": 12})
    assert r.status_code == 200
    data = r.json()
    assert data["confidence"] == 0
    assert data["forecast_hours"] == 12
    assert data["predicted_trends"] == []
    assert data["message"]


def test_stats(client):
    client.post("/api/v1/posts", json={"posts": [
        {"source": "Twitter", "content": "Gagal total"},
        {"source": "Twitter", "content": "Banjir bandang"},
    ]})
    data = client.get("/api/v1/stats").json()
    assert data["total_posts"] == 2
    assert data["sources"] == [{"name": "Twitter", "count": 2}]

    series = client.get("/api/v1/stats/timeseries").json()
    assert sum(point["count"] for point in series) == 2


def test_retrain_without_enough_posts(client):
    r = client.post("/api/v1/sentiment/retrain")
    assert r.status_code == 422


def test_container_is_built_once_under_concurrency(monkeypatch, tmp_path):
    built = []

    def slow_build():
        time.sleep(0.05)
        container = build_container(Settings(model_path=str(tmp_path / "sentiment.joblib")))
        built.append(container)
        return container

    monkeypatch.setattr(container_module, "_container", None)
    monkeypatch.setattr(container_module, "build_container", slow_build)

    seen = []
    threads = [threading.Thread(target=lambda: seen.append(get_container())) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(built) == 1
    assert len(seen) == 8
    assert all(c is built[0] for c in seen)
