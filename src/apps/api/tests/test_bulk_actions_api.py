"""API tests for bulk actions, templates and candidates (queue disabled)."""
import time

import pytest
from fastapi.testclient import TestClient

from recruitops_api.dependencies import get_services
from recruitops_api.settings import get_settings


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("BULK_DISABLE_QUEUE", "true")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()
    get_services.cache_clear()

    from recruitops_api.main import app

    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()
    get_services.cache_clear()


def _seed(client, count=3):
    ids = []
    for i in range(count):
        response = client.post(
            "/api/candidates",
            json={"id": f"api-{i}", "full_name": f"Grace{i} Hopper", "company": "Navy"},
        )
        assert response.status_code == 200
        ids.append(response.json()["id"])
    return ids


def _wait_for(client, job_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while True:
        status = client.get(f"/api/bulk-actions/status/{job_id}").json()
        if status["status"] in ("completed", "failed") or time.monotonic() > deadline:
            return status
        time.sleep(0.02)


def test_health_reports_in_process(client):
    assert client.get("/api/health").json() == {"status": "ok", "queue": "in_process"}


def test_execute_tag_job(client):
    ids = _seed(client)
    response = client.post(
        "/api/bulk-actions/execute",
        json={"action_type": "tag", "candidate_ids": ids, "parameters": {"tag": "vip"}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total_count"] == 3
    assert body["status"] == "pending"

    status = _wait_for(client, body["job_id"])
    assert status["status"] == "completed"
    assert status["processed_count"] == status["success_count"] == 3
    assert len(status["recentItems"]) == 3
    assert client.get(f"/api/candidates/{ids[0]}").json()["tags"] == ["vip"]


def test_personalize_emails_falls_back_without_llm(client):
    ids = _seed(client, 2)
    job_id = client.post("/api/bulk-actions/personalize-emails", json={"candidate_ids": ids}).json()["job_id"]

    status = _wait_for(client, job_id)
    assert status["status"] == "completed"
    assert status["failed_count"] == 0
    assert all(item["content"].startswith("Hi Grace") for item in status["recentItems"])


def test_convenience_routes(client):
    ids = _seed(client, 2)
    moved = client.post("/api/bulk-actions/move-to-pipeline", json={"candidate_ids": ids, "stage": "onsite"})
    tagged = client.post("/api/bulk-actions/add-tags", json={"candidate_ids": ids})
    linked = client.post("/api/bulk-actions/linkedin-connect", json={"candidate_ids": ids})

    for response in (moved, tagged, linked):
        assert response.status_code == 200
        assert _wait_for(client, response.json()["job_id"])["status"] == "completed"

    candidate = client.get(f"/api/candidates/{ids[1]}").json()
    assert candidate["stage"] == "onsite"
    assert candidate["tags"] == ["bulk_contacted"]

    jobs = client.get("/api/bulk-actions/jobs").json()["jobs"]
    assert len(jobs) == 3


def test_execute_accepts_numeric_ids_and_reports_missing_candidates(client):
    response = client.post("/api/bulk-actions/execute", json={"action_type": "tag", "candidate_ids": [404]})
    status = _wait_for(client, response.json()["job_id"])
    assert status["status"] == "completed"
    assert status["failed_count"] == 1
    assert status["recentItems"][0]["target_entity_id"] == "404"


@pytest.mark.parametrize(
    "payload,detail",
    [
        ({"action_type": "tag", "candidate_ids": []}, "action_type and candidate_ids are required"),
        ({"candidate_ids": ["a"]}, "action_type and candidate_ids are required"),
        ({"action_type": "tag"}, "action_type and candidate_ids are required"),
        ({"action_type": "teleport", "candidate_ids": ["a"]}, "Unknown action type: teleport"),
    ],
)
def test_execute_rejects_bad_requests(client, payload, detail):
    response = client.post("/api/bulk-actions/execute", json=payload)
    assert response.status_code == 400
    assert response.json() == {"detail": detail}
    assert client.get("/api/bulk-actions/jobs").json()["jobs"] == []


def test_convenience_route_requires_candidates(client):
    response = client.post("/api/bulk-actions/add-tags", json={"candidate_ids": []})
    assert response.status_code == 400


def test_status_payload_keys(client):
    ids = _seed(client, 1)
    job_id = client.post("/api/bulk-actions/add-tags", json={"candidate_ids": ids}).json()["job_id"]

    status = _wait_for(client, job_id)
    assert "recentItems" in status
    assert "recent_items" not in status
    assert status["recentItems"][0]["target_entity_id"] == ids[0]


def test_unknown_job_is_404(client):
    assert client.get("/api/bulk-actions/status/nope").status_code == 404


def test_templates(client):
    created = client.post(
        "/api/bulk-actions/templates",
        json={"name": "Warm intro", "type": "email", "base_template": "Hi {{firstName}}", "variables": ["firstName"]},
    )
    assert created.status_code == 200
    template = created.json()["template"]
    assert template["usage_count"] == 0

    client.post("/api/bulk-actions/templates", json={"name": "Ping", "type": "linkedin", "base_template": "Hey"})
    emails = client.get("/api/bulk-actions/templates", params={"type": "email"}).json()["templates"]
    assert [t["id"] for t in emails] == [template["id"]]
    assert len(client.get("/api/bulk-actions/templates").json()["templates"]) == 2


def test_personalize_with_template(client):
    ids = _seed(client, 1)
    template = client.post(
        "/api/bulk-actions/templates",
        json={"name": "Short", "type": "email", "base_template": "Hello {{firstName}} at {{company}}"},
    ).json()["template"]

    job_id = client.post(
        "/api/bulk-actions/personalize-emails",
        json={"candidate_ids": ids, "template_id": template["id"]},
    ).json()["job_id"]

    status = _wait_for(client, job_id)
    assert status["recentItems"][0]["content"] == "Hello Grace0 at Navy"
    assert client.get("/api/bulk-actions/templates").json()["templates"][0]["usage_count"] == 1


def test_candidates(client):
    _seed(client, 1)
    assert client.post("/api/candidates", json={"id": "api-0", "full_name": "Dup"}).status_code == 409
    assert client.get("/api/candidates/ghost").status_code == 404
