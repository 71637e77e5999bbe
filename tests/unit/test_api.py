"""Tests for the orchestrator HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from longform_providers import ModelGateway

from services.orchestrator.app.config import OrchestratorConfig
from services.orchestrator.app.main import create_app
from services.orchestrator.app.orchestrator import DocumentOrchestrator
from tests.utils.providers import ScriptedProvider, outline_then

PROMPT = "history of the printing press"
OUTLINE = "1. Introduction\n2. Early Presses\n3. Movable Type\n4. Spread Across Europe\n5. Conclusion"
SETTINGS = {"target_length": "custom", "target_word_count": 5000, "format": "article"}


@pytest.fixture
def client() -> TestClient:
    gateway = ModelGateway(
        {
            "alpha": ScriptedProvider("alpha", outline_then(OUTLINE, "A paragraph about presses.")),
            "beta": ScriptedProvider("beta", outline_then(OUTLINE, "Another paragraph.")),
        }
    )
    orchestrator = DocumentOrchestrator(gateway, config=OrchestratorConfig(section_delay_seconds=0))
    return TestClient(create_app(orchestrator))


def _create(client: TestClient, **extra) -> dict:
    response = client.post("/projects", json={"prompt": PROMPT, "settings": SETTINGS, **extra})
    assert response.status_code == 201
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_backends(client: TestClient) -> None:
    assert client.get("/backends").json() == {"candidates": ["alpha", "beta"], "eu_hosted": []}


def test_create_then_run(client: TestClient) -> None:
    project = _create(client)
    assert project["status"] == "writing"
    assert project["progress"] == 10
    assert project["title"] == "History Of The Printing Press"
    assert [section["title"] for section in project["sections"]][:2] == ["Introduction", "Early Presses"]

    response = client.post(f"/projects/{project['id']}/run")
    assert response.status_code == 202

    done = client.get(f"/projects/{project['id']}").json()
    assert done["status"] == "completed"
    assert done["progress"] == 100
    assert done["running"] is False
    assert done["word_count"] > 0
    assert done["estimated_pages"] == 1


def test_auto_run_and_listing(client: TestClient) -> None:
    project = _create(client, auto_run=True)

    listed = client.get("/projects").json()
    assert listed[0]["id"] == project["id"]
    assert listed[0]["status"] == "completed"
    assert listed[0]["section_count"] == 5
    assert listed[0]["format"] == "article"


def test_unknown_ids_return_404(client: TestClient) -> None:
    project = _create(client)
    missing = "00000000-0000-0000-0000-000000000000"
    assert client.get(f"/projects/{missing}").status_code == 404
    response = client.post(f"/projects/{project['id']}/sections/{missing}/accept")
    assert response.status_code == 404


def test_pause_and_resume(client: TestClient) -> None:
    project = _create(client)

    paused = client.post(f"/projects/{project['id']}/pause")
    assert paused.status_code == 200
    assert paused.json()["status"] == "paused"

    assert client.post(f"/projects/{project['id']}/resume").status_code == 202
    assert client.get(f"/projects/{project['id']}").json()["status"] == "completed"


def test_section_actions(client: TestClient) -> None:
    project = _create(client)
    pending = project["sections"][0]["id"]

    assert client.post(f"/projects/{project['id']}/sections/{pending}/accept").status_code == 409
    assigned = client.put(
        f"/projects/{project['id']}/sections/{pending}/backend", json={"backend_id": "beta"}
    )
    assert assigned.status_code == 200
    assert assigned.json()["sections"][0]["backend_id"] == "beta"
    unknown = client.put(
        f"/projects/{project['id']}/sections/{pending}/backend", json={"backend_id": "zeta"}
    )
    assert unknown.status_code == 422

    client.post(f"/projects/{project['id']}/run")

    blank = client.post(
        f"/projects/{project['id']}/sections/{pending}/edit", json={"content": "   "}
    )
    assert blank.status_code == 422

    edited = client.post(
        f"/projects/{project['id']}/sections/{pending}/edit", json={"content": "Hand written."}
    )
    assert edited.status_code == 200
    assert edited.json()["sections"][0]["status"] == "reviewing"

    accepted = client.post(f"/projects/{project['id']}/sections/{pending}/accept")
    assert accepted.json()["sections"][0]["status"] == "completed"

    regenerated = client.post(f"/projects/{project['id']}/sections/{pending}/regenerate")
    assert regenerated.status_code == 200
    section = regenerated.json()["sections"][0]
    assert section["status"] == "completed"
    assert section["content"] != "Hand written."


def test_export(client: TestClient) -> None:
    project = _create(client)
    empty = client.get(f"/projects/{project['id']}/export", params={"format": "txt"})
    assert empty.status_code == 422

    client.post(f"/projects/{project['id']}/run")

    text = client.get(f"/projects/{project['id']}/export", params={"format": "txt"})
    assert text.status_code == 200
    assert text.headers["content-type"].startswith("text/plain")
    assert 'filename="history-of-the-printing-press.txt"' in text.headers["content-disposition"]
    assert text.text.startswith("History Of The Printing Press")

    docx = client.get(f"/projects/{project['id']}/export", params={"format": "word"})
    assert docx.status_code == 200
    assert docx.content.startswith(b"PK")

    assert client.get(f"/projects/{project['id']}/export", params={"format": "epub"}).status_code == 422


def test_metrics_endpoint(client: TestClient) -> None:
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert b"longform_http_requests_total" in response.content
