import json

import pytest
from fastapi.testclient import TestClient

import main
from conftest import TEST_CATALOG, ScriptedStreamingModel, tool_fragment
from core.errors import ModelError
from core.orchestration import GenerationOrchestrator


def sse_frames(response):
    """Decode the data payloads of a Server-Sent Events body."""
    frames = []
    for block in response.text.split("\n\n"):
        if block.startswith("data: "):
            frames.append(json.loads(block[len("data: "):]))
    return frames


@pytest.fixture
def client():
    with TestClient(main.app) as test_client:
        yield test_client


def use_model(model):
    main.orchestrator = GenerationOrchestrator(main.session_store, model)


def start_session(client, catalog=TEST_CATALOG):
    response = client.post("/startSession", json={"protocolVersion": "0.1.0", "catalog": catalog})
    assert response.status_code == 200
    return response.json()["sessionId"]


def generate_payload(session_id):
    return {
        "sessionId": session_id,
        "conversation": [{"role": "user", "parts": [{"type": "text", "text": "Show a greeting"}]}],
    }


def test_start_session_returns_session_id(client):
    session_id = start_session(client)

    assert isinstance(session_id, str) and session_id


def test_start_session_rejects_missing_catalog(client):
    response = client.post("/startSession", json={"protocolVersion": "0.1.0"})

    assert response.status_code == 422
    assert response.json()["error"]["status"] == 422


def test_generate_ui_streams_events_then_result(client):
    use_model(ScriptedStreamingModel(
        fragments=[
            tool_fragment(("addOrUpdateSurface", {"surfaceId": "main", "definition": {"widget": "testWidget"}})),
            tool_fragment(("deleteSurface", {"surfaceId": "old"})),
        ],
        text="Here you go.",
    ))
    session_id = start_session(client)

    response = client.post("/generateUi", json=generate_payload(session_id))

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    frames = sse_frames(response)
    assert frames[0] == {"message": {
        "type": "toolRequest",
        "name": "addOrUpdateSurface",
        "input": {"surfaceId": "main", "definition": {"widget": "testWidget"}},
    }}
    assert frames[1]["message"]["name"] == "deleteSurface"
    assert frames[2] == {"message": {"type": "text", "text": "Here you go."}}
    assert frames[3]["result"]["text"] == "Here you go."
    assert [r["name"] for r in frames[3]["result"]["toolRequests"]] == ["addOrUpdateSurface", "deleteSurface"]


def test_generate_ui_unknown_session_is_not_found(client):
    model = ScriptedStreamingModel()
    use_model(model)

    response = client.post("/generateUi", json=generate_payload("invalid-session-id"))

    assert response.status_code == 404
    assert response.json() == {"error": {"status": 404, "message": "Invalid session ID"}}
    assert model.calls == []


def test_generate_ui_rejects_malformed_request(client):
    response = client.post("/generateUi", json={"conversation": []})

    assert response.status_code == 422


def test_generate_ui_model_failure_ends_with_error_frame(client):
    use_model(ScriptedStreamingModel(
        fragments=[tool_fragment(("deleteSurface", {"surfaceId": "A"}))],
        error=ModelError("upstream reset"),
    ))
    session_id = start_session(client)

    frames = sse_frames(client.post("/generateUi", json=generate_payload(session_id)))

    assert frames[0]["message"]["input"] == {"surfaceId": "A"}
    assert frames[-1] == {"error": {"status": 502, "message": "upstream reset"}}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
