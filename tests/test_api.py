"""Tests for the FastAPI editing API.

WHY: Validates that every endpoint behaves correctly: happy paths, the
mapping of core outcome values to HTTP status codes, and export
responses with the right media type and headers.

HOW: Each test opens a session through POST /sessions with one of the
shared sample transcripts, then drives the endpoint under test with the
FastAPI TestClient. Busy sessions are simulated by setting the stored
session's processing flag directly.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- The session store is cleared before and after each test
- Tests cover: happy paths, 404 not found, 409 conflict, 400 bad
  request, 422 rejected edit, 429 too many sessions
"""

from __future__ import annotations

import importlib
import json

import pytest
from fastapi.testclient import TestClient

from transcript_editor.server.app import app, session_store


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions before each test to ensure isolation."""
    session_store._sessions.clear()
    yield
    session_store._sessions.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def interview_id(client, interview_flat) -> str:
    response = client.post("/sessions", json={"transcript": interview_flat, "title": "Interview"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def hello_id(client, hello_world_flat) -> str:
    response = client.post("/sessions", json={"transcript": hello_world_flat})
    return response.json()["id"]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessions:

    def test_create_returns_state(self, client, interview_flat):
        response = client.post("/sessions", json={"transcript": interview_flat})
        body = response.json()

        assert response.status_code == 201
        assert body["title"] == "Transcript"
        assert body["modified"] is False
        assert body["saved"] is True
        assert body["can_undo"] is False
        assert [p["speaker"] for p in body["paragraphs"]] == ["Alice", "Bob", "Alice"]
        assert body["paragraphs"][2]["startTimecode"] == "00:01:02"

    def test_create_from_blocks(self, client, interview_id):
        blocks = client.get("/sessions/{}".format(interview_id)).json()["paragraphs"]
        response = client.post("/sessions", json={"transcript": blocks})
        assert response.status_code == 201
        assert response.json()["paragraphs"] == blocks

    def test_invalid_transcript_is_400(self, client):
        response = client.post("/sessions", json={"transcript": {"words": "nope"}})
        assert response.status_code == 400

    def test_too_many_sessions_is_429(self, client, hello_world_flat, monkeypatch):
        monkeypatch.setattr(session_store, "max_sessions", 1)
        client.post("/sessions", json={"transcript": hello_world_flat})
        response = client.post("/sessions", json={"transcript": hello_world_flat})
        assert response.status_code == 429

    def test_get_unknown_is_404(self, client):
        assert client.get("/sessions/nope").status_code == 404

    def test_delete(self, client, hello_id):
        assert client.delete("/sessions/{}".format(hello_id)).status_code == 204
        assert client.get("/sessions/{}".format(hello_id)).status_code == 404
        assert client.delete("/sessions/{}".format(hello_id)).status_code == 404

    def test_save_marks_session_saved(self, client, interview_id):
        client.put(
            "/sessions/{}/paragraphs/1/speaker".format(interview_id),
            json={"speaker": "Robert"},
        )
        assert client.get("/sessions/{}".format(interview_id)).json()["saved"] is False

        response = client.post("/sessions/{}/save".format(interview_id))
        assert response.status_code == 200
        assert response.json()["saved"] is True
        assert response.json()["paragraphs"][1]["speaker"] == "Robert"

    def test_save_unknown_is_404(self, client):
        assert client.post("/sessions/nope/save").status_code == 404


# ---------------------------------------------------------------------------
# Structural edits
# ---------------------------------------------------------------------------


class TestEdits:

    def test_split_at_word_boundary(self, client, hello_id):
        response = client.post(
            "/sessions/{}/split".format(hello_id),
            json={"paragraph_index": 0, "offset": 5},
        )
        body = response.json()

        assert response.status_code == 200
        assert [p["text"] for p in body["paragraphs"]] == ["hello", "world"]
        assert body["paragraphs"][1]["speaker"] == "A"
        assert body["selection"] == {"paragraph_index": 1, "offset": 0}
        assert body["modified"] is True
        assert body["can_undo"] is True

    def test_split_mid_word_is_422(self, client, hello_id):
        response = client.post(
            "/sessions/{}/split".format(hello_id),
            json={"paragraph_index": 0, "offset": 3},
        )
        assert response.status_code == 422
        state = client.get("/sessions/{}".format(hello_id)).json()
        assert len(state["paragraphs"]) == 1

    def test_split_with_selection_is_422(self, client, hello_id):
        response = client.post(
            "/sessions/{}/split".format(hello_id),
            json={"paragraph_index": 0, "offset": 0, "focus_offset": 5},
        )
        assert response.status_code == 422

    def test_negative_offset_fails_validation(self, client, hello_id):
        response = client.post(
            "/sessions/{}/split".format(hello_id),
            json={"paragraph_index": 0, "offset": -1},
        )
        assert response.status_code == 422

    def test_merge_at_start(self, client, interview_id):
        response = client.post(
            "/sessions/{}/merge".format(interview_id),
            json={"paragraph_index": 1, "offset": 0},
        )
        paragraphs = response.json()["paragraphs"]
        assert len(paragraphs) == 2
        assert paragraphs[0]["text"] == "How are you doing today? I am fantastic, thank you."
        assert paragraphs[0]["speaker"] == "Alice"

    def test_merge_first_paragraph_is_422(self, client, interview_id):
        response = client.post(
            "/sessions/{}/merge".format(interview_id),
            json={"paragraph_index": 0, "offset": 0},
        )
        assert response.status_code == 422

    def test_set_text_and_commit(self, client, hello_id):
        response = client.put(
            "/sessions/{}/paragraphs/0/text".format(hello_id),
            json={"text": "hello word"},
        )
        assert response.json()["modified"] is True

        response = client.post("/sessions/{}/paragraphs/0/commit".format(hello_id))
        body = response.json()
        assert body["modified"] is False
        assert [w["text"] for w in body["paragraphs"][0]["words"]] == ["hello", "word"]

    def test_set_text_unknown_paragraph_is_422(self, client, hello_id):
        response = client.put(
            "/sessions/{}/paragraphs/7/text".format(hello_id),
            json={"text": "x"},
        )
        assert response.status_code == 422

    def test_insert_marker(self, client, hello_id):
        response = client.post(
            "/sessions/{}/paragraphs/0/insert".format(hello_id),
            json={"offset": 5, "text": " [INAUDIBLE]"},
        )
        assert response.json()["paragraphs"][0]["text"] == "hello [INAUDIBLE] world"

    def test_set_speaker(self, client, interview_id):
        response = client.put(
            "/sessions/{}/paragraphs/1/speaker".format(interview_id),
            json={"speaker": "Robert"},
        )
        body = response.json()
        assert body["paragraphs"][1]["speaker"] == "Robert"
        assert body["modified"] is False
        assert body["saved"] is False

    def test_empty_speaker_fails_validation(self, client, interview_id):
        response = client.put(
            "/sessions/{}/paragraphs/1/speaker".format(interview_id),
            json={"speaker": ""},
        )
        assert response.status_code == 422

    def test_edit_while_processing_is_409(self, client, hello_id):
        session_store.get_session(hello_id).session.processing = True
        response = client.post(
            "/sessions/{}/split".format(hello_id),
            json={"paragraph_index": 0, "offset": 5},
        )
        assert response.status_code == 409

    def test_edit_unknown_session_is_404(self, client):
        response = client.post("/sessions/nope/merge", json={"paragraph_index": 1, "offset": 0})
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Re-alignment and history
# ---------------------------------------------------------------------------


class TestAlignmentAndHistory:

    def test_realign(self, client, interview_id):
        client.put(
            "/sessions/{}/paragraphs/1/text".format(interview_id),
            json={"text": "I am great, thank you."},
        )
        response = client.post("/sessions/{}/realign".format(interview_id))
        body = response.json()

        assert response.status_code == 200
        assert body["modified"] is False
        assert body["processing"] is False
        assert body["paragraphs"][1]["words"][2] == {
            "id": 7, "start": 1.39, "end": 1.8, "text": "great,",
        }

    def test_realign_mismatch_warns(self, client, interview_id):
        client.put(
            "/sessions/{}/paragraphs/1/text".format(interview_id),
            json={"text": "Yes."},
        )
        body = client.post("/sessions/{}/realign".format(interview_id)).json()
        assert [w["code"] for w in body["warnings"]] == ["alignment-best-effort"]

    def test_replace_text(self, client, interview_id):
        text = "How are you doing today? I feel fantastic, thank you. Much later now."
        response = client.post("/sessions/{}/replace".format(interview_id), json={"text": text})
        paragraphs = response.json()["paragraphs"]
        assert paragraphs[1]["text"] == "I feel fantastic, thank you."
        assert paragraphs[1]["words"][1]["start"] == 1.27

    def test_undo_and_redo(self, client, hello_id):
        client.post("/sessions/{}/split".format(hello_id), json={"paragraph_index": 0, "offset": 5})

        body = client.post("/sessions/{}/undo".format(hello_id)).json()
        assert len(body["paragraphs"]) == 1
        assert body["can_redo"] is True

        body = client.post("/sessions/{}/redo".format(hello_id)).json()
        assert len(body["paragraphs"]) == 2
        assert body["can_redo"] is False


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:

    def test_text_export(self, client, interview_id):
        response = client.post(
            "/sessions/{}/export".format(interview_id),
            json={"format": "text", "speakers": True},
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["content-disposition"] == 'attachment; filename="Interview.txt"'
        assert response.text.startswith("ALICE\nHow are you doing today?")

    def test_srt_export_realigns_first(self, client, hello_id):
        client.put("/sessions/{}/paragraphs/0/text".format(hello_id), json={"text": "hello word"})
        response = client.post("/sessions/{}/export".format(hello_id), json={"format": "srt"})

        assert response.status_code == 200
        assert response.headers["x-realigned"] == "true"
        assert "hello word" in response.text
        assert client.get("/sessions/{}".format(hello_id)).json()["modified"] is False

    def test_word_export_uses_session_title(self, client, interview_id):
        response = client.post("/sessions/{}/export".format(interview_id), json={"format": "word"})
        assert response.text.startswith("# Interview\n")
        assert response.headers["x-realigned"] == "false"

    def test_json_slate_export(self, client, interview_id):
        response = client.post(
            "/sessions/{}/export".format(interview_id), json={"format": "json-slate"},
        )
        blocks = json.loads(response.text)
        assert len(blocks) == 3
        assert response.headers["content-disposition"].endswith('.blocks.json"')

    def test_unknown_format_is_400(self, client, interview_id):
        response = client.post("/sessions/{}/export".format(interview_id), json={"format": "docx"})
        assert response.status_code == 400
        assert "docx" in response.json()["detail"]

    def test_unknown_preset_is_400(self, client, interview_id):
        response = client.post(
            "/sessions/{}/export".format(interview_id),
            json={"format": "srt", "preset": "cinema"},
        )
        assert response.status_code == 400

    def test_export_while_processing_is_409(self, client, interview_id):
        session_store.get_session(interview_id).session.processing = True
        response = client.post("/sessions/{}/export".format(interview_id), json={"format": "vtt"})
        assert response.status_code == 409


# ---------------------------------------------------------------------------
# Formats and health
# ---------------------------------------------------------------------------


class TestFormatsAndHealth:

    def test_formats(self, client):
        names = [f["name"] for f in client.get("/formats").json()]
        assert "srt" in names
        assert "json-digitalpaperedit" in names
        assert names == sorted(names)

    def test_health(self, client, hello_id):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["sessions"] == 1

    def test_openapi_docs(self, client):
        schema = client.get("/openapi.json").json()
        assert "/sessions/{session_id}/export" in schema["paths"]


class TestAppModule:

    def test_module_imports_and_registers_routes(self):
        module = importlib.import_module("transcript_editor.server.app")
        paths = {route.path for route in module.app.routes}
        for path in (
            "/sessions",
            "/sessions/{session_id}",
            "/sessions/{session_id}/save",
            "/sessions/{session_id}/split",
            "/sessions/{session_id}/merge",
            "/sessions/{session_id}/paragraphs/{index}/text",
            "/sessions/{session_id}/realign",
            "/sessions/{session_id}/export",
            "/formats",
            "/health",
        ):
            assert path in paths

    def test_edit_routes_document_error_responses(self, client):
        schema = client.get("/openapi.json").json()
        responses = schema["paths"]["/sessions/{session_id}/split"]["post"]["responses"]
        assert {"404", "409", "422"} <= set(responses)
