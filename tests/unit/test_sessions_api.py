"""
Tests for tutor/api/sessions.py REST endpoints.

Covers: create, document load, turns, messages, mode, exam config, quiz
start/next/answer, topics, progress, reset, delete and unknown ids.
"""

import asyncio

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shared.utils.exceptions import LLMRateLimitError
from tutor.api.sessions import router
from tutor.services.session_store import SessionStore, get_session_store


# ---------------------------------------------------------------------------
# Build a minimal FastAPI app with only the sessions router and an
# in-memory store backed by the scripted transport.
# ---------------------------------------------------------------------------

@pytest.fixture
def store(test_settings, scripted_transport):
    return SessionStore(settings=test_settings, transport=scripted_transport)


@pytest.fixture
def app(store):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_session_store] = lambda: store
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def session_id(client):
    response = client.post("/sessions", json={"document_text": "Osmosis chapter"})
    return response.json()["session_id"]


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------

class TestCreateSession:
    def test_create(self, client, store):
        response = client.post("/sessions", json={
            "document_text": "Osmosis chapter",
            "reference_materials": [{"title": "Past paper", "page_count": 2, "text": "Q1"}],
            "exam_config": {"exam_type": "essay", "learning_objectives": ["Define osmosis"]},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "learn"
        assert data["is_mock"] is False

        session = store.get(data["session_id"])
        assert session.document_text == "Osmosis chapter"
        assert len(session.reference_materials) == 1
        assert session.exam_config.exam_type == "essay"

    @pytest.mark.parametrize("exam_config", [
        {"exam_type": "oral"},
        {"special_instructions": 5},
        {"learning_objectives": "Photosynthesis"},
        {"common_pitfalls": 5},
    ])
    def test_invalid_exam_config(self, client, exam_config):
        response = client.post("/sessions", json={"exam_config": exam_config})
        assert response.status_code == 422

    def test_delete(self, client, session_id):
        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.delete(f"/sessions/{session_id}").status_code == 404

    def test_load_document(self, client, store, session_id):
        response = client.put(f"/sessions/{session_id}/document", json={
            "document_text": "New chapter",
            "material_type": "exam",
            "reference_materials": [{"title": "ignored"}],
        })

        assert response.status_code == 200
        session = store.get(session_id)
        assert session.document_text == "New chapter"
        assert session.reference_materials == ()


class TestUnknownSession:
    @pytest.mark.parametrize("method,path,body", [
        ("post", "/sessions/nope/turns", {"message": "hi"}),
        ("get", "/sessions/nope/messages", None),
        ("put", "/sessions/nope/mode", {"mode": "quiz"}),
        ("post", "/sessions/nope/quiz/start", None),
        ("get", "/sessions/nope/progress", None),
        ("post", "/sessions/nope/reset", None),
    ])
    def test_404(self, client, method, path, body):
        kwargs = {"json": body} if body is not None else {}
        response = getattr(client, method)(path, **kwargs)

        assert response.status_code == 404
        assert "nope" in response.json()["detail"]


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------

class TestTurns:
    def test_post_turn(self, client, scripted_transport, session_id):
        scripted_transport.queue("Osmosis is...")

        response = client.post(f"/sessions/{session_id}/turns", json={"message": "What is osmosis?"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["response"] == "Osmosis is..."
        assert data["usage"] == {"input_tokens": 10, "output_tokens": 20}

        messages = client.get(f"/sessions/{session_id}/messages").json()["messages"]
        assert [m["role"] for m in messages] == ["user", "assistant"]

    def test_empty_message_is_400(self, client, scripted_transport, session_id):
        response = client.post(f"/sessions/{session_id}/turns", json={"message": "   "})

        assert response.status_code == 400
        assert "empty" in response.json()["detail"]
        assert scripted_transport.calls == []

    def test_busy_session_is_409(self, client, store, session_id):
        store.get(session_id)._in_flight = True

        response = client.post(f"/sessions/{session_id}/turns", json={"message": "hi"})

        assert response.status_code == 409

    def test_transport_failure_reported(self, client, scripted_transport, session_id):
        scripted_transport.queue(LLMRateLimitError())

        response = client.post(f"/sessions/{session_id}/turns", json={"message": "hi"})

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert response.json()["error_code"] == "RATE_LIMIT"
        messages = client.get(f"/sessions/{session_id}/messages").json()["messages"]
        assert messages[-1]["role"] == "error"


# ---------------------------------------------------------------------------
# Mode, exam config, topics
# ---------------------------------------------------------------------------

class TestSessionSettings:
    def test_switch_mode(self, client, store, session_id):
        response = client.put(f"/sessions/{session_id}/mode", json={"mode": "review"})

        assert response.status_code == 200
        assert response.json() == {"mode": "review"}
        assert store.get(session_id).mode.value == "review"

    def test_invalid_mode(self, client, session_id):
        assert client.put(f"/sessions/{session_id}/mode", json={"mode": "sleep"}).status_code == 422

    def test_save_exam_config(self, client, store, session_id):
        response = client.put(f"/sessions/{session_id}/exam-config", json={
            "exam_type": "multiple-choice",
            "difficulty_level": "beginner",
            "learning_objectives": ["  Define osmosis  ", ""],
        })

        assert response.status_code == 200
        config = store.get(session_id).exam_config
        assert config.exam_type == "multiple-choice"
        assert config.learning_objectives == ["Define osmosis"]

    def test_record_topic(self, client, session_id):
        client.post(f"/sessions/{session_id}/topics", json={"topic": "osmosis"})
        response = client.post(f"/sessions/{session_id}/topics", json={"topic": "osmosis"})

        assert response.json() == {"topics_studied": ["osmosis"], "concept_mastery": {"osmosis": 2}}

    def test_blank_topic_rejected(self, client, session_id):
        assert client.post(f"/sessions/{session_id}/topics", json={"topic": ""}).status_code == 422


# ---------------------------------------------------------------------------
# Quiz flow and progress
# ---------------------------------------------------------------------------

class TestQuizEndpoints:
    def test_quiz_round_trip(self, client, scripted_transport, session_id):
        scripted_transport.queue("What is osmosis?", "Correct: Yes", "What is diffusion?")
        client.put(f"/sessions/{session_id}/mode", json={"mode": "quiz"})

        start = client.post(f"/sessions/{session_id}/quiz/start").json()
        assert start == {"question": "What is osmosis?", "status": "completed", "is_mock": False, "error_code": None}

        answer = client.post(f"/sessions/{session_id}/quiz/answer", json={"answer": "Water movement"}).json()
        assert answer["is_correct"] is True

        nxt = client.post(f"/sessions/{session_id}/quiz/next").json()
        assert nxt["question"] == "What is diffusion?"

        progress = client.get(f"/sessions/{session_id}/progress").json()
        assert progress["questions_answered"] == 1
        assert progress["correct_answers"] == 1
        assert progress["accuracy"] == 100
        assert progress["grade"]["label"] == "Pass with Distinction"
        assert progress["mode"] == "quiz"
        assert progress["session_duration"] == "0m"

    def test_failed_question(self, client, scripted_transport, session_id):
        scripted_transport.queue(LLMRateLimitError())

        data = client.post(f"/sessions/{session_id}/quiz/start").json()

        assert data["question"] is None
        assert data["status"] == "failed"
        assert data["error_code"] == "RATE_LIMIT"

    def test_empty_answer_is_400(self, client, session_id):
        assert client.post(f"/sessions/{session_id}/quiz/answer", json={"answer": ""}).status_code == 400

    def test_reset(self, client, store, scripted_transport, session_id):
        client.put(f"/sessions/{session_id}/mode", json={"mode": "quiz"})
        client.post(f"/sessions/{session_id}/turns", json={"message": "answer"})

        response = client.post(f"/sessions/{session_id}/reset")

        assert response.json() == {"session_id": session_id, "mode": "learn"}
        progress = client.get(f"/sessions/{session_id}/progress").json()
        assert progress["questions_answered"] == 0
        assert store.get(session_id).document_text == ""


# ---------------------------------------------------------------------------
# Answer debouncing over HTTP
# ---------------------------------------------------------------------------

class TestDebouncedAnswers:
    @pytest.mark.asyncio
    async def test_rapid_submits_grade_once(self, app, store, scripted_transport, session_id):
        scripted_transport.queue("What is osmosis?", "Correct: Yes")
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            await client.post(f"/sessions/{session_id}/quiz/start")

            responses = await asyncio.gather(*[
                client.post(f"/sessions/{session_id}/quiz/answer", json={"answer": answer})
                for answer in ("first", "second", "third")
            ])

        codes = sorted(response.status_code for response in responses)
        assert codes == [200, 409, 409]
        superseded = [r for r in responses if r.status_code == 409]
        assert all("superseded" in r.json()["detail"] for r in superseded)

        # One question request and one grading request.
        assert len(scripted_transport.calls) == 2
        assert store.get(session_id).progress.questions_answered == 1

    @pytest.mark.asyncio
    async def test_mode_switch_discards_pending_answer(self, app, store, scripted_transport, session_id):
        scripted_transport.queue("What is osmosis?")
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            await client.post(f"/sessions/{session_id}/quiz/start")

            pending = asyncio.create_task(
                client.post(f"/sessions/{session_id}/quiz/answer", json={"answer": "Water movement"})
            )
            while not store.get(session_id)._answer_debouncer.pending:
                await asyncio.sleep(0.01)
            await client.put(f"/sessions/{session_id}/mode", json={"mode": "learn"})
            response = await pending

        assert response.status_code == 409
        assert len(scripted_transport.calls) == 1
        assert store.get(session_id).progress.questions_answered == 0
