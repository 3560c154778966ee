# tests/test_web.py

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from pomofocus.errors import NetworkError, StoreError
from pomofocus.tasks.task_api import create_task, get_task
from pomofocus.web.app import create_app

from .conftest import VALID_ENHANCEMENT

AGENT_URL = "/api/agent/create-task"


@pytest.fixture()
def client(state) -> TestClient:
    return TestClient(create_app(state))


def _agent_body(**overrides):
    body = {"title": "Write report", "userEmail": "Ada@Example.com", "userName": "Ada"}
    body.update(overrides)
    return body


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ---- agent endpoint ----


def test_agent_options_preflight(client) -> None:
    resp = client.options(AGENT_URL)
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "X-Agent-Token" in resp.headers["access-control-allow-headers"]


def test_agent_rejects_bad_token_without_writes(client, state) -> None:
    state.settings.agent_token = "s3cret"

    resp = client.post(AGENT_URL, json=_agent_body())
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}
    assert resp.headers["access-control-allow-origin"] == "*"

    resp = client.post(AGENT_URL, json=_agent_body(), headers={"X-Agent-Token": "wrong"})
    assert resp.status_code == 401

    assert state.user_store.count_users() == 0
    assert state.task_store.count_tasks() == 0


def test_agent_creates_user_and_task(client, state) -> None:
    state.settings.agent_token = "s3cret"

    resp = client.post(
        AGENT_URL,
        json=_agent_body(description="Q3 numbers", estimatedPomodoros=0),
        headers={"X-Agent-Token": "s3cret"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    task = body["task"]
    assert task["title"] == "Write report"
    assert task["description"] == "Q3 numbers"
    assert task["estimated_pomodoros"] == 1
    assert task["completed"] is False
    assert task["completed_pomodoros"] == 0
    assert task["user_email"] == "ada@example.com"
    assert resp.headers["access-control-allow-origin"] == "*"

    assert state.user_store.count_users() == 1
    assert state.task_store.count_tasks() == 1


def test_agent_open_when_no_token_configured(client, state) -> None:
    resp = client.post(AGENT_URL, json=_agent_body())
    assert resp.status_code == 201
    assert resp.json()["task"]["estimated_pomodoros"] == 1


def test_agent_updates_name_of_known_user(client, state) -> None:
    state.user_store.insert_user("ada@example.com", "Ada")
    resp = client.post(AGENT_URL, json=_agent_body(userName="Ada Lovelace"))
    assert resp.status_code == 201
    assert state.user_store.renames == [("ada@example.com", "Ada Lovelace")]
    assert state.user_store.count_users() == 1


@pytest.mark.parametrize("missing", ["title", "userEmail", "userName"])
def test_agent_missing_fields(client, state, missing) -> None:
    resp = client.post(AGENT_URL, json=_agent_body(**{missing: "  "}))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: title, userEmail, userName"}
    assert state.task_store.count_tasks() == 0


def test_agent_invalid_body(client) -> None:
    resp = client.post(AGENT_URL, content=b"not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request"}


def test_agent_store_failure_is_500(client, state, monkeypatch) -> None:
    def boom(**kwargs):
        raise StoreError("database is locked")

    monkeypatch.setattr(state.task_store, "insert_task", boom)
    resp = client.post(AGENT_URL, json=_agent_body())
    assert resp.status_code == 500
    assert resp.json() == {"error": "database is locked"}


# ---- chat ----


def test_chat_reply_with_suggestion(client, state) -> None:
    state.llm.next_text = "Here is an improved version of that task."
    resp = client.post(
        "/api/chat",
        json={
            "message": "Can you improve my task?",
            "conversationHistory": [{"type": "user", "content": "hi"}, {"type": "assistant", "content": "hello"}],
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["response"] == "Here is an improved version of that task."
    assert body["suggestedTask"] == {
        "title": "Enhanced Task Title",
        "description": "Enhanced description with better context",
        "estimatedPomodoros": 2,
    }
    assert body["timestamp"].endswith("Z")
    assert len(state.llm.calls[0].messages) == 3


def test_chat_requires_message(client, state) -> None:
    resp = client.post("/api/chat", json={"message": ""})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Message is required"}
    assert state.llm.calls == []


def test_chat_model_failure_is_500(client, state) -> None:
    state.llm.error = NetworkError("LLM network/timeout error. Try again later.")
    resp = client.post("/api/chat", json={"message": "hello"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_chat_rejects_non_object_body(client) -> None:
    resp = client.post("/api/chat", json=["hello"])
    assert resp.status_code == 400


# ---- enhance ----


def test_enhance_updates_task(client, state) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = VALID_ENHANCEMENT

    resp = client.post(
        "/api/enhance-task",
        json={"taskId": task.id, "title": "report", "description": "", "userEmail": "ada@example.com"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["enhancedTask"] == {
        "id": task.id,
        "title": "Draft the Q3 report outline",
        "description": "1. List sections\n2. Collect figures",
        "estimatedPomodoros": 3,
        "reasoning": "Splitting the work makes it easier to start.",
    }
    assert get_task(state, task.id).title == "Draft the Q3 report outline"


def test_enhance_malformed_reply_is_500_and_task_unchanged(client, state) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = "Sorry, I can't do JSON today."

    resp = client.post(
        "/api/enhance-task",
        json={"taskId": task.id, "title": "report", "userEmail": "ada@example.com"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to parse AI enhancement"}
    assert get_task(state, task.id) == task


def test_enhance_missing_fields(client, state) -> None:
    resp = client.post("/api/enhance-task", json={"title": "report"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: taskId, title, userEmail"}
    assert state.llm.calls == []


def test_enhance_unknown_task_is_404(client, state) -> None:
    state.llm.next_text = VALID_ENHANCEMENT
    resp = client.post(
        "/api/enhance-task",
        json={"taskId": "nope", "title": "report", "userEmail": "ada@example.com"},
    )
    assert resp.status_code == 404


def test_enhance_store_failure(client, state, monkeypatch) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = VALID_ENHANCEMENT

    def boom(*args, **kwargs):
        raise StoreError("database is locked")

    monkeypatch.setattr(state.task_store, "update_task_fields", boom)
    resp = client.post(
        "/api/enhance-task",
        json={"taskId": task.id, "title": "report", "userEmail": "ada@example.com"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to update task in database"}


# ---- users / tasks ----


def test_task_crud_round(client, state) -> None:
    resp = client.post("/api/users", json={"email": " Ada@Example.com ", "name": "Ada"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "ada@example.com"

    resp = client.post(
        "/api/tasks",
        json={"title": "Plan sprint", "estimatedPomodoros": "3", "userEmail": "ada@example.com"},
    )
    assert resp.status_code == 201
    task_id = resp.json()["task"]["id"]

    resp = client.get("/api/tasks", params={"userEmail": "ADA@example.com"})
    assert [t["id"] for t in resp.json()["tasks"]] == [task_id]

    resp = client.patch(f"/api/tasks/{task_id}", json={"estimated_pomodoros": 0, "title": "Plan the sprint"})
    assert resp.status_code == 200
    assert resp.json()["task"]["estimated_pomodoros"] == 1
    assert resp.json()["task"]["title"] == "Plan the sprint"

    resp = client.post(f"/api/tasks/{task_id}/complete", json={"completed": True})
    assert resp.json()["task"]["completed"] is True

    resp = client.delete(f"/api/tasks/{task_id}")
    assert resp.json() == {"success": True, "deleted": True}
    assert client.get("/api/tasks", params={"userEmail": "ada@example.com"}).json() == {"tasks": []}


def test_task_endpoints_errors(client) -> None:
    assert client.get("/api/tasks").status_code == 400
    assert client.post("/api/users", json={"email": "ada@example.com", "name": ""}).status_code == 400
    assert client.patch("/api/tasks/nope", json={"title": "X"}).status_code == 404

    resp = client.post("/api/tasks", json={"title": "Plan", "userEmail": "ada@example.com"})
    task_id = resp.json()["task"]["id"]
    resp = client.patch(f"/api/tasks/{task_id}", json={"user_email": "bob@example.com"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "These fields cannot be updated."}
    assert client.post(f"/api/tasks/{task_id}/complete", json={"completed": "yes"}).status_code == 400


def test_patch_with_string_completed_is_rejected(client, state) -> None:
    task = create_task(state, title="Plan", owner_email="ada@example.com")

    resp = client.patch(f"/api/tasks/{task.id}", json={"completed": "false"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "completed must be a boolean."}
    assert get_task(state, task.id).completed is False


def test_agent_user_upsert_failure_still_creates_task(client, state, monkeypatch) -> None:
    def locked(email, name):
        raise StoreError("users table locked")

    monkeypatch.setattr(state.user_store.inner, "insert_user", locked)
    resp = client.post(AGENT_URL, json=_agent_body())

    assert resp.status_code == 201
    assert resp.json()["task"]["user_email"] == "ada@example.com"
    assert state.task_store.count_tasks() == 1
    assert state.user_store.count_users() == 0


def test_error_handler_logs_error_code(client, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="pomofocus.web.app"):
        assert client.get("/api/tasks").status_code == 400
    assert "[VALIDATION_ERROR]" in caplog.text
