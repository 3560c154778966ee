# tests/test_enhance.py

from __future__ import annotations

import json

import pytest

from pomofocus.core.enhance import build_enhancement_prompt, enhance_task, parse_enhancement
from pomofocus.errors import MalformedResponseError, TaskNotFoundError, ValidationError
from pomofocus.llm.offline import OfflineLLMClient
from pomofocus.tasks.task_api import create_task, get_task

from .conftest import VALID_ENHANCEMENT


def test_parse_valid_and_fenced_reply() -> None:
    parsed = parse_enhancement(VALID_ENHANCEMENT)
    assert parsed.enhanced_title == "Draft the Q3 report outline"
    assert parsed.estimated_pomodoros == 3

    fenced = f"Sure! Here it is:\n```json\n{VALID_ENHANCEMENT}\n```"
    assert parse_enhancement(fenced) == parsed


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "not json at all",
        "[1, 2]",
        json.dumps({"enhancedTitle": "", "enhancedDescription": "", "estimatedPomodoros": 1, "reasoning": ""}),
        json.dumps({"enhancedTitle": "T", "enhancedDescription": "", "estimatedPomodoros": "3", "reasoning": ""}),
        json.dumps({"enhancedTitle": "T", "enhancedDescription": "", "estimatedPomodoros": True, "reasoning": ""}),
        json.dumps({"enhancedTitle": "T", "estimatedPomodoros": 2, "reasoning": ""}),
    ],
)
def test_parse_rejects_malformed(raw) -> None:
    with pytest.raises(MalformedResponseError):
        parse_enhancement(raw)


def test_prompt_mentions_description_only_when_given() -> None:
    assert 'Original Task: "Write report"' in build_enhancement_prompt("Write report")
    assert "Description:" not in build_enhancement_prompt("Write report", "")
    assert 'Description: "Q3 numbers"' in build_enhancement_prompt("Write report", "Q3 numbers")


def test_enhance_persists_immediately(state) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = VALID_ENHANCEMENT

    result = enhance_task(
        state, task_id=task.id, title=task.title, description="", owner_email="ADA@example.com"
    )
    assert result.estimated_pomodoros == 3

    stored = get_task(state, task.id)
    assert stored.title == "Draft the Q3 report outline"
    assert stored.description == "1. List sections\n2. Collect figures"
    assert stored.estimated_pomodoros == 3
    assert stored.completed is False

    (call,) = state.llm.calls
    assert call.model == "enhance-model"
    assert call.temperature == 0.3
    assert 'Original Task: "report"' in call.messages[0]["content"]


def test_enhance_clamps_estimate(state) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = json.dumps(
        {"enhancedTitle": "Report", "enhancedDescription": "", "estimatedPomodoros": 0, "reasoning": ""}
    )
    result = enhance_task(state, task_id=task.id, title="report", description=None, owner_email="ada@example.com")
    assert result.estimated_pomodoros == 1
    assert get_task(state, task.id).estimated_pomodoros == 1


def test_malformed_reply_leaves_task_untouched(state) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = "I think you should write it."

    with pytest.raises(MalformedResponseError):
        enhance_task(state, task_id=task.id, title="report", description="", owner_email="ada@example.com")
    assert get_task(state, task.id) == task


def test_other_owner_is_not_found(state) -> None:
    task = create_task(state, title="report", owner_email="ada@example.com")
    state.llm.next_text = VALID_ENHANCEMENT

    with pytest.raises(TaskNotFoundError):
        enhance_task(state, task_id=task.id, title="report", description="", owner_email="bob@example.com")
    assert get_task(state, task.id) == task


def test_missing_fields_skip_the_model(state) -> None:
    with pytest.raises(ValidationError) as exc:
        enhance_task(state, task_id="", title="report", description="", owner_email="")
    assert exc.value.message == "Missing required fields: taskId, title, userEmail"
    assert exc.value.error.details["fields"] == ["taskId", "userEmail"]
    assert state.llm.calls == []


def test_offline_client_produces_valid_enhancement(state) -> None:
    task = create_task(state, title="Read chapter 3", owner_email="ada@example.com")
    state.llm = OfflineLLMClient()
    result = enhance_task(state, task_id=task.id, title=task.title, description="", owner_email="ada@example.com")
    assert result.enhanced_title == "Read chapter 3"
    assert result.estimated_pomodoros == 1
