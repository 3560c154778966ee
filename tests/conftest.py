# tests/conftest.py

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from pomofocus.core.session import Identity, IdentityCache
from pomofocus.core.state import AppState
from pomofocus.tasks.task_store import TaskStore
from pomofocus.tasks.user_store import UserStore

from .fakes import CountingUserStore, FakeLLMClient

VALID_ENHANCEMENT = json.dumps(
    {
        "enhancedTitle": "Draft the Q3 report outline",
        "enhancedDescription": "1. List sections\n2. Collect figures",
        "estimatedPomodoros": 3,
        "reasoning": "Splitting the work makes it easier to start.",
    }
)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="pomofocus-test",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        db_path=tmp_path / "pomofocus.sqlite3",
        identity_path=tmp_path / "identity.json",
        # LLM tuning read by the chat/enhance services
        chat_model="chat-model",
        enhance_model="enhance-model",
        chat_temperature=0.7,
        enhance_temperature=0.3,
        llm_max_tokens=500,
        chat_history_turns=5,
        # Agent endpoint open unless a test sets a token
        agent_token=None,
    )


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def state(settings: SimpleNamespace, llm: FakeLLMClient) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: We keep real SQLite stores here (TaskStore/UserStore) because
    their correctness is part of what we want to test.
    """
    return AppState(
        settings=settings,
        llm=llm,
        task_store=TaskStore(settings.db_path),
        user_store=CountingUserStore(UserStore(settings.db_path)),
        identity_cache=IdentityCache(settings.identity_path),
    )


@pytest.fixture()
def signed_in(state: AppState) -> AppState:
    """State with a stored user and a session identity."""
    state.user_store.insert_user("ada@example.com", "Ada")
    state.user_store.inserts = 0
    state.identity = Identity(email="ada@example.com", name="Ada")
    return state
