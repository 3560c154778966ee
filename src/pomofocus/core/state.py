# src/pomofocus/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import LLMClient, TaskRepo, UserRepo
from .session import Identity, IdentityCache


@dataclass
class AppState:
    """
    Application state owned by the front-end (console loop or web app).

    It is passed down explicitly; committed task/user changes go through
    tasks.task_api only, never by touching the stores from views.
    """

    # Settings object (real Settings or a test double with the same attributes).
    settings: Any

    llm: LLMClient
    task_store: TaskRepo
    user_store: UserRepo

    identity_cache: IdentityCache | None = None
    identity: Identity | None = None

    @property
    def user_email(self) -> str | None:
        return self.identity.email if self.identity else None
