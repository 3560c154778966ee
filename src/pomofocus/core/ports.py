# src/pomofocus/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/LLM providers swappable and makes testing easier.
"""

from typing import Any, Protocol

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Non-streaming chat completion client (OpenAI-compatible)."""

    def complete(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str: ...


class TaskRepo(Protocol):
    def insert_task(
        self,
        *,
        title: str,
        description: str,
        estimated_pomodoros: int,
        user_email: str,
        completed: bool = False,
        completed_pomodoros: int = 0,
        now: str | None = None,
    ) -> Any: ...

    def get_task(self, task_id: str) -> Any | None: ...

    def update_task_fields(
        self,
        task_id: str,
        fields: dict[str, Any],
        *,
        user_email: str | None = None,
        now: str | None = None,
    ) -> Any | None: ...

    def delete_task(self, task_id: str) -> bool: ...
    def list_tasks_for_owner(self, user_email: str) -> list[Any]: ...


class UserRepo(Protocol):
    def get_user(self, email: str) -> Any | None: ...
    def insert_user(self, email: str, name: str) -> Any: ...
    def update_user_name(self, email: str, name: str) -> None: ...
