# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pomofocus.core.ports import ChatMessage


@dataclass(slots=True)
class LLMCall:
    messages: list[ChatMessage]
    system_prompt: str
    model: str | None
    temperature: float
    max_tokens: int


class FakeLLMClient:
    """
    Deterministic LLM client for unit tests.

    - Captures calls for assertions
    - Returns a predefined text, or raises `error` when set
    """

    def __init__(self, next_text: str = "ok") -> None:
        self.next_text = next_text
        self.error: Exception | None = None
        self.calls: list[LLMCall] = []

    def complete(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        self.calls.append(LLMCall(list(messages), system_prompt, model, temperature, max_tokens))
        if self.error is not None:
            raise self.error
        return self.next_text


@dataclass(slots=True)
class CountingUserStore:
    """
    Wraps a real UserStore and counts writes, so tests can tell
    "no write happened" apart from "the same value was written again".
    """

    inner: Any
    inserts: int = 0
    renames: list[tuple[str, str]] = field(default_factory=list)

    def get_user(self, email: str):
        return self.inner.get_user(email)

    def insert_user(self, email: str, name: str):
        self.inserts += 1
        return self.inner.insert_user(email, name)

    def update_user_name(self, email: str, name: str) -> None:
        self.renames.append((email, name))
        self.inner.update_user_name(email, name)

    def count_users(self) -> int:
        return self.inner.count_users()
