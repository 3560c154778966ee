# src/pomofocus/tasks/task_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

POMODORO_MINUTES = 25


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a 'Z' suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class User:
    email: str
    name: str
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Task:
    """
    A task owned by exactly one user (matched by email).

    Invariants kept by the write paths:
    - estimated_pomodoros >= 1 (clamped on write, not on read)
    - user_email never changes after creation
    """

    id: str
    title: str
    description: str
    estimated_pomodoros: int
    completed_pomodoros: int
    completed: bool
    user_email: str
    created_at: str
    updated_at: str

    @property
    def estimated_minutes(self) -> int:
        return self.estimated_pomodoros * POMODORO_MINUTES

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
