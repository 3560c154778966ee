# src/pomofocus/tasks/task_api.py

"""
Task/user lifecycle.

Every create/read/update/delete of tasks and users goes through here, whether
it comes from the dialogue flow, the console commands or the HTTP endpoints.

Policies:
- emails are trimmed and lowercased on every path, names are trimmed;
- a new task always starts with completed=False and completed_pomodoros=0;
- estimated_pomodoros is clamped to >= 1 on every write;
- updates carry no version check: the last write wins.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any

from ..errors import ValidationError
from .task_models import Task, User

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"title", "description", "estimated_pomodoros", "completed_pomodoros", "completed"}
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalize_email(email: Any) -> str:
    return str(email or "").strip().lower()


def normalize_name(name: Any) -> str:
    return str(name or "").strip()


def _parse_int(value: Any) -> int | None:
    """Lenient integer parse: ints, finite floats (truncated), or a leading integer in text."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _LEADING_INT.match(str(value if value is not None else ""))
    return int(m.group(1)) if m else None


def clamp_pomodoros(value: Any) -> int:
    """Estimated pomodoros: non-numeric, zero or negative input becomes 1."""
    n = _parse_int(value)
    if n is None or n < 1:
        return 1
    return n


def _require(value: str, field: str) -> str:
    if not value:
        raise ValidationError(f"{field} is required.", {"fields": [field]})
    return value


# ---- users ----


def ensure_user(state: AppState, email: str, name: str) -> User:
    """
    Upsert by email: insert when absent, rename when the name differs,
    otherwise leave the record untouched (no write).
    """
    email_n = _require(normalize_email(email), "email")
    name_n = _require(normalize_name(name), "name")

    existing = state.user_store.get_user(email_n)
    if existing is None:
        user = state.user_store.insert_user(email_n, name_n)
        logger.info("User created email=%s", email_n)
        return user

    if existing.name != name_n:
        state.user_store.update_user_name(email_n, name_n)
        logger.info("User renamed email=%s", email_n)
        return User(email=existing.email, name=name_n, created_at=existing.created_at)

    return existing


# ---- tasks ----


def create_task(
    state: AppState,
    *,
    title: str,
    description: str | None = "",
    estimated_pomodoros: Any = 1,
    owner_email: str,
) -> Task:
    title_n = _require(str(title or "").strip(), "title")
    owner = _require(normalize_email(owner_email), "owner_email")

    task = state.task_store.insert_task(
        title=title_n,
        description=str(description or ""),
        estimated_pomodoros=clamp_pomodoros(estimated_pomodoros),
        user_email=owner,
        completed=False,
        completed_pomodoros=0,
    )
    logger.info("Task created id=%s owner=%s", task.id, owner)
    return task


def get_task(state: AppState, task_id: str) -> Task | None:
    return state.task_store.get_task(str(task_id))


def _clean_update_fields(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = sorted(set(fields) - UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError("These fields cannot be updated.", {"fields": unknown})

    clean: dict[str, Any] = {}
    if "title" in fields:
        clean["title"] = _require(str(fields["title"] or "").strip(), "title")
    if "description" in fields:
        clean["description"] = str(fields["description"] or "")
    if "estimated_pomodoros" in fields:
        clean["estimated_pomodoros"] = clamp_pomodoros(fields["estimated_pomodoros"])
    if "completed_pomodoros" in fields:
        clean["completed_pomodoros"] = max(0, _parse_int(fields["completed_pomodoros"]) or 0)
    if "completed" in fields:
        if not isinstance(fields["completed"], bool):
            raise ValidationError("completed must be a boolean.", {"fields": ["completed"]})
        clean["completed"] = fields["completed"]
    return clean


def update_task(
    state: AppState,
    task_id: str,
    fields: dict[str, Any],
    *,
    owner_email: str | None = None,
) -> Task | None:
    """
    Merge `fields` into the task and refresh updated_at.

    With `owner_email`, only a task owned by that email is touched.
    Returns None when no task matched.
    """
    clean = _clean_update_fields(fields)
    owner = normalize_email(owner_email) if owner_email is not None else None
    task = state.task_store.update_task_fields(str(task_id), clean, user_email=owner)
    if task is None:
        logger.info("Task update matched nothing id=%s", task_id)
    else:
        logger.info("Task updated id=%s fields=%s", task_id, sorted(clean))
    return task


def toggle_complete(state: AppState, task_id: str, completed: bool) -> Task | None:
    """Set the completion flag; completed_pomodoros is left alone."""
    return update_task(state, task_id, {"completed": bool(completed)})


def delete_task(state: AppState, task_id: str) -> bool:
    """Delete by id. Ownership is not checked here, only in the list path."""
    deleted = state.task_store.delete_task(str(task_id))
    logger.info("Task delete id=%s deleted=%s", task_id, deleted)
    return deleted


def list_tasks(state: AppState, owner_email: str) -> list[Task]:
    owner = normalize_email(owner_email)
    if not owner:
        return []
    return state.task_store.list_tasks_for_owner(owner)
