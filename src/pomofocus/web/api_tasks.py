# src/pomofocus/web/api_tasks.py

"""Sign-in and task-management endpoints used by the ordinary UI path."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ..errors import TaskNotFoundError, ValidationError
from ..tasks.task_api import (
    create_task,
    delete_task,
    ensure_user,
    list_tasks,
    toggle_complete,
    update_task,
)
from .router import api_router, ensure_payload_dict, get_app_state, text_field


@api_router.post("/users")
def sign_in_user(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Create the user on first sign-in, or refresh their name."""
    payload = ensure_payload_dict(payload)
    user = ensure_user(get_app_state(request), text_field(payload, "email"), text_field(payload, "name"))
    return {"user": user.to_dict()}


@api_router.get("/tasks")
def get_tasks(request: Request, userEmail: str = "") -> dict[str, Any]:
    if not userEmail.strip():
        raise ValidationError("userEmail is required.", {"fields": ["userEmail"]})
    tasks = list_tasks(get_app_state(request), userEmail)
    return {"tasks": [t.to_dict() for t in tasks]}


@api_router.post("/tasks", status_code=201)
def post_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    payload = ensure_payload_dict(payload)
    task = create_task(
        get_app_state(request),
        title=text_field(payload, "title"),
        description=payload.get("description") or "",
        estimated_pomodoros=payload.get("estimatedPomodoros", 1),
        owner_email=text_field(payload, "userEmail"),
    )
    return {"task": task.to_dict()}


@api_router.patch("/tasks/{task_id}")
def patch_task(task_id: str, payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Merge the given fields (snake_case, as stored) into the task."""
    payload = ensure_payload_dict(payload)
    task = update_task(get_app_state(request), task_id, payload)
    if task is None:
        raise TaskNotFoundError("Task not found.", {"taskId": task_id})
    return {"task": task.to_dict()}


@api_router.post("/tasks/{task_id}/complete")
def complete_task(task_id: str, payload: dict[str, Any], request: Request) -> dict[str, Any]:
    payload = ensure_payload_dict(payload)
    completed = payload.get("completed", True)
    if not isinstance(completed, bool):
        raise ValidationError("completed must be a boolean.", {"fields": ["completed"]})
    task = toggle_complete(get_app_state(request), task_id, completed)
    if task is None:
        raise TaskNotFoundError("Task not found.", {"taskId": task_id})
    return {"task": task.to_dict()}


@api_router.delete("/tasks/{task_id}")
def remove_task(task_id: str, request: Request) -> JSONResponse:
    deleted = delete_task(get_app_state(request), task_id)
    return JSONResponse(content={"success": True, "deleted": deleted})
