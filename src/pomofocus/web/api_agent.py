# src/pomofocus/web/api_agent.py

"""Agent-facing task creation endpoint (CORS-open, optional shared secret)."""

from __future__ import annotations

import hmac
import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from ..core.state import AppState
from ..errors import AuthorizationError, StoreError, ValidationError, error_body
from ..tasks.task_api import create_task, ensure_user
from ..tasks.task_models import Task
from .router import api_router, get_app_state, text_field

logger = logging.getLogger(__name__)

AGENT_TOKEN_HEADER = "X-Agent-Token"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": f"Content-Type, {AGENT_TOKEN_HEADER}",
}
MISSING_FIELDS_MESSAGE = "Missing required fields: title, userEmail, userName"


def _with_cors(body: dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=CORS_HEADERS)


def _check_agent_token(state: AppState, supplied: str | None) -> None:
    """No configured token means the endpoint is open."""
    configured = getattr(state.settings, "agent_token", None)
    if not configured:
        return
    if not hmac.compare_digest(configured.encode("utf-8"), (supplied or "").encode("utf-8")):
        raise AuthorizationError("Unauthorized")


def _create_for_agent(state: AppState, payload: dict[str, Any]) -> Task:
    # The user upsert is best effort; only the task insert decides the outcome.
    try:
        ensure_user(state, payload["userEmail"], payload["userName"])
    except StoreError as exc:
        logger.warning("Agent user upsert failed, creating the task anyway: %s", exc)
    return create_task(
        state,
        title=payload["title"],
        description=payload.get("description") or "",
        estimated_pomodoros=payload.get("estimatedPomodoros", 1),
        owner_email=payload["userEmail"],
    )


@api_router.options("/agent/create-task")
def agent_create_task_options() -> JSONResponse:
    return _with_cors({"ok": True})


@api_router.post("/agent/create-task")
async def agent_create_task(request: Request) -> JSONResponse:
    """Upsert the user, then create one task for them."""
    state = get_app_state(request)

    try:
        _check_agent_token(state, request.headers.get(AGENT_TOKEN_HEADER))
    except AuthorizationError as exc:
        logger.info("Agent request rejected: token mismatch")
        return _with_cors(error_body(exc.message), exc.status_code)

    try:
        payload = await request.json()
    except ValueError:
        return _with_cors(error_body("Invalid request"), 400)
    if not isinstance(payload, dict):
        return _with_cors(error_body("Invalid request"), 400)

    fields = {key: text_field(payload, key) for key in ("title", "userEmail", "userName")}
    if not all(fields.values()):
        return _with_cors(error_body(MISSING_FIELDS_MESSAGE), 400)

    try:
        task = await run_in_threadpool(_create_for_agent, state, {**payload, **fields})
    except ValidationError as exc:
        return _with_cors(error_body(exc.message), 400)
    except StoreError as exc:
        logger.warning("Agent task creation failed: %s", exc)
        return _with_cors(error_body(exc.message), 500)

    logger.info("Agent created task id=%s owner=%s", task.id, task.user_email)
    return _with_cors({"success": True, "task": task.to_dict()}, 201)
