# src/pomofocus/web/api_chat.py

"""Chat and task-enhancement endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ..core.chat import generate_chat_reply
from ..core.enhance import enhance_task
from ..errors import (
    MalformedResponseError,
    NetworkError,
    StoreError,
    TaskNotFoundError,
    error_body,
)
from ..tasks.task_models import utc_now_iso
from .router import api_router, ensure_payload_dict, get_app_state, text_field

logger = logging.getLogger(__name__)


@api_router.post("/chat")
def chat(payload: dict[str, Any], request: Request) -> Any:
    """Reply to a message given the last few conversation turns."""
    payload = ensure_payload_dict(payload)
    message = text_field(payload, "message")
    if not message:
        return JSONResponse(status_code=400, content=error_body("Message is required"))

    history = payload.get("conversationHistory")
    if not isinstance(history, list):
        history = []

    try:
        reply = generate_chat_reply(get_app_state(request), message, history)
    except NetworkError as exc:
        logger.warning("Chat API error: %s", exc)
        return JSONResponse(status_code=500, content=error_body("Internal server error"))
    return reply.to_dict()


@api_router.post("/enhance-task")
def enhance(payload: dict[str, Any], request: Request) -> Any:
    """Enhance one task with the model and store the result right away."""
    payload = ensure_payload_dict(payload)
    task_id = text_field(payload, "taskId")
    title = text_field(payload, "title")
    user_email = text_field(payload, "userEmail")
    if not task_id or not title or not user_email:
        return JSONResponse(
            status_code=400,
            content=error_body("Missing required fields: taskId, title, userEmail"),
        )

    try:
        enhanced = enhance_task(
            get_app_state(request),
            task_id=task_id,
            title=title,
            description=text_field(payload, "description"),
            owner_email=user_email,
        )
    except MalformedResponseError:
        return JSONResponse(status_code=500, content=error_body("Failed to parse AI enhancement"))
    except TaskNotFoundError as exc:
        return JSONResponse(status_code=404, content=error_body(exc.message))
    except StoreError as exc:
        logger.warning("Enhancement update failed: %s", exc)
        return JSONResponse(status_code=500, content=error_body("Failed to update task in database"))
    except NetworkError as exc:
        logger.warning("Task enhancement API error: %s", exc)
        return JSONResponse(status_code=500, content=error_body("Internal server error"))

    return {
        "success": True,
        "enhancedTask": {
            "id": task_id,
            "title": enhanced.enhanced_title,
            "description": enhanced.enhanced_description,
            "estimatedPomodoros": enhanced.estimated_pomodoros,
            "reasoning": enhanced.reasoning,
        },
        "timestamp": utc_now_iso(),
    }
