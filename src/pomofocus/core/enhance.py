# src/pomofocus/core/enhance.py

"""
Task enhancement.

The model is asked for a fixed JSON shape:
    {"enhancedTitle", "enhancedDescription", "estimatedPomodoros", "reasoning"}
Its reply is untrusted: it is validated field by field and any mismatch raises
MalformedResponseError before anything is written. A valid reply is applied to
the task at once; there is no confirmation step on this path.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import MalformedResponseError, TaskNotFoundError, ValidationError
from ..tasks.task_api import clamp_pomodoros, normalize_email, update_task
from .persona import ENHANCE_SYSTEM_PROMPT, ENHANCE_USER_TEMPLATE

if TYPE_CHECKING:
    from .state import AppState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnhancedTask:
    enhanced_title: str
    enhanced_description: str
    estimated_pomodoros: int
    reasoning: str


def build_enhancement_prompt(title: str, description: str | None = None) -> str:
    description_line = f'Description: "{description}"\n' if description else ""
    return ENHANCE_USER_TEMPLATE.format(title=title, description_line=description_line)


def _extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("{") and raw.endswith("}"):
        return raw
    first = raw.find("{")
    last = raw.rfind("}")
    if first != -1 and last != -1 and last > first:
        return raw[first : last + 1]
    return raw


def _require_str(data: dict[str, Any], key: str, *, allow_empty: bool) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise MalformedResponseError(f"{key} must be a string.", {"field": key})
    value = value.strip()
    if not value and not allow_empty:
        raise MalformedResponseError(f"{key} must not be empty.", {"field": key})
    return value


def _require_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        raise MalformedResponseError(f"{key} must be an integer.", {"field": key})
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    raise MalformedResponseError(f"{key} must be an integer.", {"field": key})


def parse_enhancement(raw: str | None) -> EnhancedTask:
    """Validate the model reply against the fixed enhancement shape."""
    if not raw or not raw.strip():
        raise MalformedResponseError("Empty enhancement reply.")

    try:
        data = json.loads(_extract_json_object(raw))
    except ValueError as exc:
        raise MalformedResponseError("Enhancement reply is not valid JSON.") from exc

    if not isinstance(data, dict):
        raise MalformedResponseError(
            "Enhancement reply must be a JSON object.", {"type": type(data).__name__}
        )

    return EnhancedTask(
        enhanced_title=_require_str(data, "enhancedTitle", allow_empty=False),
        enhanced_description=_require_str(data, "enhancedDescription", allow_empty=True),
        estimated_pomodoros=_require_int(data, "estimatedPomodoros"),
        reasoning=_require_str(data, "reasoning", allow_empty=True),
    )


def request_enhancement(state: AppState, title: str, description: str | None = None) -> EnhancedTask:
    """Ask the model for an enhancement and validate it; nothing is persisted."""
    s = state.settings
    raw = state.llm.complete(
        [{"role": "user", "content": build_enhancement_prompt(title, description)}],
        ENHANCE_SYSTEM_PROMPT,
        model=getattr(s, "enhance_model", None),
        temperature=float(getattr(s, "enhance_temperature", 0.3)),
        max_tokens=int(getattr(s, "llm_max_tokens", 500)),
    )
    try:
        return parse_enhancement(raw)
    except MalformedResponseError:
        logger.warning("Failed to parse enhancement reply (len=%d)", len(raw or ""))
        raise


def enhance_task(
    state: AppState,
    *,
    task_id: str,
    title: str,
    description: str | None,
    owner_email: str,
) -> EnhancedTask:
    """
    Enhance one task and persist title/description/estimate immediately.

    The update is scoped to (task_id, owner_email). The returned estimate is
    the clamped value that was stored.
    """
    missing = [
        name
        for name, value in (("taskId", task_id), ("title", title), ("userEmail", owner_email))
        if not str(value or "").strip()
    ]
    if missing:
        raise ValidationError(
            "Missing required fields: taskId, title, userEmail", {"fields": missing}
        )

    enhanced = request_enhancement(state, str(title).strip(), description)
    estimate = clamp_pomodoros(enhanced.estimated_pomodoros)

    task = update_task(
        state,
        str(task_id),
        {
            "title": enhanced.enhanced_title,
            "description": enhanced.enhanced_description,
            "estimated_pomodoros": estimate,
        },
        owner_email=normalize_email(owner_email),
    )
    if task is None:
        raise TaskNotFoundError("Task not found.", {"taskId": str(task_id)})

    logger.info("Task enhanced id=%s estimate=%d", task.id, estimate)
    return EnhancedTask(
        enhanced_title=enhanced.enhanced_title,
        enhanced_description=enhanced.enhanced_description,
        estimated_pomodoros=estimate,
        reasoning=enhanced.reasoning,
    )
