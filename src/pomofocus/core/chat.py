# src/pomofocus/core/chat.py

"""
Chat service.

Stateless request/response: free text plus a short window of prior turns in,
free text out. A reply may be flagged as carrying a task suggestion; that flag
comes from a loose keyword heuristic (reply_suggests_task), kept in one place
so it can be replaced by a structured field later. A suggestion is only ever
displayed, never applied.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import ValidationError
from ..tasks.task_models import utc_now_iso
from .persona import get_chat_system_prompt
from .ports import ChatMessage

if TYPE_CHECKING:
    from .state import AppState

logger = logging.getLogger(__name__)

TASK_KEYWORDS = ("task", "todo", "project", "work")
SUGGESTION_KEYWORDS = ("enhanced", "improved")
DEFAULT_HISTORY_TURNS = 5
FALLBACK_REPLY = "Sorry, I couldn't process that request."

# Fixed placeholder returned whenever the heuristic fires; it is not derived from the reply.
PLACEHOLDER_SUGGESTION: dict[str, Any] = {
    "title": "Enhanced Task Title",
    "description": "Enhanced description with better context",
    "estimatedPomodoros": 2,
}


@dataclass(slots=True)
class ChatReply:
    response: str
    suggested_task: dict[str, Any] | None
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "suggestedTask": self.suggested_task,
            "timestamp": self.timestamp,
        }


def is_task_related(message: str) -> bool:
    text = (message or "").lower()
    return any(kw in text for kw in TASK_KEYWORDS)


def reply_suggests_task(reply: str, *, task_related: bool) -> bool:
    """
    Heuristic: a task-related exchange whose reply talks about an enhanced/improved version.

    Both keywords need a task-related message and matching ignores case, so a
    stray "Improved" in small talk does not surface a suggestion.
    """
    if not task_related:
        return False
    text = (reply or "").lower()
    return any(kw in text for kw in SUGGESTION_KEYWORDS)


def build_chat_system_prompt(message: str) -> str:
    return get_chat_system_prompt(is_task_related(message))


def _turn_role(turn: Any) -> str:
    if isinstance(turn, Mapping):
        raw = turn.get("role") or turn.get("type") or ""
    else:
        raw = getattr(turn, "role", "")
    return "user" if str(raw).lower() == "user" else "assistant"


def _turn_content(turn: Any) -> str:
    if isinstance(turn, Mapping):
        return str(turn.get("content") or "")
    return str(getattr(turn, "content", "") or "")


def history_to_messages(
    history: Iterable[Any] | None, limit: int = DEFAULT_HISTORY_TURNS
) -> list[ChatMessage]:
    """
    Keep the last `limit` turns as OpenAI-style messages.

    Turns may be dicts ({"role"|"type", "content"}) or objects with
    role/content attributes; anything not tagged "user" counts as assistant.
    """
    turns = list(history or [])
    if limit <= 0:
        return []
    return [{"role": _turn_role(t), "content": _turn_content(t)} for t in turns[-limit:]]


def generate_chat_reply(
    state: AppState, message: str, history: Iterable[Any] | None = None
) -> ChatReply:
    """Ask the model for a reply to `message` given prior turns (raises NetworkError on failure)."""
    text = (message or "").strip()
    if not text:
        raise ValidationError("Message is required", {"fields": ["message"]})

    s = state.settings
    limit = int(getattr(s, "chat_history_turns", DEFAULT_HISTORY_TURNS))
    task_related = is_task_related(text)

    messages = [*history_to_messages(history, limit), {"role": "user", "content": text}]
    raw = state.llm.complete(
        messages,
        build_chat_system_prompt(text),
        model=getattr(s, "chat_model", None),
        temperature=float(getattr(s, "chat_temperature", 0.7)),
        max_tokens=int(getattr(s, "llm_max_tokens", 500)),
    )
    response = (raw or "").strip() or FALLBACK_REPLY

    suggested = (
        dict(PLACEHOLDER_SUGGESTION)
        if reply_suggests_task(response, task_related=task_related)
        else None
    )
    logger.debug(
        "Chat reply len=%d task_related=%s suggested=%s",
        len(response),
        task_related,
        bool(suggested),
    )
    return ChatReply(response=response, suggested_task=suggested, timestamp=utc_now_iso())
