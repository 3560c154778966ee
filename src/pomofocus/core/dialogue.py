# src/pomofocus/core/dialogue.py

"""
Guided task creation on top of free-form chat.

The controller is a small state machine:

    IDLE --"add todo"/"add task"--> AWAITING_CONFIRMATION
    AWAITING_CONFIRMATION --yes--> AWAITING_TITLE
    AWAITING_CONFIRMATION --no--> IDLE
    AWAITING_TITLE --title (>= 2 chars)--> AWAITING_DESCRIPTION
    AWAITING_DESCRIPTION --text|skip--> create task --> IDLE

Everything said while IDLE that is not a trigger goes to the chat service.

Key invariants:
- every accepted line is echoed into the log as a user turn before matching,
- every handled line appends at least one assistant turn,
- a creation attempt happens at most once and always ends in IDLE with the
  drafts cleared, whether it succeeded or not.

One controller holds one session's state; sessions never share a controller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

from ..errors import PomofocusError
from ..tasks.task_api import create_task
from ..tasks.task_models import utc_now_iso
from .chat import generate_chat_reply

if TYPE_CHECKING:
    from .state import AppState

logger = logging.getLogger(__name__)

TRIGGER_RE = re.compile(r"\b(add\s*(todo|task))\b", re.IGNORECASE)
AFFIRMATIVE_RE = re.compile(r"^(y|yes|sure|ok|okay)$", re.IGNORECASE)
NEGATIVE_RE = re.compile(r"^(n|no|not now)$", re.IGNORECASE)
SKIP_RE = re.compile(r"^(skip|none|no)$", re.IGNORECASE)

MIN_TITLE_LENGTH = 2

GREETING = (
    "Hi! I'm your AI productivity assistant. I can help enhance tasks or add new ones. "
    "Say 'add todo' to create a task, and I'll ask for the title and description."
)
MSG_CONFIRM = "Great! Do you want to add a new todo now? (yes/no)"
MSG_ASK_TITLE = "Awesome. What is the task title?"
MSG_CANCELLED = 'No problem. Say "add todo" anytime to create a task.'
MSG_REPROMPT_CONFIRM = "Please answer yes or no. Do you want to add a new todo now?"
MSG_TITLE_TOO_SHORT = "Please provide a concise, action-oriented title."
MSG_ASK_DESCRIPTION = 'Got it. Add an optional description (or type "skip").'
MSG_CREATED = "Your todo has been added."
MSG_CREATE_FAILED = "Sorry, I could not create the todo. Please try again."
MSG_NO_EMAIL = "User email not available. Please make sure you are signed in."
MSG_CHAT_FAILED = "Sorry, I encountered an error. Please try again."
MSG_SUGGESTION = (
    "I've enhanced your task! Would you like me to apply these improvements? "
    "Use /enhance on the task to apply an improved version."
)


class DialoguePhase(StrEnum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    AWAITING_TITLE = "awaiting_title"
    AWAITING_DESCRIPTION = "awaiting_description"


@dataclass(slots=True)
class Turn:
    role: Literal["user", "assistant"]
    content: str
    timestamp: str = field(default_factory=utc_now_iso)


class DialogueController:
    """Per-session dialogue state plus the visible conversation log."""

    def __init__(self, state: AppState, *, greet: bool = True) -> None:
        self._state = state
        self.phase = DialoguePhase.IDLE
        self.draft_title = ""
        self.draft_description = ""
        self.log: list[Turn] = []
        if greet:
            self._say(GREETING)

    # ---- helpers ----

    def _say(self, text: str) -> Turn:
        turn = Turn(role="assistant", content=text)
        self.log.append(turn)
        return turn

    def _reset(self) -> None:
        self.phase = DialoguePhase.IDLE
        self.draft_title = ""
        self.draft_description = ""

    # ---- public API ----

    def handle(self, text: str) -> list[Turn]:
        """
        Process one user line and return the assistant turns it produced.

        Blank input is ignored (no echo, no state change).
        """
        line = (text or "").strip()
        if not line:
            return []

        prior = list(self.log)
        self.log.append(Turn(role="user", content=line))
        start = len(self.log)

        phase = self.phase
        if phase is DialoguePhase.IDLE:
            if TRIGGER_RE.search(line):
                self.phase = DialoguePhase.AWAITING_CONFIRMATION
                self._say(MSG_CONFIRM)
            else:
                self._chat(line, prior)
        elif phase is DialoguePhase.AWAITING_CONFIRMATION:
            self._on_confirmation(line)
        elif phase is DialoguePhase.AWAITING_TITLE:
            self._on_title(line)
        else:
            self._on_description(line)

        logger.debug("Dialogue %s -> %s", phase.value, self.phase.value)
        return self.log[start:]

    # ---- phase handlers ----

    def _on_confirmation(self, line: str) -> None:
        if AFFIRMATIVE_RE.match(line):
            self.phase = DialoguePhase.AWAITING_TITLE
            self._say(MSG_ASK_TITLE)
        elif NEGATIVE_RE.match(line):
            self._reset()
            self._say(MSG_CANCELLED)
        else:
            self._say(MSG_REPROMPT_CONFIRM)

    def _on_title(self, line: str) -> None:
        if len(line) < MIN_TITLE_LENGTH:
            self._say(MSG_TITLE_TOO_SHORT)
            return
        self.draft_title = line
        self.phase = DialoguePhase.AWAITING_DESCRIPTION
        self._say(MSG_ASK_DESCRIPTION)

    def _on_description(self, line: str) -> None:
        self.draft_description = "" if SKIP_RE.match(line) else line

        owner = self._state.user_email
        if not owner:
            self._say(MSG_NO_EMAIL)
            self._reset()
            return

        try:
            task = create_task(
                self._state,
                title=self.draft_title,
                description=self.draft_description,
                estimated_pomodoros=1,
                owner_email=owner,
            )
        except PomofocusError as exc:
            logger.warning("Dialogue task creation failed: %s", exc)
            self._say(MSG_CREATE_FAILED)
        else:
            logger.info("Dialogue created task id=%s", task.id)
            self._say(MSG_CREATED)
        finally:
            self._reset()

    def _chat(self, line: str, prior: list[Turn]) -> None:
        try:
            reply = generate_chat_reply(self._state, line, prior)
        except PomofocusError as exc:
            logger.warning("Chat reply failed: %s", exc)
            self._say(MSG_CHAT_FAILED)
            return

        self._say(reply.response)
        if reply.suggested_task:
            self._say(MSG_SUGGESTION)
