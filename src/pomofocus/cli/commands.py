# src/pomofocus/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.enhance import enhance_task
from ..core.session import sign_out
from ..core.state import AppState
from ..errors import PomofocusError
from ..llm.offline import OfflineLLMClient
from ..tasks.task_api import (
    create_task,
    delete_task,
    list_tasks,
    toggle_complete,
    update_task,
)
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str]], str]
CommandHandler4 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "desc": "description",
    "estimate": "estimated_pomodoros",
    "pomodoros": "estimated_pomodoros",
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Lifecycle errors are turned into a one-line message.
        """
        if not line.startswith("/"):
            return None

        name, _, rest = line[1:].partition(" ")
        name = name.strip().lower()
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        args = rest.split()

        try:
            if len(inspect.signature(handler).parameters) >= 3:
                return cast(CommandHandler4, handler)(state, args, emit)
            return cast(CommandHandler3, handler)(state, args)
        except PomofocusError as exc:
            logger.info("Command /%s failed: %s", name, exc)
            return f"Error: {exc.message}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _format_task(index: int, task: Task) -> str:
    mark = "x" if task.completed else " "
    minutes = task.estimated_minutes
    line = (
        f"{index}. [{mark}] {task.title}  "
        f"({task.completed_pomodoros}/{task.estimated_pomodoros} pomodoros, {minutes} min)  "
        f"id={task.id[:8]}"
    )
    if task.description:
        line += f"\n     {task.description}"
    return line


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """Find one of the user's tasks by 1-based list position or id prefix."""
    tasks = list_tasks(state, state.user_email or "")
    ref = ref.strip()
    if ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1]
    matches = [t for t in tasks if t.id.startswith(ref.lower())]
    return matches[0] if len(matches) == 1 else None


def _split_pipe_args(args: list[str]) -> list[str]:
    return [part.strip() for part in " ".join(args).split("|")]


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    who = f"{state.identity.name} <{state.identity.email}>" if state.identity else "(not signed in)"
    llm = "offline demo" if isinstance(state.llm, OfflineLLMClient) else getattr(s, "chat_model", "?")
    return (
        "Status:\n"
        f"  User: {who}\n"
        f"  Chat model: {llm}\n"
        f"  Database: {getattr(s, 'db_path', '?')}"
    )


def cmd_whoami(state: AppState, args: list[str]) -> str:
    if not state.identity:
        return "Not signed in."
    return f"{state.identity.name} <{state.identity.email}>"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks        -> active tasks, then completed ones
    """
    if not state.user_email:
        return "Not signed in."
    tasks = list_tasks(state, state.user_email)
    if not tasks:
        return "No tasks yet. Add one with /add <title> or say 'add todo'."

    numbered = list(enumerate(tasks, start=1))
    active = [(i, t) for i, t in numbered if not t.completed]
    done = [(i, t) for i, t in numbered if t.completed]

    lines: list[str] = []
    if active:
        lines.append(f"Today's Tasks ({len(active)}):")
        lines.extend(_format_task(i, t) for i, t in active)
    if done:
        lines.append(f"Completed ({len(done)}):")
        lines.extend(_format_task(i, t) for i, t in done)
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [| description [| pomodoros]]
    """
    if not state.user_email:
        return "Not signed in."
    parts = _split_pipe_args(args)
    title = parts[0] if parts else ""
    if not title:
        return "Usage: /add <title> [| description [| pomodoros]]"
    description = parts[1] if len(parts) > 1 else ""
    estimate = parts[2] if len(parts) > 2 else 1

    task = create_task(
        state,
        title=title,
        description=description,
        estimated_pomodoros=estimate,
        owner_email=state.user_email,
    )
    return f"Added: {task.title} ({task.estimated_pomodoros} pomodoros)."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <n|id> title <text>
    /edit <n|id> description <text>
    /edit <n|id> estimate <n>
    """
    usage = "Usage: /edit <n|id> <title|description|estimate> <value>"
    if len(args) < 2:
        return usage
    field_name = EDITABLE_FIELDS.get(args[1].lower())
    if field_name is None:
        return usage
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."

    value = " ".join(args[2:])
    updated = update_task(state, task.id, {field_name: value})
    if updated is None:
        return "Task no longer exists."
    return f"Updated: {updated.title}"


def _cmd_set_completed(state: AppState, args: list[str], completed: bool) -> str:
    if not args:
        return f"Usage: /{'done' if completed else 'undo'} <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."
    updated = toggle_complete(state, task.id, completed)
    if updated is None:
        return "Task no longer exists."
    return f"{'Completed' if completed else 'Reopened'}: {updated.title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    return _cmd_set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _cmd_set_completed(state, args, False)


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."
    delete_task(state, task.id)
    return f"Deleted: {task.title}"


def cmd_enhance(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /enhance <n|id>   -> rewrite title/description/estimate with the model and save it
    """
    if not args:
        return "Usage: /enhance <n|id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."

    if emit:
        with contextlib.suppress(Exception):
            emit("Enhancing task... (AI is thinking)")

    enhanced = enhance_task(
        state,
        task_id=task.id,
        title=task.title,
        description=task.description,
        owner_email=task.user_email,
    )
    lines = [
        f"Enhanced: {enhanced.enhanced_title} ({enhanced.estimated_pomodoros} pomodoros)",
    ]
    if enhanced.enhanced_description:
        lines.append(enhanced.enhanced_description)
    if enhanced.reasoning:
        lines.append(f"Why: {enhanced.reasoning}")
    return "\n".join(lines)


def cmd_logout(state: AppState, args: list[str]) -> str:
    sign_out(state)
    return "Signed out. Restart to sign in again."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show current user, model and database.")
registry.register("whoami", cmd_whoami, help_text="Show the signed-in user.")
registry.register("tasks", cmd_tasks, help_text="List your tasks.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [| description [| pomodoros]].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n|id> <title|description|estimate> <value>.")
registry.register("done", cmd_done, help_text="Mark a task completed: /done <n|id>.")
registry.register("undo", cmd_undo, help_text="Mark a task not completed: /undo <n|id>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <n|id>.", aliases=["rm"])
registry.register("enhance", cmd_enhance, help_text="Let the assistant improve a task: /enhance <n|id>.")
registry.register("logout", cmd_logout, help_text="Forget the signed-in user.")
