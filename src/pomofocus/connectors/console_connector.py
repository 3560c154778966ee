# src/pomofocus/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.dialogue import DialogueController
from ..core.session import restore_identity, sign_in
from ..core.state import AppState
from ..errors import PomofocusError

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def prompt_sign_in(state: AppState, read: InputFn = input) -> bool:
    """
    Ask for email and name until the user record is stored.
    Returns False when input ends (EOF / Ctrl+C).
    """
    _print_ts("Welcome! Enter your email and name to get started.")
    while True:
        try:
            email = read("Email: ").strip()
            name = read("Name: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return False

        if not email or not name:
            _print_ts("Both email and name are required.")
            continue

        try:
            sign_in(state, email, name)
        except PomofocusError as exc:
            logger.info("Sign-in failed: %s", exc)
            _print_ts(f"Could not sign in: {exc.message}")
            continue
        return True


def run_console_loop(state: AppState, read: InputFn = input) -> None:
    logger.info("Console connector started.")

    if restore_identity(state) is None and not prompt_sign_in(state, read):
        logger.info("Console sign-in aborted.")
        return

    assert state.identity is not None
    app_name = str(getattr(state.settings, "app_name", "pomofocus"))
    _print_ts(f"Signed in as {state.identity.name} <{state.identity.email}>.")
    _print_ts("Type your messages. Use /help for commands. Use /exit to quit.\n")

    dialogue = DialogueController(state)
    for turn in dialogue.log:
        _print_ts(f"<<< {app_name}: {turn.content}")

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g., enhancement)
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = read(">>> You: ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)
            if state.identity is None:
                break
            continue

        emit("AI is thinking...")
        for turn in dialogue.handle(user_input):
            _print_ts(f"<<< {app_name}: {turn.content}")
        print()

    logger.info("Console connector finished.")
