# src/pomofocus/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (LLM/stores/identity cache).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient
from ..core.session import IdentityCache
from ..core.state import AppState
from ..llm.client import OpenAILLMClient, friendly_llm_error_message
from ..llm.offline import OfflineLLMClient
from ..tasks.task_store import TaskStore
from ..tasks.user_store import UserStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.identity_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm_client: LLMClient
    try:
        llm_client = OpenAILLMClient(settings)
    except RuntimeError as exc:
        # Fallback for demos / local runs without external services.
        logger.warning("%s Using the offline demo client.", friendly_llm_error_message(exc))
        llm_client = OfflineLLMClient()

    return AppState(
        settings=settings,
        llm=llm_client,
        task_store=TaskStore(settings.db_path),
        user_store=UserStore(settings.db_path),
        identity_cache=IdentityCache(settings.identity_path),
    )
