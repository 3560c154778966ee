# src/pomofocus/core/session.py

"""
Client-local identity.

The signed-in {email, name} is cached in a small JSON file so the console
front-end can skip the sign-in prompt on the next start. It is a convenience
cache, not a security boundary.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..tasks.task_api import ensure_user

if TYPE_CHECKING:
    from .state import AppState

logger = logging.getLogger(__name__)

IDENTITY_KEY = "pomofocus-user"


@dataclass(frozen=True, slots=True)
class Identity:
    email: str
    name: str


class IdentityCache:
    """JSON file holding {"pomofocus-user": {"email": ..., "name": ...}}."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Identity | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable identity cache %s", self._path)
            return None

        entry = data.get(IDENTITY_KEY) if isinstance(data, dict) else None
        if not isinstance(entry, dict):
            return None
        email = str(entry.get("email") or "").strip()
        name = str(entry.get("name") or "").strip()
        if not email or not name:
            return None
        return Identity(email=email, name=name)

    def save(self, identity: Identity) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {IDENTITY_KEY: {"email": identity.email, "name": identity.name}}
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # Contains an email address; keep the file private on disk.
            os.chmod(self._path, 0o600)

    def clear(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path.unlink()


def sign_in(state: AppState, email: str, name: str) -> Identity:
    """Upsert the user record, then remember the identity for this session."""
    user = ensure_user(state, email, name)
    identity = Identity(email=user.email, name=user.name)
    state.identity = identity
    if state.identity_cache is not None:
        state.identity_cache.save(identity)
    logger.info("Signed in as %s", identity.email)
    return identity


def sign_out(state: AppState) -> None:
    state.identity = None
    if state.identity_cache is not None:
        state.identity_cache.clear()


def restore_identity(state: AppState) -> Identity | None:
    """Read the cached identity (no store round trip)."""
    if state.identity_cache is None:
        return None
    state.identity = state.identity_cache.load()
    return state.identity
