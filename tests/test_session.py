# tests/test_session.py

from __future__ import annotations

import json
import stat

from pomofocus.core.session import (
    IDENTITY_KEY,
    Identity,
    IdentityCache,
    restore_identity,
    sign_in,
    sign_out,
)


def test_sign_in_stores_user_and_caches_identity(state) -> None:
    identity = sign_in(state, " Ada@Example.com ", " Ada ")
    assert identity == Identity(email="ada@example.com", name="Ada")
    assert state.user_email == "ada@example.com"
    assert state.user_store.get_user("ada@example.com").name == "Ada"

    path = state.identity_cache.path
    data = json.loads(path.read_text("utf-8"))
    assert data == {IDENTITY_KEY: {"email": "ada@example.com", "name": "Ada"}}
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_restore_and_sign_out(state) -> None:
    sign_in(state, "ada@example.com", "Ada")
    state.identity = None

    assert restore_identity(state) == Identity(email="ada@example.com", name="Ada")
    sign_out(state)
    assert state.identity is None
    assert not state.identity_cache.path.exists()
    assert restore_identity(state) is None


def test_identity_cache_ignores_bad_files(tmp_path) -> None:
    cache = IdentityCache(tmp_path / "identity.json")
    assert cache.load() is None

    cache.path.write_text("{not json", "utf-8")
    assert cache.load() is None

    cache.path.write_text(json.dumps({IDENTITY_KEY: {"email": "ada@example.com"}}), "utf-8")
    assert cache.load() is None

    cache.path.write_text(json.dumps(["ada@example.com"]), "utf-8")
    assert cache.load() is None

    cache.clear()
    cache.clear()
    assert not cache.path.exists()
