# src/pomofocus/tasks/user_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from ..errors import StoreError
from .task_models import User, utc_now_iso

logger = logging.getLogger(__name__)


class UserStore:
    """
    SQLite user table keyed by email.

    Shares the database file with TaskStore; each method opens its own connection.
    """

    def __init__(self, db_path: str | Path = "pomofocus.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextlib.contextmanager
    def _connect(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open user store: {exc}", {"action": action}) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.warning("UserStore %s failed: %s", action, exc)
            raise StoreError(str(exc), {"action": action}) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect("ensure_schema") as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    email TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.commit()

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            email=str(row["email"]),
            name=str(row["name"] or ""),
            created_at=str(row["created_at"]),
        )

    def get_user(self, email: str) -> User | None:
        with self._connect("get_user") as conn:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return self._row_to_user(row) if row else None

    def insert_user(self, email: str, name: str) -> User:
        user = User(email=email, name=name, created_at=utc_now_iso())
        with self._connect("insert_user") as conn:
            conn.execute(
                "INSERT INTO users(email, name, created_at) VALUES (?, ?, ?)",
                (user.email, user.name, user.created_at),
            )
            conn.commit()
        logger.debug("User inserted email=%s", email)
        return user

    def update_user_name(self, email: str, name: str) -> None:
        with self._connect("update_user_name") as conn:
            conn.execute("UPDATE users SET name = ? WHERE email = ?", (name, email))
            conn.commit()
        logger.debug("User renamed email=%s", email)

    def count_users(self) -> int:
        with self._connect("count_users") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
            return int(n)
