# src/pomofocus/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import uuid
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ..errors import StoreError
from .task_models import Task, utc_now_iso

logger = logging.getLogger(__name__)

# Columns a caller may change through update_task_fields; id and user_email are not among them.
MUTABLE_COLUMNS = (
    "title",
    "description",
    "estimated_pomodoros",
    "completed_pomodoros",
    "completed",
)


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection

    Every sqlite3 failure is re-raised as StoreError.
    """

    def __init__(self, db_path: str | Path = "pomofocus.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextlib.contextmanager
    def _connect(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open task store: {exc}", {"action": action}) from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.warning("TaskStore %s failed: %s", action, exc)
            raise StoreError(str(exc), {"action": action}) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect("ensure_schema") as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    completed INTEGER NOT NULL DEFAULT 0,
                    user_email TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    estimated_pomodoros INTEGER NOT NULL DEFAULT 1,
                    completed_pomodoros INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("description", "TEXT NOT NULL DEFAULT ''")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("estimated_pomodoros", "INTEGER NOT NULL DEFAULT 1")
            add_col("completed_pomodoros", "INTEGER NOT NULL DEFAULT 0")

            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_owner_created ON tasks(user_email, created_at)"
            )
            conn.commit()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            estimated_pomodoros=int(row["estimated_pomodoros"] or 1),
            completed_pomodoros=int(row["completed_pomodoros"] or 0),
            completed=bool(row["completed"]),
            user_email=str(row["user_email"]),
            created_at=str(row["created_at"]),
            updated_at=str(row["updated_at"]),
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connect("count_tasks") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def insert_task(
        self,
        *,
        title: str,
        description: str,
        estimated_pomodoros: int,
        user_email: str,
        completed: bool = False,
        completed_pomodoros: int = 0,
        now: str | None = None,
    ) -> Task:
        """Insert a row and return it as stored (with the store-assigned id)."""
        task_id = uuid.uuid4().hex
        ts = now or utc_now_iso()

        with self._connect("insert_task") as conn:
            conn.execute(
                """
                INSERT INTO tasks(
                    id, title, description, completed, user_email,
                    created_at, updated_at, estimated_pomodoros, completed_pomodoros
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id,
                    title,
                    description,
                    int(bool(completed)),
                    user_email,
                    ts,
                    ts,
                    int(estimated_pomodoros),
                    int(completed_pomodoros),
                ),
            )
            conn.commit()
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()

        if row is None:
            raise StoreError("Inserted task could not be read back.", {"id": task_id})
        logger.debug("Task inserted id=%s owner=%s", task_id, user_email)
        return self._row_to_task(row)

    def get_task(self, task_id: str) -> Task | None:
        with self._connect("get_task") as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
        return self._row_to_task(row) if row else None

    def update_task_fields(
        self,
        task_id: str,
        fields: dict[str, Any],
        *,
        user_email: str | None = None,
        now: str | None = None,
    ) -> Task | None:
        """
        Merge `fields` into the row and refresh updated_at.

        No version check: the last write wins. When `user_email` is given the
        update only applies to a row owned by that email.
        Returns the updated row, or None when nothing matched.
        """
        unknown = sorted(set(fields) - set(MUTABLE_COLUMNS))
        if unknown:
            raise ValueError(f"Not updatable: {', '.join(unknown)}")

        assignments: list[str] = []
        params: list[Any] = []
        for name in MUTABLE_COLUMNS:
            if name not in fields:
                continue
            value = fields[name]
            if name == "completed":
                value = int(bool(value))
            assignments.append(f"{name} = ?")
            params.append(value)

        assignments.append("updated_at = ?")
        params.append(now or utc_now_iso())

        where = "id = ?"
        params.append(str(task_id))
        if user_email is not None:
            where += " AND user_email = ?"
            params.append(user_email)

        with self._connect("update_task") as conn:
            cur = conn.execute(f"UPDATE tasks SET {', '.join(assignments)} WHERE {where}", params)
            conn.commit()
            if cur.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()

        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
        return self._row_to_task(row) if row else None

    def delete_task(self, task_id: str) -> bool:
        with self._connect("delete_task") as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            conn.commit()
            deleted = cur.rowcount > 0
        logger.debug("Task delete id=%s deleted=%s", task_id, deleted)
        return deleted

    def list_tasks_for_owner(self, user_email: str) -> list[Task]:
        """Owner's tasks, newest first; insertion order breaks created_at ties."""
        with self._connect("list_tasks") as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE user_email = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (user_email,),
            ).fetchall()
        return [self._row_to_task(r) for r in rows]
