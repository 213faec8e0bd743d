# src/loose_ends/tasks/task_store.py

from __future__ import annotations

import contextlib
import datetime as dt
import logging
import sqlite3
import uuid
from collections.abc import Iterator
from pathlib import Path

from ..timeutil import now_utc, parse_instant, start_of_day
from .task_models import Task

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Constraint or I/O failure reported by the database."""


def _ts(value: dt.datetime) -> str:
    # Fixed-width UTC text so that string order matches time order in SQL.
    return value.astimezone(dt.timezone.utc).isoformat(timespec="microseconds")


class TaskStore:
    """
    SQLite task store.

    Every mutation is scoped by (id, user_id): a task id owned by someone else
    behaves exactly like a missing one. Mutations return the affected id, or None
    when no owned row matched.

    The schema is migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except StoreError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.warning("TaskStore query failed: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._conn() as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL,
                    checked_at TEXT,
                    pinned_at TEXT
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("title", "TEXT NOT NULL DEFAULT ''")
            add_col("checked_at", "TEXT")
            add_col("pinned_at", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user_created ON tasks(user_id, created_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user_checked ON tasks(user_id, checked_at)")

            conn.commit()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        created_at = parse_instant(row["created_at"])
        return Task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            created_at=created_at if created_at is not None else now_utc(),
            checked_at=parse_instant(row["checked_at"]),
            pinned_at=parse_instant(row["pinned_at"]),
        )

    def _update_owned(self, user_id: str, task_id: str, assignments: str, params: tuple) -> str | None:
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE tasks SET {assignments} WHERE id = ? AND user_id = ?",
                (*params, task_id, user_id),
            )
            conn.commit()
            return task_id if cur.rowcount == 1 else None

    # ---- public API ----

    def count_tasks(self, user_id: str | None = None) -> int:
        with self._conn() as conn:
            if user_id is None:
                (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            else:
                (n,) = conn.execute("SELECT COUNT(*) FROM tasks WHERE user_id = ?", (user_id,)).fetchone()
            return int(n)

    def create_task(self, user_id: str, *, title: str | None = None, now: dt.datetime | None = None) -> str:
        if not user_id:
            raise ValueError("user_id is required")

        task_id = str(uuid.uuid4())
        created = _ts(now or now_utc())
        with self._conn() as conn:
            conn.execute(
                "INSERT INTO tasks(id, user_id, title, created_at) VALUES (?, ?, ?, ?)",
                (task_id, user_id, title or "", created),
            )
            conn.commit()
        logger.debug("Task created id=%s user=%s", task_id, user_id)
        return task_id

    def get_task(self, user_id: str, task_id: str) -> Task | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ? AND user_id = ?", (task_id, user_id)
            ).fetchone()
            return self._row_to_task(row) if row else None

    def delete_task(self, user_id: str, task_id: str) -> str | None:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ? AND user_id = ?", (task_id, user_id))
            conn.commit()
            return task_id if cur.rowcount == 1 else None

    def set_task_checked(
        self, user_id: str, task_id: str, checked: bool, *, now: dt.datetime | None = None
    ) -> str | None:
        checked_at = _ts(now or now_utc()) if checked else None
        return self._update_owned(user_id, task_id, "checked_at = ?", (checked_at,))

    def set_task_pinned(self, user_id: str, task_id: str, *, now: dt.datetime | None = None) -> str | None:
        """Pin, or renew an existing pin, at ``now``."""
        return self._update_owned(user_id, task_id, "pinned_at = ?", (_ts(now or now_utc()),))

    def set_task_title(self, user_id: str, task_id: str, title: str) -> str | None:
        return self._update_owned(user_id, task_id, "title = ?", (title,))

    def delete_account(self, user_id: str) -> int:
        """Remove every task owned by ``user_id``; returns the number of rows deleted."""
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE user_id = ?", (user_id,))
            conn.commit()
            logger.info("Deleted %d tasks for user=%s", cur.rowcount, user_id)
            return int(cur.rowcount)

    def list_tasks(
        self,
        user_id: str,
        timezone: str | dt.tzinfo | None = None,
        *,
        now: dt.datetime | None = None,
    ) -> list[Task]:
        """
        The user's tasks that are still open or were completed today (in ``timezone``),
        oldest first.
        """
        since = _ts(start_of_day(timezone, now=now))
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT id, title, created_at, checked_at, pinned_at
                FROM tasks
                WHERE user_id = ?
                  AND (checked_at IS NULL OR checked_at >= ?)
                ORDER BY created_at ASC
                """,
                (user_id, since),
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def count_done(self, user_id: str, *, since: dt.datetime | None = None) -> int:
        """Completed tasks, optionally only those checked at or after ``since``."""
        with self._conn() as conn:
            if since is None:
                (n,) = conn.execute(
                    "SELECT COUNT(*) FROM tasks WHERE user_id = ? AND checked_at IS NOT NULL",
                    (user_id,),
                ).fetchone()
            else:
                (n,) = conn.execute(
                    "SELECT COUNT(*) FROM tasks WHERE user_id = ? AND checked_at >= ?",
                    (user_id, _ts(since)),
                ).fetchone()
            return int(n)
