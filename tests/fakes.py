# tests/fakes.py

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import replace

from loose_ends.auth.github import OAuthError
from loose_ends.core.ports import Identity
from loose_ends.tasks.task_models import Task
from loose_ends.tasks.task_store import StoreError
from loose_ends.timeutil import parse_instant

# Fixed "now" shared by the time-dependent tests: midday UTC on Jan 1st.
NOW = "2024-01-01T12:00:00Z"
TODAY = "2024-01-01T08:00:00Z"
YESTERDAY = "2023-12-31T08:00:00Z"


def make_task(
    task_id: str,
    created_at: str,
    *,
    checked_at: str | None = None,
    pinned_at: str | None = None,
    title: str = "",
) -> Task:
    """Build a Task from ISO strings (keeps test tables readable)."""
    created = parse_instant(created_at)
    assert created is not None
    return Task(
        id=task_id,
        title=title or task_id,
        created_at=created,
        checked_at=parse_instant(checked_at),
        pinned_at=parse_instant(pinned_at),
    )


class FakeIdentityProvider:
    """
    Deterministic identity provider for web tests.

    - authorize_url() points at a fake host and echoes the state
    - authenticate("bad") fails, any other code signs in as user 42
    """

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity or Identity(id="42", name="Ada", timezone="Europe/Berlin")
        self.codes: list[str] = []

    def authorize_url(self, state: str) -> str:
        return f"https://id.example.test/authorize?state={state}"

    async def authenticate(self, code: str) -> Identity:
        self.codes.append(code)
        if code == "bad":
            raise OAuthError("bad code")
        return self.identity


class FakeTaskRepo:
    """
    In-memory TaskRepo.

    Set ``fail_with`` to make every call raise (store-level failure).
    """

    def __init__(self, tasks: dict[str, list[Task]] | None = None) -> None:
        self.tasks: dict[str, list[Task]] = tasks or {}
        self.fail_with: StoreError | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _update(self, user_id: str, task_id: str, **changes) -> str | None:
        self._check()
        rows = self.tasks.get(user_id, [])
        for i, t in enumerate(rows):
            if t.id == task_id:
                rows[i] = replace(t, **changes)
                return task_id
        return None

    def list_tasks(self, user_id, timezone=None, *, now=None):
        self._check()
        return list(self.tasks.get(user_id, []))

    def count_done(self, user_id, *, since=None):
        self._check()
        return sum(
            1
            for t in self.tasks.get(user_id, [])
            if t.checked_at is not None and (since is None or t.checked_at >= since)
        )

    def create_task(self, user_id, *, title=None, now=None):
        self._check()
        task_id = str(uuid.uuid4())
        created = now or dt.datetime.now(dt.timezone.utc)
        self.tasks.setdefault(user_id, []).append(Task(id=task_id, title=title or "", created_at=created))
        return task_id

    def delete_task(self, user_id, task_id):
        self._check()
        rows = self.tasks.get(user_id, [])
        for t in rows:
            if t.id == task_id:
                rows.remove(t)
                return task_id
        return None

    def set_task_checked(self, user_id, task_id, checked, *, now=None):
        return self._update(user_id, task_id, checked_at=now if checked else None)

    def set_task_pinned(self, user_id, task_id, *, now=None):
        return self._update(user_id, task_id, pinned_at=now)

    def set_task_title(self, user_id, task_id, title):
        return self._update(user_id, task_id, title=title)

    def delete_account(self, user_id):
        self._check()
        return len(self.tasks.pop(user_id, []))
