# src/loose_ends/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task engine and the web layer depend on Protocols instead of concrete
implementations. This keeps storage/identity providers swappable and makes
testing easier.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class Identity:
    """Who signed in, as reported by the identity provider."""

    id: str
    name: str
    timezone: str


class TaskRepo(Protocol):
    # Listing / stats
    def list_tasks(
        self,
        user_id: str,
        timezone: str | dt.tzinfo | None = None,
        *,
        now: dt.datetime | None = None,
    ) -> list[Any]: ...
    def count_done(self, user_id: str, *, since: dt.datetime | None = None) -> int: ...

    # Commands (mutations return the affected id, or None when no owned row matched)
    def create_task(self, user_id: str, *, title: str | None = None, now: dt.datetime | None = None) -> str: ...
    def delete_task(self, user_id: str, task_id: str) -> str | None: ...
    def set_task_checked(
        self,
        user_id: str,
        task_id: str,
        checked: bool,
        *,
        now: dt.datetime | None = None,
    ) -> str | None: ...
    def set_task_pinned(self, user_id: str, task_id: str, *, now: dt.datetime | None = None) -> str | None: ...
    def set_task_title(self, user_id: str, task_id: str, title: str) -> str | None: ...
    def delete_account(self, user_id: str) -> int: ...


class IdentityProvider(Protocol):
    """OAuth-style sign-in: redirect out, then trade the returned code for an Identity."""

    def authorize_url(self, state: str) -> str: ...
    async def authenticate(self, code: str) -> Identity: ...
