# src/loose_ends/tasks/task_models.py

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final

from ..timeutil import to_iso


class CommandName(StrEnum):
    """Wire names of the mutation commands (the ``command`` form field)."""

    TASK_CREATE = "TodoCreate"
    TASK_DELETE = "TodoDelete"
    TASK_SET_CHECKED = "TodoSetChecked"
    TASK_SET_TITLE = "TodoSetTitle"
    TASK_SET_PINNED = "TodoSetPinned"
    DELETE_ACCOUNT = "DeleteAccount"


# Reported when a payload does not decode into any CommandName.
UNKNOWN_COMMAND: Final = "Unknown"


@dataclass(frozen=True, slots=True)
class Task:
    """
    A user's task as last seen in the store.

    ``hidden`` is a view-only flag set by the pending/views layers; it is never
    persisted.
    """

    id: str
    title: str
    created_at: dt.datetime
    checked_at: dt.datetime | None = None
    pinned_at: dt.datetime | None = None
    hidden: bool = False

    @property
    def checked(self) -> bool:
        return self.checked_at is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": to_iso(self.created_at),
            "checkedAt": to_iso(self.checked_at),
            "pinnedAt": to_iso(self.pinned_at),
        }


@dataclass(frozen=True, slots=True)
class CommandData:
    id: str
    command: CommandName

    def to_dict(self) -> dict[str, Any]:
        return {"data": {"id": self.id}, "command": self.command.value}


@dataclass(frozen=True, slots=True)
class CommandError:
    error: str
    command: CommandName | str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "command": str(self.command)}


CommandResult = CommandData | CommandError
