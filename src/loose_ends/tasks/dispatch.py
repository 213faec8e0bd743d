# src/loose_ends/tasks/dispatch.py

"""
Server-side command execution.

execute_command() decodes a submitted payload, runs the matching store operation
scoped to the signed-in user and maps the outcome:

- success               -> CommandData(id, command)               200
- payload did not decode -> CommandError(message, "Unknown")       400
- no such (owned) task   -> CommandError("Not Found", command)     404
- store failure          -> CommandError(store message, command)   422
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, assert_never

from ..core.ports import TaskRepo
from ..timeutil import Instant, now_utc, parse_instant
from .commands import (
    Command,
    CommandRejected,
    DeleteAccount,
    TaskCreate,
    TaskDelete,
    TaskSetChecked,
    TaskSetPinned,
    TaskSetTitle,
    decode_command,
)
from .pending import PendingTracker
from .task_models import UNKNOWN_COMMAND, CommandData, CommandError, CommandName, CommandResult
from .task_store import StoreError

logger = logging.getLogger(__name__)

NOT_FOUND = "Not Found"


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    result: CommandResult
    status: HTTPStatus = HTTPStatus.OK
    # DeleteAccount: the caller's session must be dropped.
    ends_session: bool = False

    @property
    def ok(self) -> bool:
        return isinstance(self.result, CommandData)

    def to_dict(self) -> dict[str, Any]:
        return self.result.to_dict()


def _run(command: Command, *, user_id: str, repo: TaskRepo, now: dt.datetime) -> str | None:
    """Apply ``command`` for ``user_id``; returns the affected id, or None when no owned task matched."""
    match command:
        case TaskCreate():
            return repo.create_task(user_id, title=command.title or "", now=now)
        case TaskDelete():
            return repo.delete_task(user_id, command.task_id)
        case TaskSetChecked():
            return repo.set_task_checked(user_id, command.task_id, command.checked, now=now)
        case TaskSetTitle():
            return repo.set_task_title(user_id, command.task_id, command.title)
        case TaskSetPinned():
            return repo.set_task_pinned(user_id, command.task_id, now=now)
        case DeleteAccount():
            repo.delete_account(user_id)
            return user_id
        case _:
            assert_never(command)


def execute_command(
    payload: Mapping[str, Any],
    *,
    user_id: str,
    repo: TaskRepo,
    now: Instant = None,
    tracker: PendingTracker | None = None,
) -> CommandOutcome:
    """
    Decode and run one command for ``user_id``.

    With a ``tracker``, the decoded command stays pending there (so concurrent
    listings can project it) until its outcome is known, success or error.
    """
    try:
        command = decode_command(payload)
    except CommandRejected as exc:
        return CommandOutcome(CommandError(exc.message, UNKNOWN_COMMAND), HTTPStatus.BAD_REQUEST)

    name: CommandName = command.name
    stamp = parse_instant(now) or now_utc()
    key = tracker.track(command) if tracker is not None else None

    try:
        affected = _run(command, user_id=user_id, repo=repo, now=stamp)
    except StoreError as exc:
        logger.exception("Command %s failed user=%s", name, user_id)
        return CommandOutcome(CommandError(str(exc), name), HTTPStatus.UNPROCESSABLE_ENTITY)
    finally:
        if tracker is not None:
            tracker.settle(key)

    if affected is None:
        logger.info("Command %s found no task user=%s", name, user_id)
        return CommandOutcome(CommandError(NOT_FOUND, name), HTTPStatus.NOT_FOUND)

    logger.debug("Command %s ok id=%s user=%s", name, affected, user_id)
    return CommandOutcome(
        CommandData(affected, name),
        ends_session=name is CommandName.DELETE_ACCOUNT,
    )
