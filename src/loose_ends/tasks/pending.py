# src/loose_ends/tasks/pending.py

"""
Optimistic reconciliation.

A client may have several commands in flight (rapid checkbox toggles, a title
being typed). Until the store confirms them, the views are computed from the last
snapshot projected through the pending commands, so a check or delete shows up
immediately.

Pending state is explicit: PendingTracker holds it at the boundary and hands the
core a plain mapping (task id -> latest pending mutation). Projections are
recomputed from scratch on every render, so mutations may settle in any order.
"""

from __future__ import annotations

import datetime as dt
import itertools
import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace

from ..timeutil import Instant, now_utc, parse_instant
from .commands import TargetedCommand, TaskDelete, TaskSetChecked, TaskSetPinned, TaskSetTitle
from .task_models import CommandName, Task

logger = logging.getLogger(__name__)

PendingKey = tuple[str, CommandName]

_TRACKABLE = (TaskDelete, TaskSetChecked, TaskSetPinned, TaskSetTitle)


@dataclass(frozen=True, slots=True)
class PendingMutation:
    """A submitted command that has not settled yet. Higher ``seq`` = issued later."""

    command: TargetedCommand
    seq: int

    @property
    def task_id(self) -> str:
        return self.command.task_id

    @property
    def kind(self) -> CommandName:
        return self.command.name

    @property
    def key(self) -> PendingKey:
        return (self.task_id, self.kind)


def apply_pending(task: Task, mutation: PendingMutation | None, *, now: dt.datetime) -> Task:
    """Predict the task's state once ``mutation`` lands. Idempotent for a fixed ``now``."""
    if mutation is None or mutation.task_id != task.id:
        return task

    command = mutation.command
    if isinstance(command, TaskSetTitle):
        return replace(task, title=command.title)
    if isinstance(command, TaskSetChecked):
        return replace(task, checked_at=now if command.checked else None)
    if isinstance(command, TaskSetPinned):
        return replace(task, pinned_at=now)
    if isinstance(command, TaskDelete):
        return replace(task, hidden=True)
    return task


def latest_by_task(mutations: Iterable[PendingMutation]) -> dict[str, PendingMutation]:
    """Collapse pending mutations to one per task: the most recently issued wins."""
    out: dict[str, PendingMutation] = {}
    for m in mutations:
        current = out.get(m.task_id)
        if current is None or m.seq > current.seq:
            out[m.task_id] = m
    return out


def project(
    snapshot: Sequence[Task],
    pending: Mapping[str, PendingMutation] | None = None,
    *,
    now: Instant = None,
) -> list[Task]:
    """Snapshot with pending mutations applied. Order is preserved; inputs are untouched."""
    if not pending:
        return list(snapshot)
    stamp = parse_instant(now) or now_utc()
    return [apply_pending(t, pending.get(t.id), now=stamp) for t in snapshot]


class PendingTracker:
    """
    In-flight commands keyed by (task id, command kind).

    track() records a command when it is submitted; settle() drops it once its
    outcome (success or error) is observed. Re-submitting the same kind for the
    same task replaces the older entry.
    """

    def __init__(self) -> None:
        self._pending: dict[PendingKey, PendingMutation] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def track(self, command: object) -> PendingKey | None:
        """Returns the key to settle later, or None for commands that are not shown optimistically."""
        if not isinstance(command, _TRACKABLE):
            return None
        with self._lock:
            mutation = PendingMutation(command=command, seq=next(self._seq))
            self._pending[mutation.key] = mutation
        logger.debug("Pending %s task_id=%s seq=%s", mutation.kind, mutation.task_id, mutation.seq)
        return mutation.key

    def settle(self, key: PendingKey | None) -> None:
        if key is None:
            return
        with self._lock:
            self._pending.pop(key, None)

    def pending(self) -> list[PendingMutation]:
        with self._lock:
            return sorted(self._pending.values(), key=lambda m: m.seq)

    def by_task(self) -> dict[str, PendingMutation]:
        return latest_by_task(self.pending())

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
