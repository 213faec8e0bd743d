# src/loose_ends/tasks/relevance.py

"""
Which tasks belong on today's lists.

Visibility is a pure function of time: a task drops off "on deck" at local
midnight without any stored flag or batch job.

- on deck:   created today, OR pinned today while unchecked-or-checked-today
- loose end: not on deck, and unchecked-or-checked-today

A task checked on an earlier day and not pinned today is in neither list.
"""

from __future__ import annotations

import datetime as dt

from ..timeutil import Instant, is_today
from .task_models import Task

Zone = str | dt.tzinfo | None


def is_unchecked_or_checked_today(task: Task, timezone: Zone = None, *, now: Instant = None) -> bool:
    return task.checked_at is None or is_today(task.checked_at, timezone, now=now)


def is_pinned_today(task: Task, timezone: Zone = None, *, now: Instant = None) -> bool:
    return task.pinned_at is not None and is_today(task.pinned_at, timezone, now=now)


def is_relevant_today(task: Task, timezone: Zone = None, *, now: Instant = None) -> bool:
    return is_today(task.created_at, timezone, now=now) or (
        is_pinned_today(task, timezone, now=now)
        and is_unchecked_or_checked_today(task, timezone, now=now)
    )


def is_loose_end(task: Task, timezone: Zone = None, *, now: Instant = None) -> bool:
    return not is_relevant_today(task, timezone, now=now) and is_unchecked_or_checked_today(
        task, timezone, now=now
    )
