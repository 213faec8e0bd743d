# src/loose_ends/tasks/views.py

"""
Display projection for the two task lists.

Pipeline: snapshot -> pending mutations applied -> sorted -> rows outside the list
marked hidden. Every row is returned (hidden ones included) so a renderer can keep
stable row identity across re-renders; ``visible()`` and the counts skip hidden rows.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from ..timeutil import Instant, max_of, now_utc, parse_instant, time_ago
from .pending import PendingMutation, project
from .relevance import Zone, is_loose_end, is_relevant_today
from .task_models import Task

ON_DECK_ORDER = ("-checked_at", "pinned_at", "-created_at")
LOOSE_ENDS_ORDER = ("-checked_at", "pinned_at", "created_at")

_EPOCH = dt.datetime.min.replace(tzinfo=dt.timezone.utc)

# An open (unchecked) task counts as later than any checked one; an unpinned task
# counts as earlier than any pinned one.
_NULL_IS_LATEST = frozenset({"checked_at"})


def _sort_key(field: str) -> Callable[[Task], tuple[int, dt.datetime]]:
    null_rank = 1 if field in _NULL_IS_LATEST else 0

    def key(task: Task) -> tuple[int, dt.datetime]:
        value = getattr(task, field)
        if value is None:
            return (null_rank, _EPOCH)
        return (1 - null_rank, value)

    return key


def sort_tasks(tasks: Iterable[Task], keys: Sequence[str]) -> list[Task]:
    """
    Stable multi-key sort. ``keys`` are Task field names, "-field" for descending;
    earlier keys take priority. Equal rows keep their input order.
    """
    rows = list(tasks)
    for key in reversed(keys):
        descending = key.startswith("-")
        rows.sort(key=_sort_key(key.lstrip("-")), reverse=descending)
    return rows


def _partition(
    snapshot: Sequence[Task],
    pending: Mapping[str, PendingMutation] | None,
    order: Sequence[str],
    member: Callable[[Task], bool],
    now: dt.datetime,
) -> list[Task]:
    rows = sort_tasks(project(snapshot, pending, now=now), order)
    return [t if t.hidden else replace(t, hidden=not member(t)) for t in rows]


def on_deck_for_today(
    snapshot: Sequence[Task],
    pending: Mapping[str, PendingMutation] | None = None,
    timezone: Zone = None,
    *,
    now: Instant = None,
) -> list[Task]:
    stamp = parse_instant(now) or now_utc()
    return _partition(
        snapshot,
        pending,
        ON_DECK_ORDER,
        lambda t: is_relevant_today(t, timezone, now=stamp),
        stamp,
    )


def loose_ends_for_today(
    snapshot: Sequence[Task],
    pending: Mapping[str, PendingMutation] | None = None,
    timezone: Zone = None,
    *,
    now: Instant = None,
) -> list[Task]:
    stamp = parse_instant(now) or now_utc()
    return _partition(
        snapshot,
        pending,
        LOOSE_ENDS_ORDER,
        lambda t: is_loose_end(t, timezone, now=stamp),
        stamp,
    )


def visible(rows: Iterable[Task]) -> list[Task]:
    return [t for t in rows if not t.hidden]


@dataclass(frozen=True, slots=True)
class TaskView:
    timezone: str | None
    now: dt.datetime
    on_deck: list[Task]
    loose_ends: list[Task]

    @property
    def on_deck_count(self) -> int:
        return len(visible(self.on_deck))

    @property
    def loose_ends_count(self) -> int:
        return len(visible(self.loose_ends))

    def to_dict(self, locale: str = "en") -> dict[str, Any]:
        loose_ends = []
        for t in visible(self.loose_ends):
            row = t.to_dict()
            # Loose ends show how long they have been hanging around.
            since = max_of(t.created_at, t.pinned_at, self.timezone)
            row["timeAgo"] = time_ago(since, locale, self.timezone, now=self.now)
            loose_ends.append(row)

        return {
            "timezone": self.timezone,
            "onDeck": [t.to_dict() for t in visible(self.on_deck)],
            "onDeckCount": self.on_deck_count,
            "looseEnds": loose_ends,
            "looseEndsCount": self.loose_ends_count,
        }


def build_task_view(
    snapshot: Sequence[Task],
    pending: Mapping[str, PendingMutation] | None = None,
    timezone: str | None = None,
    *,
    now: Instant = None,
) -> TaskView:
    stamp = parse_instant(now) or now_utc()
    return TaskView(
        timezone=timezone,
        now=stamp,
        on_deck=on_deck_for_today(snapshot, pending, timezone, now=stamp),
        loose_ends=loose_ends_for_today(snapshot, pending, timezone, now=stamp),
    )
