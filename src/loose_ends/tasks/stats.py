# src/loose_ends/tasks/stats.py

"""
Completion stats.

Three independent scope selectors:
- stats:   overall | today        (headline "tasks done" + "focused")
- done:    week | month | year    (tasks done in the window)
- focused: week | month | year    (focused time in the window)

Focus time is not recorded anywhere yet, so every focused figure is the zero
ISO-8601 duration.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from ..core.ports import TaskRepo
from ..timeutil import Instant, now_utc, parse_instant, resolve_zone, start_of_day

StatsScope = Literal["overall", "today"]
PeriodScope = Literal["week", "month", "year"]

NO_FOCUS = "PT0S"


class StatsScopes(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    stats: StatsScope = "overall"
    done: PeriodScope = "week"
    focused: PeriodScope = "week"

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "StatsScopes":
        """Raises pydantic.ValidationError for unknown selector values."""
        return cls.model_validate(dict(params))


def window_start(scope: str, timezone: str | dt.tzinfo | None = None, *, now: Instant = None) -> dt.datetime | None:
    """Start of the window for ``scope`` in ``timezone``; None means unbounded."""
    if scope == "overall":
        return None

    day = start_of_day(timezone, now=now)
    if scope == "today":
        return day
    if scope == "week":
        return day - dt.timedelta(days=day.weekday())
    if scope == "month":
        return day.replace(day=1)
    if scope == "year":
        return day.replace(month=1, day=1)
    raise ValueError(f"Unknown scope: {scope!r}")


def format_duration(iso: str) -> str:
    """Render the ISO-8601 durations produced here ("PT1H5M") as "1h 05m"."""
    hours = minutes = 0
    body = iso.upper().removeprefix("PT")
    number = ""
    for ch in body:
        if ch.isdigit():
            number += ch
            continue
        if ch == "H":
            hours = int(number or 0)
        elif ch == "M":
            minutes = int(number or 0)
        number = ""
    return f"{hours}h {minutes:02d}m"


@dataclass(frozen=True, slots=True)
class Stats:
    scopes: StatsScopes
    done_overall: int
    done_in_period: int
    focused_overall: str = NO_FOCUS
    focused_in_period: str = NO_FOCUS

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": {
                "scope": self.scopes.stats,
                "done": self.done_overall,
                "focused": self.focused_overall,
            },
            "done": {"scope": self.scopes.done, "count": self.done_in_period},
            "focused": {
                "scope": self.scopes.focused,
                "duration": self.focused_in_period,
                "label": format_duration(self.focused_in_period),
            },
        }


def get_stats(
    repo: TaskRepo,
    user_id: str,
    scopes: StatsScopes | None = None,
    timezone: str | None = None,
    *,
    now: Instant = None,
) -> Stats:
    scopes = scopes or StatsScopes()
    stamp = parse_instant(now) or now_utc()
    tz = resolve_zone(timezone)

    return Stats(
        scopes=scopes,
        done_overall=repo.count_done(user_id, since=window_start(scopes.stats, tz, now=stamp)),
        done_in_period=repo.count_done(user_id, since=window_start(scopes.done, tz, now=stamp)),
    )
