# src/loose_ends/timeutil.py

"""
Time-zone aware helpers used by the task views.

Everything here is pure with respect to an optional ``now`` argument; when it is
omitted the current UTC instant is used. Malformed input never raises: unknown
zones resolve to the system local zone and unparsable instants become ``None``.

Relative-time formatters are cached per locale in ``FORMATTERS``; a formatter is
built on first use for a locale and kept for the life of the process. Phrases and
date formats come from Babel's CLDR data; tags Babel does not know use English.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import re
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel import Locale, UnknownLocaleError
from babel.dates import TIMEDELTA_UNITS, format_date, format_timedelta

logger = logging.getLogger(__name__)

Instant = dt.datetime | str | None

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

_UTC_NAMES = {"utc", "z", "gmt", "etc/utc", "utc0", "utc+0"}


def _local_zone() -> dt.tzinfo:
    return dt.datetime.now().astimezone().tzinfo or dt.timezone.utc


def _zone_or_none(name: str) -> dt.tzinfo | None:
    s = name.strip()
    if s.lower() in _UTC_NAMES:
        return dt.timezone.utc

    m = _OFFSET_RE.match(s)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh, mm = int(hh_s), int(mm_s)
        if hh > 23 or mm > 59:
            return None
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(sign * dt.timedelta(hours=hh, minutes=mm))

    try:
        return ZoneInfo(s)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def is_valid_zone(name: str | None) -> bool:
    """True for UTC aliases, fixed offsets and IANA names known to zoneinfo."""
    if not name or not name.strip():
        return False
    return _zone_or_none(name) is not None


def resolve_zone(timezone: str | dt.tzinfo | None = None) -> dt.tzinfo:
    """
    Resolve a timezone identifier into a tzinfo.

    - None / "" / "local" -> the system local zone
    - "UTC" / "Z" / "GMT" -> UTC
    - "+02:00", "-0500"   -> fixed offset
    - IANA names          -> zoneinfo.ZoneInfo

    Unknown identifiers fall back to the system local zone.
    """
    if isinstance(timezone, dt.tzinfo):
        return timezone
    if timezone is None or not str(timezone).strip() or str(timezone).strip().lower() == "local":
        return _local_zone()

    tz = _zone_or_none(str(timezone))
    if tz is None:
        logger.warning("Unknown timezone %r; falling back to local zone", timezone)
        return _local_zone()
    return tz


def now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def parse_instant(value: Any, tz: dt.tzinfo | None = None) -> dt.datetime | None:
    """
    Parse an instant into an aware datetime.

    Accepts datetimes and ISO-8601 strings (a trailing "Z" is allowed).
    Naive values are interpreted in ``tz`` (UTC when omitted).
    Returns None for None and for anything that cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz or dt.timezone.utc)
    return parsed


def to_iso(instant: dt.datetime | None) -> str | None:
    """Serialize an instant as ISO-8601 in UTC (None stays None)."""
    if instant is None:
        return None
    return instant.astimezone(dt.timezone.utc).isoformat()


def _now(now: Instant) -> dt.datetime:
    return parse_instant(now) or now_utc()


def is_today(instant: Instant, timezone: str | dt.tzinfo | None = None, *, now: Instant = None) -> bool:
    """True iff the calendar date of ``instant`` in ``timezone`` is today's date there."""
    tz = resolve_zone(timezone)
    ts = parse_instant(instant, tz)
    if ts is None:
        return False
    return ts.astimezone(tz).date() == _now(now).astimezone(tz).date()


def start_of_day(timezone: str | dt.tzinfo | None = None, *, now: Instant = None) -> dt.datetime:
    """First instant (00:00:00.000) of the current calendar date in ``timezone``."""
    tz = resolve_zone(timezone)
    local = _now(now).astimezone(tz)
    return dt.datetime(local.year, local.month, local.day, tzinfo=tz)


def max_of(
    instant: Instant, other: Instant, timezone: str | dt.tzinfo | None = None
) -> dt.datetime | None:
    """``instant`` when ``other`` is None, else the later of the two, expressed in ``timezone``."""
    tz = resolve_zone(timezone)
    first = parse_instant(instant, tz)
    second = parse_instant(other, tz)
    if first is None:
        return second.astimezone(tz) if second is not None else None
    if second is None:
        return first.astimezone(tz)
    return max(first, second).astimezone(tz)


# ---- relative time ----

# (amount, unit): divide by amount to move up a unit.
DIVISIONS: tuple[tuple[float, str], ...] = (
    (60, "second"),
    (60, "minute"),
    (24, "hour"),
    (7, "day"),
    (4.34524, "week"),
    (12, "month"),
    (math.inf, "year"),
)

DEFAULT_LOCALE = "en"

_UNIT_SECONDS = dict(TIMEDELTA_UNITS)


def _parse_locale(locale: str | None) -> Locale:
    tag = (locale or DEFAULT_LOCALE).strip().replace("_", "-")
    try:
        return Locale.parse(tag, sep="-")
    except (UnknownLocaleError, ValueError, TypeError):
        logger.debug("Unknown locale %r; using %s", locale, DEFAULT_LOCALE)
        return Locale.parse(DEFAULT_LOCALE)


class RelativeTimeFormatter:
    """Formats (value, unit) pairs in one locale ("3 minutes ago", "vor 2 Tagen", "il y a 1 jour")."""

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale
        self._locale = _parse_locale(locale)

    def format(self, value: int, unit: str) -> str:
        if unit not in _UNIT_SECONDS and unit.endswith("s"):
            unit = unit[:-1]
        if unit not in _UNIT_SECONDS:
            raise ValueError(f"Unsupported unit: {unit!r}")

        # threshold=1 and granularity=unit keep Babel on the unit picked by the caller.
        return format_timedelta(
            dt.timedelta(seconds=value * _UNIT_SECONDS[unit]),
            granularity=unit,
            threshold=1,
            add_direction=True,
            format="long",
            locale=self._locale,
        )

    def format_date(self, day: dt.date) -> str:
        return format_date(day, format="long", locale=self._locale)


class FormatterCache:
    """Per-process formatter cache: populated on first use per locale, never evicted."""

    def __init__(self) -> None:
        self._formatters: dict[str, RelativeTimeFormatter] = {}

    def get(self, locale: str | None = None) -> RelativeTimeFormatter:
        key = locale or DEFAULT_LOCALE
        formatter = self._formatters.get(key)
        if formatter is None:
            formatter = RelativeTimeFormatter(key)
            self._formatters[key] = formatter
        return formatter

    def __contains__(self, locale: str) -> bool:
        return locale in self._formatters

    def __len__(self) -> int:
        return len(self._formatters)


FORMATTERS = FormatterCache()


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def time_ago(
    instant: Instant,
    locale: str = DEFAULT_LOCALE,
    timezone: str | dt.tzinfo | None = None,
    *,
    now: Instant = None,
) -> str:
    """Humanized distance from now in ``locale`` ("3 minutes ago", "in 2 days", "vor 1 Tag")."""
    tz = resolve_zone(timezone)
    ts = parse_instant(instant, tz)
    if ts is None:
        return ""

    formatter = FORMATTERS.get(locale)
    duration = (ts - _now(now)).total_seconds()

    for amount, unit in DIVISIONS:
        if abs(duration) < amount:
            return formatter.format(_round_half_up(duration), unit)
        duration /= amount
    return ""


def today_label(
    timezone: str | dt.tzinfo | None = None, locale: str = DEFAULT_LOCALE, *, now: Instant = None
) -> str:
    """Full date of today in ``timezone`` ("January 1, 2024")."""
    tz = resolve_zone(timezone)
    return FORMATTERS.get(locale).format_date(_now(now).astimezone(tz).date())
