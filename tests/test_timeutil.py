# tests/test_timeutil.py

from __future__ import annotations

import datetime as dt

from loose_ends.timeutil import (
    FormatterCache,
    is_today,
    is_valid_zone,
    max_of,
    parse_instant,
    resolve_zone,
    start_of_day,
    time_ago,
    today_label,
)

from .fakes import NOW


def test_parse_instant_accepts_z_and_naive_as_utc() -> None:
    a = parse_instant("2024-01-01T08:00:00Z")
    b = parse_instant("2024-01-01T08:00:00")
    assert a == b
    assert a is not None and a.utcoffset() == dt.timedelta(0)


def test_parse_instant_malformed_is_none() -> None:
    assert parse_instant("not a date") is None
    assert parse_instant("") is None
    assert parse_instant(None) is None
    assert parse_instant(12345) is None


def test_is_today_same_and_previous_day_utc() -> None:
    assert is_today("2024-01-01T00:00:00Z", "UTC", now=NOW)
    assert is_today("2024-01-01T23:59:59Z", "UTC", now=NOW)
    assert not is_today("2023-12-31T23:59:59Z", "UTC", now=NOW)


def test_is_today_uses_the_given_zone() -> None:
    instant = "2024-01-01T23:30:00Z"  # Jan 2, 08:30 in Tokyo
    now = "2024-01-02T01:00:00Z"  # Jan 2, 10:00 in Tokyo
    assert is_today(instant, "Asia/Tokyo", now=now)
    assert not is_today(instant, "UTC", now=now)


def test_is_today_malformed_instant_is_false() -> None:
    assert not is_today("garbage", "UTC", now=NOW)
    assert not is_today(None, "UTC", now=NOW)


def test_start_of_day_in_zone() -> None:
    start = start_of_day("America/New_York", now=NOW)
    assert start.isoformat() == "2024-01-01T00:00:00-05:00"
    assert start.astimezone(dt.timezone.utc).hour == 5


def test_start_of_day_rolls_with_the_zone_date() -> None:
    # 20:00 UTC on Dec 31 is already Jan 1 in Tokyo.
    start = start_of_day("Asia/Tokyo", now="2023-12-31T20:00:00Z")
    assert start.date() == dt.date(2024, 1, 1)


def test_unknown_zone_falls_back_without_raising() -> None:
    assert isinstance(resolve_zone("Not/AZone"), dt.tzinfo)
    assert is_today(NOW, "Not/AZone", now=NOW)


def test_is_valid_zone() -> None:
    assert is_valid_zone("Europe/Berlin")
    assert is_valid_zone("UTC")
    assert is_valid_zone("+02:00")
    assert not is_valid_zone("Not/AZone")
    assert not is_valid_zone("")
    assert not is_valid_zone(None)


def test_max_of() -> None:
    created = "2024-01-01T08:00:00Z"
    pinned = "2024-01-01T10:00:00Z"
    assert max_of(created, None, "UTC") == parse_instant(created)
    assert max_of(created, pinned, "UTC") == parse_instant(pinned)
    assert max_of(pinned, created, "UTC") == parse_instant(pinned)


def test_max_of_is_expressed_in_zone() -> None:
    result = max_of("2024-01-01T08:00:00Z", None, "Asia/Tokyo")
    assert result is not None
    assert result.hour == 17


def test_time_ago_unit_ladder() -> None:
    assert time_ago("2024-01-01T11:59:50Z", "en", "UTC", now=NOW) == "10 seconds ago"
    assert time_ago("2024-01-01T11:57:00Z", "en", "UTC", now=NOW) == "3 minutes ago"
    assert time_ago("2024-01-01T11:58:30Z", "en", "UTC", now=NOW) == "1 minute ago"
    assert time_ago("2024-01-01T09:00:00Z", "en", "UTC", now=NOW) == "3 hours ago"
    assert time_ago("2023-12-31T08:00:00Z", "en", "UTC", now=NOW) == "1 day ago"
    assert time_ago("2024-01-03T12:00:00Z", "en", "UTC", now=NOW) == "in 2 days"
    assert time_ago("2023-12-18T12:00:00Z", "en", "UTC", now=NOW) == "2 weeks ago"
    assert time_ago("2023-12-04T12:00:00Z", "en", "UTC", now=NOW) == "4 weeks ago"
    assert time_ago("2023-10-01T12:00:00Z", "en", "UTC", now=NOW) == "3 months ago"
    assert time_ago("2021-01-01T12:00:00Z", "en", "UTC", now=NOW) == "3 years ago"


def test_time_ago_locales() -> None:
    assert time_ago("2024-01-01T11:57:00Z", "de", "UTC", now=NOW) == "vor 3 Minuten"
    assert time_ago("2023-12-31T08:00:00Z", "fr", "UTC", now=NOW) == "il y a 1 jour"
    assert time_ago("2023-12-29T12:00:00Z", "es", "UTC", now=NOW) == "hace 3 días"
    # Region tags resolve through Babel; unknown tags use English.
    assert time_ago("2024-01-01T11:57:00Z", "en-GB", "UTC", now=NOW) == "3 minutes ago"
    assert time_ago("2024-01-01T11:57:00Z", "xx", "UTC", now=NOW) == "3 minutes ago"
    assert time_ago("2024-01-01T11:57:00Z", "*", "UTC", now=NOW) == "3 minutes ago"


def test_time_ago_malformed_is_empty() -> None:
    assert time_ago("nope", "en", "UTC", now=NOW) == ""


def test_formatter_cache_populates_once_per_locale() -> None:
    cache = FormatterCache()
    en = cache.get("en")
    assert cache.get("en") is en
    assert cache.get("de") is not en
    assert "en" in cache and "de" in cache
    assert len(cache) == 2


def test_today_label() -> None:
    assert today_label("UTC", "en", now=NOW) == "January 1, 2024"
    assert today_label("UTC", "de", now=NOW) == "1. Januar 2024"
    assert today_label("UTC", "fr", now=NOW) == "1 janvier 2024"
    assert today_label("Pacific/Honolulu", "en", now="2024-01-01T05:00:00Z") == "December 31, 2023"
