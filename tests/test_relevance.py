# tests/test_relevance.py

from __future__ import annotations

import itertools

import pytest

from loose_ends.tasks.relevance import is_loose_end, is_relevant_today

from .fakes import NOW, TODAY, YESTERDAY, make_task


def test_new_unchecked_task_is_on_deck() -> None:
    task = make_task("a", TODAY)
    assert is_relevant_today(task, "UTC", now=NOW)
    assert not is_loose_end(task, "UTC", now=NOW)


@pytest.mark.parametrize("created", ["2024-01-01T00:00:00Z", "2024-01-01T11:59:59Z", "2024-01-01T23:59:59Z"])
def test_created_any_time_today_is_relevant(created: str) -> None:
    assert is_relevant_today(make_task("a", created), "UTC", now=NOW)


def test_checked_yesterday_and_never_pinned_is_in_neither_list() -> None:
    task = make_task("a", YESTERDAY, checked_at="2023-12-31T09:00:00Z")
    assert not is_relevant_today(task, "UTC", now=NOW)
    assert not is_loose_end(task, "UTC", now=NOW)


def test_unchecked_old_task_is_a_loose_end() -> None:
    task = make_task("a", YESTERDAY)
    assert not is_relevant_today(task, "UTC", now=NOW)
    assert is_loose_end(task, "UTC", now=NOW)


def test_pinning_an_unchecked_old_task_moves_it_on_deck() -> None:
    task = make_task("a", YESTERDAY, pinned_at="2024-01-01T09:00:00Z")
    assert is_relevant_today(task, "UTC", now=NOW)
    assert not is_loose_end(task, "UTC", now=NOW)


def test_pinning_a_task_checked_yesterday_does_not_resurrect_it() -> None:
    task = make_task("a", YESTERDAY, checked_at="2023-12-31T09:00:00Z", pinned_at="2024-01-01T09:00:00Z")
    assert not is_relevant_today(task, "UTC", now=NOW)
    assert not is_loose_end(task, "UTC", now=NOW)


def test_pinned_and_checked_today_stays_on_deck() -> None:
    task = make_task("a", YESTERDAY, checked_at="2024-01-01T10:00:00Z", pinned_at="2024-01-01T09:00:00Z")
    assert is_relevant_today(task, "UTC", now=NOW)


def test_stale_pin_does_not_count() -> None:
    task = make_task("a", "2023-12-30T08:00:00Z", pinned_at=YESTERDAY)
    assert not is_relevant_today(task, "UTC", now=NOW)
    assert is_loose_end(task, "UTC", now=NOW)


def test_old_task_checked_today_is_a_loose_end() -> None:
    task = make_task("a", YESTERDAY, checked_at="2024-01-01T10:00:00Z")
    assert not is_relevant_today(task, "UTC", now=NOW)
    assert is_loose_end(task, "UTC", now=NOW)


def test_relevance_follows_the_time_zone() -> None:
    task = make_task("a", "2023-12-31T20:00:00Z")  # Jan 1, 05:00 in Tokyo
    assert is_relevant_today(task, "Asia/Tokyo", now=NOW)
    assert not is_relevant_today(task, "UTC", now=NOW)
    assert is_loose_end(task, "UTC", now=NOW)


def test_on_deck_and_loose_end_are_mutually_exclusive() -> None:
    instants = [None, "2023-12-30T08:00:00Z", YESTERDAY, "2024-01-01T10:00:00Z"]
    created_options = ["2023-12-30T07:00:00Z", "2023-12-31T07:00:00Z", "2024-01-01T07:00:00Z"]

    for created, checked, pinned in itertools.product(created_options, instants, instants):
        task = make_task("a", created, checked_at=checked, pinned_at=pinned)
        assert not (is_relevant_today(task, "UTC", now=NOW) and is_loose_end(task, "UTC", now=NOW))
