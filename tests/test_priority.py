# tests/test_priority.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from app.features.tasks.priority import MAX_PRIORITY, compute_priority


def test_deadline_tomorrow_without_dependencies_is_near_max(now: datetime) -> None:
    priority = compute_priority(now + timedelta(days=1), 0, now)

    assert priority == pytest.approx(5 - 1 / 7)
    assert round(priority) == 5


def test_far_deadline_with_dependencies_gets_one_point(now: datetime) -> None:
    assert compute_priority(now + timedelta(days=35), 2, now) == pytest.approx(1.0)


def test_deadline_five_weeks_or_more_away_floors_at_zero(now: datetime) -> None:
    assert compute_priority(now + timedelta(days=35), 0, now) == 0
    assert compute_priority(now + timedelta(days=120), 0, now) == 0


def test_overdue_deadline_saturates_at_max(now: datetime) -> None:
    assert compute_priority(now - timedelta(days=3), 0, now) == MAX_PRIORITY
    assert compute_priority(now, 0, now) == MAX_PRIORITY


def test_dependency_bonus_is_capped_at_max(now: datetime) -> None:
    assert compute_priority(now - timedelta(days=1), 3, now) == MAX_PRIORITY
    assert compute_priority(now + timedelta(days=1), 1, now) == MAX_PRIORITY


def test_partial_days_round_up(now: datetime) -> None:
    in_one_hour = compute_priority(now + timedelta(hours=1), 0, now)
    in_one_day = compute_priority(now + timedelta(days=1), 0, now)

    assert in_one_hour == in_one_day


def test_priority_never_increases_as_deadline_moves_away(now: datetime) -> None:
    for dependency_count in (0, 2):
        scores = [
            compute_priority(now + timedelta(days=days), dependency_count, now)
            for days in range(-3, 50)
        ]
        assert all(a >= b for a, b in zip(scores, scores[1:]))
        assert all(0 <= score <= MAX_PRIORITY for score in scores)


def test_naive_deadline_is_read_as_utc(now: datetime) -> None:
    naive = (now + timedelta(days=10)).replace(tzinfo=None)

    assert compute_priority(naive, 0, now) == compute_priority(now + timedelta(days=10), 0, now)


def test_same_inputs_give_same_result(now: datetime) -> None:
    deadline = now + timedelta(days=9)

    assert compute_priority(deadline, 0, now) == compute_priority(deadline, 0, now)
