"""Tests for competition ranking and winners."""

import datetime as dt
from dataclasses import dataclass

from ranking import RankedEntry, rank, winners

DAY = dt.date(2024, 3, 10)
BASE = dt.datetime(2024, 3, 10, 12, 0, tzinfo=dt.timezone.utc)


@dataclass(frozen=True)
class Entry:
    name: str
    attempts: int
    submitted_at: dt.datetime
    submitted_date: dt.date = DAY


def entries(*scores):
    """One entry per score, submitted a minute apart in the given order."""
    return [
        Entry(f"p{i}", a, BASE + dt.timedelta(minutes=i))
        for i, a in enumerate(scores)
    ]


def test_ties_share_rank_and_skip_ahead():
    ranked = rank(entries(2, 2, 4, 6), DAY)
    assert [r.rank for r in ranked] == [1, 1, 3, 4]
    assert [r.entry.attempts for r in ranked] == [2, 2, 4, 6]


def test_input_order_does_not_matter():
    shuffled = entries(6, 2, 4, 2)
    ranked = rank(shuffled, DAY)
    assert [(r.rank, r.entry.attempts) for r in ranked] == [(1, 2), (1, 2), (3, 4), (4, 6)]


def test_ties_ordered_by_submission_time():
    late = Entry("late", 3, BASE + dt.timedelta(hours=2))
    early = Entry("early", 3, BASE)
    ranked = rank([late, early], DAY)
    assert [r.entry.name for r in ranked] == ["early", "late"]
    assert [r.rank for r in ranked] == [1, 1]


def test_three_way_tie_then_next():
    assert [r.rank for r in rank(entries(3, 3, 3, 5, 5, 6))] == [1, 1, 1, 4, 4, 6]


def test_filters_to_requested_day():
    other_day = Entry("yesterday", 1, BASE - dt.timedelta(days=1), DAY - dt.timedelta(days=1))
    ranked = rank(entries(4, 5) + [other_day], DAY)
    assert [r.entry.name for r in ranked] == ["p0", "p1"]
    assert ranked[0] == RankedEntry(1, ranked[0].entry)


def test_no_day_ranks_everything():
    other_day = Entry("yesterday", 1, BASE - dt.timedelta(days=1), DAY - dt.timedelta(days=1))
    assert len(rank(entries(4, 5) + [other_day])) == 3


def test_empty_input():
    assert rank([], DAY) == []
    assert winners([], DAY) == []


def test_winners_are_rank_one_in_submission_order():
    subs = entries(4, 2, 6, 2)
    best = winners(subs, DAY)
    assert [w.name for w in best] == ["p1", "p3"]
    assert all(w.attempts == 2 for w in best)


def test_single_winner():
    assert [w.name for w in winners(entries(5, 3, 4), DAY)] == ["p1"]
