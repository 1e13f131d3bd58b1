# ranking.py
# Daily standings: standard competition ("1224") ranking on attempts.

import datetime as dt
from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, Protocol, TypeVar


class Rankable(Protocol):
    attempts: int
    submitted_at: dt.datetime
    submitted_date: dt.date


T = TypeVar("T", bound=Rankable)


@dataclass(frozen=True)
class RankedEntry(Generic[T]):
    rank: int
    entry: T


def rank(submissions: Iterable[T], day: Optional[dt.date] = None) -> List[RankedEntry[T]]:
    """
    Rank the submissions of `day` (or all of them when no day is given).

    Fewer attempts is better. Ties share a rank and the next distinct score
    skips ahead, so attempts [2, 2, 4, 6] rank as [1, 1, 3, 4]. Within a rank,
    earlier submissions come first.
    """
    rows = [s for s in submissions if day is None or s.submitted_date == day]
    rows.sort(key=lambda s: (s.attempts, s.submitted_at))

    ranked: List[RankedEntry[T]] = []
    current_rank = 0
    previous = None
    for position, s in enumerate(rows, 1):
        if s.attempts != previous:
            current_rank = position
            previous = s.attempts
        ranked.append(RankedEntry(current_rank, s))
    return ranked


def winners(submissions: Iterable[T], day: Optional[dt.date] = None) -> List[T]:
    return [r.entry for r in rank(submissions, day) if r.rank == 1]
