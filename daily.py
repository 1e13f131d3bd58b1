# daily.py
# Today's official Wordle metadata, cached once per process and refreshed
# when the print date rolls over. Falls back to stale or computed values
# when the NYT endpoint is unreachable.

import datetime as dt
import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from tenacity import RetryError, Retrying, stop_after_attempt, wait_exponential

log = logging.getLogger("wordlebot.daily")

# Wordle #0 on 2021-06-19
WORDLE_EPOCH = dt.date(2021, 6, 19)

PUZZLE_URL = "https://www.nytimes.com/svc/wordle/v2/{day}.json"

MASK = "********"


@dataclass(frozen=True)
class CurrentPuzzle:
    id: int
    day_offset: int
    print_date: dt.date
    solution: str
    editor: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "CurrentPuzzle":
        return cls(
            id=int(payload["id"]),
            day_offset=int(payload["days_since_launch"]),
            print_date=dt.date.fromisoformat(payload["print_date"]),
            solution=str(payload.get("solution") or ""),
            editor=str(payload.get("editor") or ""),
        )

    def __repr__(self) -> str:
        return (
            f"CurrentPuzzle(id={self.id}, day_offset={self.day_offset}, "
            f"print_date={self.print_date.isoformat()}, solution={MASK!r}, "
            f"editor={self.editor!r})"
        )

    __str__ = __repr__


def fetch_puzzle(
    day: dt.date,
    session: Optional[requests.Session] = None,
    timeout: float = 10,
) -> CurrentPuzzle:
    """Fetch the official puzzle metadata for `day` from the NYT endpoint."""
    http = session or requests
    r = http.get(PUZZLE_URL.format(day=day.isoformat()), timeout=timeout)
    r.raise_for_status()
    return CurrentPuzzle.from_json(r.json())


def puzzle_offset(day: dt.date, epoch: dt.date = WORDLE_EPOCH) -> int:
    return (day - epoch).days


class MetadataFetchExhausted(Exception):
    def __init__(self, day: dt.date, attempts: int):
        super().__init__(f"couldn't fetch puzzle metadata for {day} after {attempts} attempt(s)")
        self.day = day
        self.attempts = attempts


class CacheState(enum.Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"
    DEGRADED = "degraded"


class DailyPuzzleCache:
    """
    Lazily fetched, atomically replaced holder for today's puzzle.

    `source(day)` is the metadata collaborator (defaults to `fetch_puzzle`),
    `today()` is the clock in the deployment's timezone. The lock only guards
    the swap; the fetch itself runs unlocked, so concurrent refreshes may both
    hit the network but readers always see a whole value.
    """

    def __init__(
        self,
        source: Callable[[dt.date], CurrentPuzzle] = fetch_puzzle,
        today: Callable[[], dt.date] = dt.date.today,
        attempts: int = 2,
        wait=None,
        epoch: dt.date = WORDLE_EPOCH,
    ):
        self._source = source
        self._today = today
        self._attempts = attempts
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=1, max=4)
        self._epoch = epoch
        self._lock = threading.Lock()
        self._current: Optional[CurrentPuzzle] = None
        self._degraded = False

    @property
    def state(self) -> CacheState:
        with self._lock:
            current, degraded = self._current, self._degraded
        if current is None:
            return CacheState.EMPTY
        if current.print_date != self._today():
            return CacheState.STALE
        return CacheState.DEGRADED if degraded else CacheState.FRESH

    def peek(self) -> Optional[CurrentPuzzle]:
        return self._current

    def get(self, force_refresh: bool = False) -> CurrentPuzzle:
        today = self._today()
        current = self._current
        if not force_refresh and current is not None and current.print_date == today:
            return current

        if current is not None and not force_refresh:
            log.info("cached puzzle is for %s, refreshing for %s", current.print_date, today)

        try:
            fresh = self._fetch(today)
        except MetadataFetchExhausted as e:
            return self._fallback(today, e)

        self._swap(fresh)
        log.info("cached Wordle #%d for %s", fresh.day_offset, fresh.print_date)
        return fresh

    def force_refresh(self) -> CurrentPuzzle:
        return self.get(force_refresh=True)

    def _fetch(self, day: dt.date) -> CurrentPuzzle:
        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=self._wait,
            after=self._log_failure,
        )
        try:
            return retrying(self._source, day)
        except RetryError as e:
            raise MetadataFetchExhausted(day, self._attempts) from e.last_attempt.exception()

    def _log_failure(self, retry_state) -> None:
        remaining = self._attempts - retry_state.attempt_number
        log.warning(
            "puzzle metadata fetch failed (%s), %d attempt(s) remaining",
            retry_state.outcome.exception(),
            remaining,
        )

    def _fallback(self, today: dt.date, err: MetadataFetchExhausted) -> CurrentPuzzle:
        with self._lock:
            current = self._current
            if current is not None:
                log.warning("%s; serving cached Wordle #%d from %s", err, current.day_offset, current.print_date)
                return current

            synthesized = CurrentPuzzle(
                id=0,
                day_offset=puzzle_offset(today, self._epoch),
                print_date=today,
                solution="",
                editor="",
            )
            self._current = synthesized
            self._degraded = True

        log.warning("%s; using computed Wordle #%d", err, synthesized.day_offset)
        return synthesized

    def _swap(self, value: CurrentPuzzle) -> None:
        with self._lock:
            self._current = value
            self._degraded = False
