# recorder.py
# Turns one chat message into a verdict: parse the share, check it is for
# today's puzzle, store it. Every failure ends up as a Verdict; nothing here
# raises into the chat client's event loop.

import datetime as dt
import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from daily import DailyPuzzleCache
from ranking import RankedEntry
from store import ConflictKind, DuplicateSubmission, PersistenceFailure, Submission, SubmissionStore
from wordle import FAILED_MARKER, HARD_MODE_MARKER, MAX_ATTEMPTS, MalformedHeader, Puzzle, PuzzleError

log = logging.getLogger("wordlebot.recorder")

ACCEPT = "✅"
REJECT = "❌"
WRONG_DAY = "📅"


class WrongPuzzleDay(Exception):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"share is for Wordle #{actual:,}, today is #{expected:,}")
        self.expected = expected
        self.actual = actual


class Verdict(enum.Enum):
    IGNORED = "ignored"
    REJECTED = "rejected"
    WRONG_DAY = "wrong_day"
    ACCEPTED = "accepted"
    DUPLICATE_PUZZLE = "duplicate_puzzle"
    DUPLICATE_DAY = "duplicate_day"
    STORE_ERROR = "store_error"


REACTIONS: Dict[Verdict, Tuple[str, ...]] = {
    Verdict.IGNORED: (),
    Verdict.REJECTED: (REJECT,),
    Verdict.WRONG_DAY: (REJECT, WRONG_DAY),
    Verdict.ACCEPTED: (ACCEPT,),
    Verdict.DUPLICATE_PUZZLE: (REJECT,),
    Verdict.DUPLICATE_DAY: (REJECT,),
    Verdict.STORE_ERROR: (REJECT,),
}


@dataclass(frozen=True)
class Outcome:
    verdict: Verdict
    puzzle: Optional[Puzzle] = None
    detail: str = ""

    @property
    def reactions(self) -> Tuple[str, ...]:
        return REACTIONS[self.verdict]

    @property
    def message(self) -> str:
        """Short, user-facing reason for the verdict."""
        if self.verdict is Verdict.ACCEPTED:
            return f"Recorded {self.puzzle.header}"
        if self.verdict is Verdict.DUPLICATE_PUZZLE:
            return f"You've already submitted a puzzle for Wordle #{self.puzzle.day_offset:,}"
        if self.verdict is Verdict.DUPLICATE_DAY:
            return "You've already submitted a puzzle for today"
        if self.verdict is Verdict.STORE_ERROR:
            return "Couldn't save that share, try again later"
        return self.detail


def check_day(puzzle: Puzzle, expected: int) -> None:
    if puzzle.day_offset != expected:
        raise WrongPuzzleDay(expected, puzzle.day_offset)


class ShareRecorder:
    def __init__(self, store: SubmissionStore, cache: DailyPuzzleCache, tz: Optional[dt.tzinfo] = None):
        self.store = store
        self.cache = cache
        self.tz = tz or dt.timezone.utc

    def local_date(self, when: dt.datetime) -> dt.date:
        if when.tzinfo is None:
            when = when.replace(tzinfo=dt.timezone.utc)
        return when.astimezone(self.tz).date()

    def record(
        self,
        text: str,
        submitter: str,
        submitted_by: int,
        submitted_at: Optional[dt.datetime] = None,
    ) -> Outcome:
        try:
            puzzle = Puzzle.parse(text)
        except MalformedHeader:
            return Outcome(Verdict.IGNORED)
        except PuzzleError as e:
            log.info("rejected share from %s: %s", submitter, e)
            return Outcome(Verdict.REJECTED, detail=str(e))

        try:
            check_day(puzzle, self.cache.get().day_offset)
        except WrongPuzzleDay as e:
            log.info("%s posted the wrong puzzle: %s", submitter, e)
            return Outcome(Verdict.WRONG_DAY, puzzle, str(e))

        submitted_at = submitted_at or dt.datetime.now(dt.timezone.utc)
        try:
            self.store.add(submitter, submitted_by, puzzle, submitted_at, self.local_date(submitted_at))
        except DuplicateSubmission as e:
            log.info("%s has %s", submitter, e)
            if e.kind is ConflictKind.DAY_OFFSET:
                return Outcome(Verdict.DUPLICATE_PUZZLE, puzzle, str(e))
            return Outcome(Verdict.DUPLICATE_DAY, puzzle, str(e))
        except PersistenceFailure as e:
            log.warning("unhandled error storing share from %s: %s", submitter, e)
            return Outcome(Verdict.STORE_ERROR, puzzle, str(e))

        return Outcome(Verdict.ACCEPTED, puzzle)


# -----------------------------------------------------------------------------
# Announcement text
# -----------------------------------------------------------------------------


def score_text(s: Submission) -> str:
    score = str(s.attempts) if s.solved else FAILED_MARKER
    return f"{score}/{MAX_ATTEMPTS}{HARD_MODE_MARKER if s.hard_mode else ''}"


def format_leaderboard(ranked: Sequence[RankedEntry[Submission]], day: dt.date) -> str:
    if not ranked:
        return f"No Wordle results for {day.isoformat()}."
    lines = [f"**Wordle Leaderboard** ({day.isoformat()})"]
    for r in ranked:
        lines.append(f"**{r.rank}.** {r.entry.submitter} {score_text(r.entry)}")
    return "\n".join(lines)


def worth_announcing(entries: Sequence[Submission]) -> bool:
    """A day where every top entry failed has no winner to announce."""
    return any(s.solved for s in entries)


def format_winners(entries: Sequence[Submission], day: dt.date) -> str:
    if not entries:
        return f"Nobody played Wordle on {day.isoformat()}."
    names = ", ".join(s.submitter for s in entries)
    best = entries[0]
    score = f"{best.attempts if best.solved else FAILED_MARKER}/{MAX_ATTEMPTS}"
    label = "winner" if len(entries) == 1 else "winners"
    return f"🏆 Wordle #{best.day_offset:,} {label} for {day.isoformat()}: {names} ({score})"


def format_recent(submissions: List[Submission]) -> str:
    if not submissions:
        return "No data yet."
    return "\n".join(
        f"{s.submitter}: Wordle {s.day_offset:,} {score_text(s)} ({s.submitted_date.isoformat()})"
        for s in submissions
    )
