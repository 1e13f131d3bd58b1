# store.py
# SQLite persistence for recorded shares. One row per (user, puzzle) and
# per (user, calendar day); the constraints settle concurrent submissions.

import datetime as dt
import enum
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from wordle import Puzzle

log = logging.getLogger("wordlebot.store")

SCHEMA = """
CREATE TABLE IF NOT EXISTS puzzle (
    id INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT,
    submitter TEXT NOT NULL,
    submitted_by INTEGER NOT NULL,
    submitted_at TEXT NOT NULL,
    submitted_date TEXT NOT NULL,
    day_offset INTEGER NOT NULL,
    attempts INTEGER NOT NULL,
    solved INTEGER NOT NULL,
    hard_mode INTEGER NOT NULL,
    puzzle TEXT NOT NULL,
    UNIQUE(submitted_by, day_offset),
    UNIQUE(submitted_by, submitted_date)
);
CREATE INDEX IF NOT EXISTS idx_puzzle_date ON puzzle(submitted_date);
"""

COLUMNS = (
    "id, submitter, submitted_by, submitted_at, submitted_date, "
    "day_offset, attempts, solved, hard_mode, puzzle"
)


class ConflictKind(enum.Enum):
    DAY_OFFSET = "day_offset"
    DATE = "date"


class DuplicateSubmission(Exception):
    def __init__(self, kind: ConflictKind, day_offset: int, submitted_date: dt.date):
        if kind is ConflictKind.DAY_OFFSET:
            msg = f"already submitted a puzzle for Wordle #{day_offset}"
        else:
            msg = f"already submitted a puzzle for {submitted_date.isoformat()}"
        super().__init__(msg)
        self.kind = kind
        self.day_offset = day_offset
        self.submitted_date = submitted_date


class PersistenceFailure(Exception):
    pass


@dataclass(frozen=True)
class Submission:
    id: int
    submitter: str
    submitted_by: int
    submitted_at: dt.datetime
    submitted_date: dt.date
    day_offset: int
    attempts: int
    solved: bool
    hard_mode: bool
    puzzle: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Submission":
        return cls(
            id=row["id"],
            submitter=row["submitter"],
            submitted_by=row["submitted_by"],
            submitted_at=dt.datetime.fromisoformat(row["submitted_at"]),
            submitted_date=dt.date.fromisoformat(row["submitted_date"]),
            day_offset=row["day_offset"],
            attempts=row["attempts"],
            solved=bool(row["solved"]),
            hard_mode=bool(row["hard_mode"]),
            puzzle=row["puzzle"],
        )

    def to_puzzle(self) -> Puzzle:
        return Puzzle.parse(self.puzzle)


def to_utc(d: dt.datetime) -> dt.datetime:
    """Ensure a datetime is timezone-aware UTC."""
    if d.tzinfo is None:
        return d.replace(tzinfo=dt.timezone.utc)
    return d.astimezone(dt.timezone.utc)


class SubmissionStore:
    def __init__(self, path: Union[str, Path]):
        self.path = str(path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.executescript(SCHEMA)

    def add(
        self,
        submitter: str,
        submitted_by: int,
        puzzle: Puzzle,
        submitted_at: dt.datetime,
        submitted_date: dt.date,
    ) -> Submission:
        """
        Insert one share. Raises DuplicateSubmission when either uniqueness
        constraint fires, PersistenceFailure for any other database error.
        """
        submitted_at = to_utc(submitted_at)
        values = (
            submitter,
            submitted_by,
            submitted_at.isoformat(),
            submitted_date.isoformat(),
            puzzle.day_offset,
            puzzle.attempts,
            int(puzzle.solved),
            int(puzzle.hard_mode),
            puzzle.encode(),
        )
        try:
            with closing(self._connect()) as conn, conn:
                cur = conn.execute(
                    "INSERT INTO puzzle (submitter, submitted_by, submitted_at, submitted_date, "
                    "day_offset, attempts, solved, hard_mode, puzzle) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    values,
                )
                row_id = cur.lastrowid
        except sqlite3.IntegrityError as e:
            if "UNIQUE constraint failed" not in str(e):
                raise PersistenceFailure(str(e)) from e
            kind = self._conflict_kind(submitted_by, puzzle.day_offset)
            raise DuplicateSubmission(kind, puzzle.day_offset, submitted_date) from e
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e

        log.info("stored Wordle #%d for %s (%d)", puzzle.day_offset, submitter, submitted_by)
        return Submission(
            id=row_id,
            submitter=submitter,
            submitted_by=submitted_by,
            submitted_at=submitted_at,
            submitted_date=submitted_date,
            day_offset=puzzle.day_offset,
            attempts=puzzle.attempts,
            solved=puzzle.solved,
            hard_mode=puzzle.hard_mode,
            puzzle=values[-1],
        )

    def _conflict_kind(self, submitted_by: int, day_offset: int) -> ConflictKind:
        # The puzzle constraint wins whenever it matches, even if the date one did too.
        try:
            with closing(self._connect()) as conn:
                hit = conn.execute(
                    "SELECT 1 FROM puzzle WHERE submitted_by = ? AND day_offset = ?",
                    (submitted_by, day_offset),
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e
        return ConflictKind.DAY_OFFSET if hit else ConflictKind.DATE

    def _select(self, where: str, params=(), suffix: str = "") -> List[Submission]:
        sql = f"SELECT {COLUMNS} FROM puzzle {where} {suffix}"
        try:
            with closing(self._connect()) as conn:
                return [Submission.from_row(r) for r in conn.execute(sql, params)]
        except sqlite3.Error as e:
            raise PersistenceFailure(str(e)) from e

    def on_date(self, day: dt.date) -> List[Submission]:
        return self._select("WHERE submitted_date = ?", (day.isoformat(),), "ORDER BY submitted_at, id")

    def recent(self, limit: int = 5) -> List[Submission]:
        return self._select("", (limit,), "ORDER BY submitted_at DESC, id DESC LIMIT ?")

