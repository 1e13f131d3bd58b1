import datetime as dt
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so the flat modules import without install
ROOT = Path(__file__).resolve().parent.parent
if ROOT.as_posix() not in sys.path:
    sys.path.insert(0, ROOT.as_posix())

from daily import CurrentPuzzle  # noqa: E402
from store import SubmissionStore  # noqa: E402

TODAY = dt.date(2024, 3, 10)
TODAY_OFFSET = (TODAY - dt.date(2021, 6, 19)).days  # 995

SHARE = (
    "Wordle 1,234 4/6*\n"
    "\n"
    "🟩⬛⬛🟨⬛\n"
    "⬛🟨⬛⬛🟩\n"
    "🟩🟩⬛🟩🟩\n"
    "🟩🟩🟩🟩🟩"
)


def share_for(day_offset: int, attempts: str = "3", hard: bool = False) -> str:
    rows = ["🟨⬛⬛⬛⬛", "🟩🟨⬛⬛⬛", "🟩🟩🟩⬛🟩", "🟩🟩🟩⬛🟩", "🟩🟩🟩⬛🟩", "🟩🟩🟩⬛🟩"]
    if attempts == "X":
        board = rows
    else:
        board = rows[: int(attempts) - 1] + ["🟩🟩🟩🟩🟩"]
    header = f"Wordle {day_offset:,} {attempts}/6{'*' if hard else ''}"
    return header + "\n\n" + "\n".join(board)


class FakeSource:
    """Metadata source that fails `failures` times before answering."""

    def __init__(self, puzzle=None, failures: int = 0):
        self.puzzle = puzzle
        self.failures = failures
        self.calls = []

    def __call__(self, day: dt.date) -> CurrentPuzzle:
        self.calls.append(day)
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("endpoint unreachable")
        if self.puzzle is None:
            raise ConnectionError("endpoint unreachable")
        return self.puzzle


class Clock:
    def __init__(self, day: dt.date = TODAY):
        self.day = day

    def __call__(self) -> dt.date:
        return self.day


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def today_puzzle():
    return CurrentPuzzle(
        id=1500,
        day_offset=TODAY_OFFSET,
        print_date=TODAY,
        solution="crane",
        editor="Tracy Bennett",
    )


@pytest.fixture
def store(tmp_path: Path):
    s = SubmissionStore(tmp_path / "wordle.db")
    s.initialize()
    return s
