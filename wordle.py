# wordle.py
# Wordle share-text codec: tiles, boards and the full puzzle record.
# Accepts raw emoji squares (Discord) and :alias: tokens (Slack-style text).

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

MAX_ATTEMPTS = 6
ROW_LENGTH = 5
FAILED_MARKER = "X"
HARD_MODE_MARKER = "*"

# "Wordle 1,234 4/6*": grouped thousands, or plain digits for small offsets
# (ASCII digits only)
HEADER_RE = re.compile(
    r"Wordle (?P<day_offset>\d{1,3}(?:,\d{3})+|\d+) "
    r"(?P<attempts>[1-6]|X)/6(?P<hard_mode>\*)?",
    re.ASCII,
)

# Emoji presentation selector, sometimes appended to ⬛ by clients
VARIATION_SELECTOR = "\ufe0f"

# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class PuzzleError(ValueError):
    """Base for everything that can go wrong while reading a share."""


class MalformedHeader(PuzzleError):
    pass


class MalformedField(PuzzleError):
    pass


class BoardError(PuzzleError):
    pass


class MalformedBoard(BoardError):
    def __init__(self, reason: str):
        super().__init__(f"invalid puzzle board, {reason}")
        self.reason = reason


class InvalidTileToken(BoardError):
    def __init__(self, token: str, line: Optional[str] = None):
        msg = f"couldn't convert {token!r} to tile"
        if line is not None:
            msg += f" (line {line!r})"
        super().__init__(msg)
        self.token = token
        self.line = line


# -----------------------------------------------------------------------------
# Tile
# -----------------------------------------------------------------------------


class Tile(Enum):
    BLACK = "⬛"
    YELLOW = "🟨"
    GREEN = "🟩"

    @classmethod
    def parse(cls, token: str) -> "Tile":
        tile = _TOKENS.get(token)
        if tile is None:
            raise InvalidTileToken(token)
        return tile

    def encode(self) -> str:
        return self.value


_ALIASES = {
    "black_large_square": Tile.BLACK,
    "large_yellow_square": Tile.YELLOW,
    "large_green_square": Tile.GREEN,
}
_TOKENS = {**_ALIASES, **{t.value: t for t in Tile}}

# -----------------------------------------------------------------------------
# Row tokenizers
# -----------------------------------------------------------------------------


def split_aliases(line: str) -> List[str]:
    """`:large_green_square::black_large_square:` -> alias names."""
    return [t.replace(":", "") for t in line.split("::")]


def split_glyphs(line: str) -> List[str]:
    """One token per visible character."""
    return [ch for ch in line if ch != VARIATION_SELECTOR]


def pick_tokenizer(line: str):
    return split_aliases if "::" in line else split_glyphs


# -----------------------------------------------------------------------------
# Board
# -----------------------------------------------------------------------------

Row = Tuple[Tile, ...]


@dataclass(frozen=True)
class PuzzleBoard:
    rows: Tuple[Row, ...]

    def __post_init__(self):
        if not self.rows:
            raise MalformedBoard("no rows")
        if len(self.rows) > MAX_ATTEMPTS:
            raise MalformedBoard(f"{len(self.rows)} rows, at most {MAX_ATTEMPTS} allowed")
        for row in self.rows:
            if len(row) > ROW_LENGTH:
                raise MalformedBoard(f"row was {len(row)} long")
        first = self.rows[0]
        if len(self.rows) == 1 and (len(first) != ROW_LENGTH or not all(t is Tile.GREEN for t in first)):
            raise MalformedBoard("only one row and not all green")

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[Tile]]) -> "PuzzleBoard":
        return cls(tuple(tuple(r) for r in rows))

    @classmethod
    def parse(cls, text: str) -> "PuzzleBoard":
        """
        Read up to six rows of tiles. Blank lines are layout only; anything
        after the sixth row is ignored.
        """
        rows: List[Row] = []
        for raw in text.splitlines():
            if len(rows) == MAX_ATTEMPTS:
                break
            line = raw.strip()
            if not line:
                continue

            tokenize = pick_tokenizer(line)
            try:
                row = tuple(Tile.parse(t) for t in tokenize(line))
            except InvalidTileToken as e:
                raise InvalidTileToken(e.token, line=line) from None

            if len(row) > ROW_LENGTH:
                raise MalformedBoard(f"row was {len(row)} long")
            rows.append(row)

        return cls(tuple(rows))

    def encode(self) -> str:
        return "\n".join("".join(t.encode() for t in row) for row in self.rows)

    @property
    def solved(self) -> bool:
        last = self.rows[-1]
        return len(last) == ROW_LENGTH and all(t is Tile.GREEN for t in last)

    def __len__(self) -> int:
        return len(self.rows)


# -----------------------------------------------------------------------------
# Puzzle
# -----------------------------------------------------------------------------


def group_thousands(n: int) -> str:
    return f"{n:,}"


def ungroup_thousands(s: str) -> int:
    digits = s.replace(",", "")
    if not (digits.isascii() and digits.isdigit()):
        raise MalformedField(f"couldn't convert day_offset {s!r} to an integer")
    return int(digits)


@dataclass(frozen=True)
class Puzzle:
    day_offset: int
    attempts: int
    solved: bool
    hard_mode: bool
    board: PuzzleBoard

    def __post_init__(self):
        if self.day_offset < 0:
            raise MalformedField(f"day_offset must not be negative, got {self.day_offset}")
        if not 1 <= self.attempts <= MAX_ATTEMPTS:
            raise MalformedField(f"attempts must be 1..{MAX_ATTEMPTS}, got {self.attempts}")
        if not self.solved and self.attempts != MAX_ATTEMPTS:
            raise MalformedField(f"a failed puzzle uses all {MAX_ATTEMPTS} attempts, got {self.attempts}")

    @classmethod
    def parse(cls, text: str) -> "Puzzle":
        """
        Parse a full share message. The header is validated before the board
        is looked at, so a bad header never yields a partial parse.
        """
        header, _, rest = text.partition("\n")
        m = HEADER_RE.fullmatch(header.strip())
        if not m:
            raise MalformedHeader(f"couldn't find Wordle header pattern in {header[:40]!r}")

        day_offset = ungroup_thousands(m.group("day_offset"))

        raw_attempts = m.group("attempts")
        if raw_attempts.isdigit():
            attempts, solved = int(raw_attempts), True
        else:
            # X, or anything we can't read: count it as a full, failed board
            attempts, solved = MAX_ATTEMPTS, False

        return cls(
            day_offset=day_offset,
            attempts=attempts,
            solved=solved,
            hard_mode=m.group("hard_mode") is not None,
            board=PuzzleBoard.parse(rest),
        )

    @property
    def header(self) -> str:
        score = str(self.attempts) if self.solved else FAILED_MARKER
        marker = HARD_MODE_MARKER if self.hard_mode else ""
        return f"Wordle {group_thousands(self.day_offset)} {score}/{MAX_ATTEMPTS}{marker}"

    def encode(self) -> str:
        return f"{self.header}\n\n{self.board.encode()}"
