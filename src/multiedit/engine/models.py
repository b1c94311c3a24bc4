"""Value types shared by the matching engine and sessions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Pattern as RegexPattern, Tuple

from multiedit.buffer import Buffer, TrackedSpan


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class SessionState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    INSERT_FOCUSED = "insert_focused"


class Boundary(str, Enum):
    WORD = "word"
    SYMBOL = "symbol"


@dataclass(frozen=True, slots=True)
class Pattern:
    """What to search for: a literal (or raw regexp) plus boundary anchors."""

    literal_text: str
    anchor_start: bool = False
    anchor_end: bool = False
    boundary: Boundary = Boundary.WORD
    symbol_chars: str = "_"
    case_sensitive: bool = True
    regexp: Optional[str] = None

    @property
    def is_whitespace(self) -> bool:
        return (
            self.regexp is None
            and bool(self.literal_text)
            and self.literal_text.isspace()
        )

    def _constituent(self) -> str:
        if self.boundary is Boundary.SYMBOL:
            return f"[\\w{re.escape(self.symbol_chars)}]"
        return "[^\\W_]"

    @property
    def regex(self) -> str:
        body = self.regexp if self.regexp is not None else re.escape(self.literal_text)
        constituent = self._constituent()
        head = f"(?<!{constituent})" if self.anchor_start else ""
        tail = f"(?!{constituent})" if self.anchor_end else ""
        if self.regexp is not None and (head or tail):
            body = f"(?:{body})"
        return f"{head}{body}{tail}"

    @property
    def history_entry(self) -> str:
        """``regex`` as recorded in search history, keeping the case flag."""

        regex = self.regex
        if self.case_sensitive or regex.startswith("(?i)"):
            return regex
        return f"(?i){regex}"

    def compile(self) -> RegexPattern[str]:
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.compile(self.regex, flags)


@dataclass(frozen=True, slots=True)
class Scope:
    """Outer bound every discovery operation respects."""

    start: int
    end: int
    kind: str = "buffer"

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("scope start must not exceed end")

    def contains(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end


@dataclass(eq=False)
class Region(TrackedSpan):
    """An edit region: a tracked span owned by one session."""

    id: int = 0
    is_marker: bool = False
    marker_visible: bool = field(default=True, repr=False)

    def text(self, buffer: Buffer) -> str:
        return buffer.text[self.start : self.end]

    def claims(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` overlaps this region.

        Non-empty spans may share a boundary. A zero-width span on either
        side conflicts when it touches the other.
        """

        if start == end or self.empty:
            return start <= self.end and self.start <= end
        return start < self.end and self.start < end

    def covers(self, position: int) -> bool:
        if self.empty:
            return position == self.start
        return self.start <= position < self.end

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.start, self.end


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """Region start anchors recorded when a session ended."""

    starts: Tuple[int, ...]

    def __contains__(self, position: object) -> bool:
        return position in self.starts

    def __len__(self) -> int:
        return len(self.starts)


__all__ = [
    "Direction",
    "SessionState",
    "Boundary",
    "Pattern",
    "Scope",
    "Region",
    "HistorySnapshot",
]
