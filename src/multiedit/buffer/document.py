"""Core document storage for multiedit buffers."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Tuple


def _line_starts(text: str) -> List[int]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


@dataclass(slots=True)
class BufferDocument:
    """Immutable-ish text storage addressed by character offsets.

    Each edit produces a new document with a bumped version. Line starts are
    computed once per document so offset-to-row lookup is a bisect.
    """

    text: str = ""
    version: int = 0
    dirty: bool = False
    _starts: List[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if not self._starts:
            self._starts = _line_starts(self.text)

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(text=text)

    def replace(self, start: int, end: int, text: str) -> "BufferDocument":
        """Return a document with ``[start:end)`` replaced by ``text``."""

        new_text = self.text[:start] + text + self.text[end:]
        return BufferDocument(text=new_text, version=self.version + 1, dirty=True)

    def __len__(self) -> int:
        return len(self.text)

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_start(self, row: int) -> int:
        return self._starts[row]

    def line_end(self, row: int) -> int:
        """Offset of the newline ending ``row`` (or end of text)."""

        if row + 1 < len(self._starts):
            return self._starts[row + 1] - 1
        return len(self.text)

    def row_of(self, offset: int) -> int:
        return bisect_right(self._starts, offset) - 1

    def line_bounds(self, offset: int) -> Tuple[int, int]:
        row = self.row_of(offset)
        return self.line_start(row), self.line_end(row)

