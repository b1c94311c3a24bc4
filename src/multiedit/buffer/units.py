"""Syntactic unit lookups the host offers to scope resolution.

Each resolver takes the document text and a point and returns the
``(start, end)`` range of the unit around the point, or ``None`` when no
such unit exists there.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Optional, Tuple

UnitRange = Optional[Tuple[int, int]]
UnitResolver = Callable[[str, int], UnitRange]

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {close: open_ for open_, close in _OPENERS.items()}
_DEFUN_HEAD = re.compile(r"^[ \t]*(?:async[ \t]+def|def|class|function|fn)\b")


def _line_at(text: str, point: int) -> Tuple[int, int]:
    start = text.rfind("\n", 0, point) + 1
    end = text.find("\n", point)
    return start, len(text) if end == -1 else end


def _blank(line: str) -> bool:
    return not line.strip()


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def line_unit(text: str, point: int) -> UnitRange:
    return _line_at(text, point)


def paragraph_unit(text: str, point: int) -> UnitRange:
    """Run of non-blank lines around point."""

    start, end = _line_at(text, point)
    if _blank(text[start:end]):
        return None
    while start > 0:
        prev_start, prev_end = _line_at(text, start - 1)
        if _blank(text[prev_start:prev_end]):
            break
        start = prev_start
    while end < len(text):
        next_start, next_end = _line_at(text, end + 1)
        if _blank(text[next_start:next_end]):
            break
        end = next_end
    return start, end


def defun_unit(text: str, point: int) -> UnitRange:
    """Nearest enclosing ``def``/``class``-style block, by indentation."""

    head_start, head_end = _line_at(text, point)
    while True:
        if _DEFUN_HEAD.match(text[head_start:head_end]):
            end = _block_end(text, head_start, head_end)
            if end >= point:
                return head_start, end
        if head_start == 0:
            return None
        head_start, head_end = _line_at(text, head_start - 1)


def _block_end(text: str, head_start: int, head_end: int) -> int:
    head_indent = _indent(text[head_start:head_end])
    end = head_end
    cursor = head_end
    while cursor < len(text):
        next_start, next_end = _line_at(text, cursor + 1)
        line = text[next_start:next_end]
        if not _blank(line):
            if _indent(line) <= head_indent and not line.lstrip().startswith(
                ("}", ")", "]")
            ):
                break
            end = next_end
        cursor = next_end
    return end


def enclosing_expression_unit(text: str, point: int) -> UnitRange:
    """Innermost bracket pair around point, brackets included."""

    depth: Dict[str, int] = {close: 0 for close in _CLOSERS}
    index = point - 1
    while index >= 0:
        char = text[index]
        if char in _CLOSERS:
            depth[char] += 1
        elif char in _OPENERS:
            close = _OPENERS[char]
            if depth[close]:
                depth[close] -= 1
            else:
                end = _matching_close(text, index)
                if end is not None and end >= point:
                    return index, end + 1
        index -= 1
    return None


def _matching_close(text: str, open_index: int) -> Optional[int]:
    opener = text[open_index]
    closer = _OPENERS[opener]
    level = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == opener:
            level += 1
        elif char == closer:
            level -= 1
            if level == 0:
                return index
    return None


DEFAULT_UNITS: Dict[str, UnitResolver] = {
    "line": line_unit,
    "paragraph": paragraph_unit,
    "defun": defun_unit,
    "function": defun_unit,
    "enclosing-expression": enclosing_expression_unit,
    "sexp": enclosing_expression_unit,
}

__all__ = [
    "UnitRange",
    "UnitResolver",
    "DEFAULT_UNITS",
    "line_unit",
    "paragraph_unit",
    "defun_unit",
    "enclosing_expression_unit",
]
