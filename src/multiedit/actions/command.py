"""Ex-style ``:[range]iedit[!] [/]regexp[/]`` command lines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from multiedit.buffer import Buffer
from multiedit.engine import CommandParseError
from multiedit.modes.base import ActionResult
from multiedit.modes.session import MultieditSession

from .core import session_action

_COMMAND = re.compile(
    r"""^
    (?P<range>%|'<,'>|\.|\d+(?:,\d+)?)?
    \s*
    (?P<name>ie(?:d(?:i(?:t)?)?)?)
    (?P<bang>!)?
    (?:(?:\s+|(?=/))(?P<arg>.*))?
    $""",
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class ExCommand:
    """A parsed command line; ``start``/``end`` are ``None`` for the whole document."""

    regexp: str
    start: Optional[int] = None
    end: Optional[int] = None
    bang: bool = False


def parse_command_line(text: str, buffer: Buffer) -> ExCommand:
    raw = text.strip()
    if raw.startswith(":"):
        raw = raw[1:].lstrip()
    match = _COMMAND.match(raw)
    if match is None:
        raise CommandParseError(text, "Not an iedit command")

    bounds = _line_range(match.group("range"), buffer, text)
    start, end = (None, None) if bounds is None else bounds
    return ExCommand(
        regexp=_strip_delimiters(match.group("arg") or ""),
        start=start,
        end=end,
        bang=match.group("bang") is not None,
    )


def _line_range(
    spec: Optional[str], buffer: Buffer, text: str
) -> Optional[Tuple[int, int]]:
    if spec is None or spec == "%":
        return None

    document = buffer.document
    if spec == ".":
        first = last = document.row_of(buffer.point)
    elif spec == "'<,'>":
        selection = buffer.state.selection
        if selection is None:
            raise CommandParseError(text, "No visual selection for '<,'>")
        first = document.row_of(selection[0])
        last = document.row_of(selection[1])
    else:
        numbers = [int(part) for part in spec.split(",")]
        if any(number < 1 for number in numbers):
            raise CommandParseError(text, "Line numbers start at 1")
        first, last = numbers[0] - 1, numbers[-1] - 1
        if first > last:
            first, last = last, first
        if last >= document.line_count:
            raise CommandParseError(text, f"Line {last + 1} out of range")
    return document.line_start(first), document.line_end(last)


def _strip_delimiters(arg: str) -> str:
    value = arg.strip()
    if not value.startswith("/"):
        return value
    value = value[1:]
    if value.endswith("/") and not value.endswith("\\/"):
        value = value[:-1]
    return value


@session_action
def submit_command_line(session: MultieditSession, *, text: str = "") -> ActionResult:
    """Run ``text`` as an ex command; ``!`` starts a session that is not recorded."""

    command = parse_command_line(text, session.buffer)
    session.bus.emit("command.submit", text)
    created = session.ex_match(
        command.regexp, start=command.start, end=command.end, no_recall=command.bang
    )
    return ActionResult(
        consumed=True,
        state=session.state,
        message=f"{len(created)} occurrences",
        payload=tuple(region.bounds for region in created),
    )


__all__ = ["ExCommand", "parse_command_line", "submit_command_line"]
