import pytest

from multiedit.actions import default_registry, parse_command_line
from multiedit.buffer import Buffer
from multiedit.engine import CommandParseError, HistoryStore, SessionState
from multiedit.modes import MultieditSession

TEXT = "one foo\ntwo foo\nthree foo\n"


def make_buffer(point: int = 0) -> Buffer:
    buffer = Buffer.from_text(TEXT)
    buffer.set_point(point)
    return buffer


@pytest.mark.parametrize(
    ("line", "regexp", "bounds", "bang"),
    [
        (":iedit foo", "foo", (None, None), False),
        ("ie /f.o/", "f.o", (None, None), False),
        (":%iedit! /foo/", "foo", (None, None), True),
        (":2iedit foo", "foo", (8, 15), False),
        (":1,2ied foo", "foo", (0, 15), False),
        (":.iedi foo", "foo", (8, 15), False),
        (":iedit", "", (None, None), False),
        (":iedit/a\\/b/", "a\\/b", (None, None), False),
    ],
)
def test_parse_command_line(
    line: str, regexp: str, bounds: tuple[int | None, int | None], bang: bool
) -> None:
    command = parse_command_line(line, make_buffer(point=10))

    assert command.regexp == regexp
    assert (command.start, command.end) == bounds
    assert command.bang is bang


def test_visual_range_uses_selection_lines() -> None:
    buffer = make_buffer()
    buffer.state.set_selection(9, 18)

    command = parse_command_line(":'<,'>iedit foo", buffer)

    assert (command.start, command.end) == (8, 25)


@pytest.mark.parametrize(
    "line", [":s/foo/bar/", ":9iedit foo", ":0iedit foo", ":'<,'>iedit foo", ":iedx foo"]
)
def test_parse_errors(line: str) -> None:
    with pytest.raises(CommandParseError):
        parse_command_line(line, make_buffer())


def test_ex_action_starts_session_over_range() -> None:
    session = MultieditSession(make_buffer(), history=HistoryStore())

    result = default_registry().dispatch(
        session, "multiedit.ex", text=":2,3iedit /foo/"
    )

    assert result.ok
    assert result.payload == ((12, 15), (22, 25))
    assert session.state is SessionState.ACTIVE


def test_bang_skips_history_recording() -> None:
    history = HistoryStore()
    session = MultieditSession(make_buffer(), history=history)
    registry = default_registry()

    registry.dispatch(session, "multiedit.ex", text=":iedit! foo")
    registry.dispatch(session, "multiedit.abort")

    assert history.load(session.buffer) is None


def test_ex_action_reports_parse_errors() -> None:
    session = MultieditSession(make_buffer(), history=HistoryStore())

    result = default_registry().dispatch(session, "multiedit.ex", text=":iedit /(/")

    assert result.status == "command_error"
    assert session.state is SessionState.INACTIVE
