import pytest

from multiedit.actions import (
    DEFAULT_ACTIONS,
    ActionRef,
    ActionRegistry,
    default_registry,
    match_all,
    session_action,
)
from multiedit.buffer import Buffer
from multiedit.engine import HistoryStore, SessionState
from multiedit.modes import ActionResult, MultieditSession


def make_session(text: str = "foo bar foo", point: int = 0) -> MultieditSession:
    buffer = Buffer.from_text(text)
    buffer.set_point(point)
    return MultieditSession(buffer, history=HistoryStore())


def test_action_ref_validation() -> None:
    with pytest.raises(ValueError):
        ActionRef(id="", handler=match_all)
    with pytest.raises(TypeError):
        ActionRef(id="broken", handler="nope")  # type: ignore[arg-type]

    ref = ActionRef(id="multiedit.custom", handler=match_all)
    assert ref.telemetry_name == "multiedit.custom"


def test_default_registry_exposes_every_action() -> None:
    registry = default_registry()

    assert registry.stats().action_count == len(DEFAULT_ACTIONS)
    for action_id in (
        "multiedit.match_all",
        "multiedit.match_all_no_recall",
        "multiedit.match_symbol_and_next",
        "multiedit.toggle_or_restrict",
        "multiedit.open_above",
        "multiedit.force_normal",
        "multiedit.restore",
        "multiedit.ex",
    ):
        assert action_id in registry


def test_duplicate_registration_rejected() -> None:
    registry = ActionRegistry(DEFAULT_ACTIONS)

    with pytest.raises(ValueError):
        registry.register_action(DEFAULT_ACTIONS[0])

    registry.register_action(DEFAULT_ACTIONS[0], replace=True)
    assert registry.revision() == len(DEFAULT_ACTIONS) + 1


def test_unknown_action_raises_key_error() -> None:
    with pytest.raises(KeyError):
        default_registry().dispatch(make_session(), "multiedit.nope")


def test_dispatch_runs_full_edit_cycle() -> None:
    registry = default_registry()
    session = make_session()

    started = registry.dispatch(session, "multiedit.match_all")
    assert started.ok and started.payload == ((0, 3), (8, 11))
    assert started.state is SessionState.ACTIVE

    entered = registry.dispatch(session, "multiedit.append")
    assert entered.state is SessionState.INSERT_FOCUSED
    session.type_text("d")
    registry.dispatch(session, "multiedit.exit_insert")
    ended = registry.dispatch(session, "multiedit.abort")

    assert session.buffer.text == "food bar food"
    assert ended.state is SessionState.INACTIVE
    assert ended.payload == (0, 9)


def test_errors_become_results() -> None:
    registry = default_registry()
    session = make_session()

    result = registry.dispatch(session, "multiedit.next")

    assert not result.ok
    assert result.consumed
    assert result.status == "invalid_state"
    assert result.error == "SessionStateError"

    registry.dispatch(session, "multiedit.match_all")
    registry.dispatch(session, "multiedit.next")
    exhausted = registry.dispatch(session, "multiedit.next")

    assert exhausted.status == "no_more_occurrences"
    assert session.buffer.point == 8


def test_unexpected_errors_propagate() -> None:
    @session_action
    def explode(session: MultieditSession) -> ActionResult:
        raise ZeroDivisionError("boom")

    with pytest.raises(ZeroDivisionError):
        explode(make_session())


def test_match_symbol_and_next_uses_symbols() -> None:
    registry = default_registry()
    session = make_session("a_b a a_b")

    registry.dispatch(session, "multiedit.match_symbol_and_next")
    result = registry.dispatch(session, "multiedit.match_symbol_and_next")

    assert result.payload == (6, 9)
    assert session.pattern is not None and session.pattern.literal_text == "a_b"


def test_toggle_or_restrict_uses_host_selection() -> None:
    registry = default_registry()
    session = make_session("foo bar foo baz foo")
    registry.dispatch(session, "multiedit.match_all")
    session.buffer.state.set_selection(5, 19)

    result = registry.dispatch(session, "multiedit.toggle_or_restrict")

    assert result.payload == ((0, 3),)
    assert session.buffer.state.selection is None
    assert [region.start for region in session.regions] == [8, 16]


def test_no_recall_action_and_restore() -> None:
    registry = default_registry()
    session = make_session()

    registry.dispatch(session, "multiedit.match_all_no_recall")
    registry.dispatch(session, "multiedit.abort")
    result = registry.dispatch(session, "multiedit.restore")

    assert result.status == "no_history"


def test_force_normal_when_inactive_is_not_consumed() -> None:
    result = default_registry().dispatch(make_session(), "multiedit.force_normal")

    assert not result.consumed
    assert result.status == "noop"


def test_paste_replace_action() -> None:
    registry = default_registry()
    session = make_session()
    session.buffer.registers.yank_to('"', "qux")
    registry.dispatch(session, "multiedit.match_all")

    result = registry.dispatch(session, "multiedit.paste_replace")

    assert session.buffer.text == "qux bar qux"
    assert result.payload == ((0, 3), (8, 11))
