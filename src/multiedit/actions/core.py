"""Session verbs exposed to the key-dispatch layer.

Every handler takes the session plus keyword arguments supplied by the
binding and returns an ``ActionResult``. Failures from the error taxonomy
become results with the error's status; anything else propagates.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable, Optional, Tuple

from multiedit.engine import Direction, MultieditError, Region
from multiedit.modes.base import ActionResult
from multiedit.modes.session import MultieditSession
from multiedit.runtime import telemetry

SessionVerb = Callable[..., ActionResult]


def session_action(func: SessionVerb) -> SessionVerb:
    """Turn ``MultieditError`` raised by ``func`` into an error result."""

    @wraps(func)
    def wrapper(session: MultieditSession, **kwargs: object) -> ActionResult:
        try:
            return func(session, **kwargs)
        except MultieditError as exc:
            telemetry.record_event(
                "action.failed",
                level="warning",
                data={"action": func.__name__, "status": exc.status, "error": str(exc)},
            )
            return ActionResult(
                consumed=True,
                state=session.state,
                status=exc.status,
                message=str(exc),
                error=type(exc).__name__,
            )

    return wrapper


def _result(
    session: MultieditSession,
    message: str,
    payload: Optional[object] = None,
    *,
    status: str = "ok",
) -> ActionResult:
    return ActionResult(
        consumed=True,
        state=session.state,
        status=status,
        message=message,
        payload=payload,
    )


def _bounds(regions: Iterable[Region]) -> Tuple[Tuple[int, int], ...]:
    return tuple(region.bounds for region in regions)


def _selection(session: MultieditSession, selection: object) -> Optional[Tuple[int, int]]:
    if selection is not None:
        start, end = selection  # type: ignore[misc]
        return int(start), int(end)
    return session.buffer.state.selection


# -- starting ------------------------------------------------------------------


@session_action
def match_all(
    session: MultieditSession,
    *,
    selection: object = None,
    scope: Optional[str] = None,
    no_recall: bool = False,
) -> ActionResult:
    created = session.match_all(
        selection=_selection(session, selection), scope=scope, no_recall=no_recall
    )
    return _result(session, f"{len(session.regions)} occurrences", _bounds(created))


@session_action
def match_all_no_recall(
    session: MultieditSession, *, selection: object = None, scope: Optional[str] = None
) -> ActionResult:
    return match_all(session, selection=selection, scope=scope, no_recall=True)


def _match_step(
    session: MultieditSession,
    direction: Direction,
    *,
    selection: object,
    scope: Optional[str],
    use_symbols: Optional[bool],
) -> ActionResult:
    region = session.match_and_next(
        direction,
        selection=_selection(session, selection),
        scope=scope,
        use_symbols=use_symbols,
    )
    return _result(session, f"{len(session.regions)} occurrences", region.bounds)


@session_action
def match_and_next(
    session: MultieditSession, *, selection: object = None, scope: Optional[str] = None
) -> ActionResult:
    return _match_step(
        session, Direction.FORWARD, selection=selection, scope=scope, use_symbols=None
    )


@session_action
def match_and_prev(
    session: MultieditSession, *, selection: object = None, scope: Optional[str] = None
) -> ActionResult:
    return _match_step(
        session, Direction.BACKWARD, selection=selection, scope=scope, use_symbols=None
    )


@session_action
def match_symbol_and_next(
    session: MultieditSession, *, scope: Optional[str] = None
) -> ActionResult:
    return _match_step(
        session, Direction.FORWARD, selection=None, scope=scope, use_symbols=True
    )


@session_action
def match_symbol_and_prev(
    session: MultieditSession, *, scope: Optional[str] = None
) -> ActionResult:
    return _match_step(
        session, Direction.BACKWARD, selection=None, scope=scope, use_symbols=True
    )


@session_action
def restore(session: MultieditSession) -> ActionResult:
    kept = session.restore()
    return _result(session, f"{len(kept)} occurrences restored", _bounds(kept))


# -- set editing ---------------------------------------------------------------


@session_action
def toggle(session: MultieditSession, *, point: Optional[int] = None) -> ActionResult:
    region = session.toggle(point=point)
    if region is None:
        return _result(session, "region removed", status="removed")
    return _result(session, "region added", region.bounds)


@session_action
def toggle_or_restrict(
    session: MultieditSession, *, selection: object = None
) -> ActionResult:
    bounds = _selection(session, selection)
    if bounds is None:
        return toggle(session)
    dropped = session.restrict(*bounds)
    session.buffer.state.clear_selection()
    return _result(session, f"{len(dropped)} occurrences dropped", _bounds(dropped))


# -- navigation ----------------------------------------------------------------


@session_action
def next_occurrence(session: MultieditSession) -> ActionResult:
    region = session.next()
    return _result(session, "next occurrence", region.bounds)


@session_action
def prev_occurrence(session: MultieditSession) -> ActionResult:
    region = session.prev()
    return _result(session, "previous occurrence", region.bounds)


# -- insertion -----------------------------------------------------------------


def _entered(session: MultieditSession, region: Optional[Region]) -> ActionResult:
    if region is None:
        return _result(session, "insert at line start", status="fallback")
    return _result(session, "insert", region.bounds)


@session_action
def insert(session: MultieditSession) -> ActionResult:
    return _entered(session, session.insert())


@session_action
def append(session: MultieditSession) -> ActionResult:
    return _entered(session, session.append())


@session_action
def open_below(session: MultieditSession) -> ActionResult:
    return _entered(session, session.open_below())


@session_action
def open_above(session: MultieditSession) -> ActionResult:
    return _entered(session, session.open_above())


@session_action
def change(session: MultieditSession, *, register: str = '"') -> ActionResult:
    return _entered(session, session.change(register=register))


@session_action
def substitute(session: MultieditSession, *, count: int = 1) -> ActionResult:
    return _entered(session, session.substitute(count))


@session_action
def exit_insert(session: MultieditSession) -> ActionResult:
    session.exit_insert()
    return _result(session, "exit insert")


# -- bulk edits ----------------------------------------------------------------


@session_action
def paste_replace(session: MultieditSession, *, register: str = '"') -> ActionResult:
    session.paste_replace(register=register)
    return _result(session, "replaced occurrences", _bounds(session.regions))


@session_action
def delete_occurrences(
    session: MultieditSession, *, register: str = '"'
) -> ActionResult:
    session.delete_occurrences(register=register)
    return _result(session, "deleted occurrences", _bounds(session.regions))


# -- ending --------------------------------------------------------------------


@session_action
def abort(session: MultieditSession) -> ActionResult:
    starts = session.abort()
    return _result(session, "multiedit ended", starts)


@session_action
def force_normal(session: MultieditSession) -> ActionResult:
    if session.force_normal():
        return _result(session, "multiedit ended")
    return ActionResult(consumed=False, state=session.state, status="noop")


__all__ = [
    "session_action",
    "match_all",
    "match_all_no_recall",
    "match_and_next",
    "match_and_prev",
    "match_symbol_and_next",
    "match_symbol_and_prev",
    "restore",
    "toggle",
    "toggle_or_restrict",
    "next_occurrence",
    "prev_occurrence",
    "insert",
    "append",
    "open_below",
    "open_above",
    "change",
    "substitute",
    "exit_insert",
    "paste_replace",
    "delete_occurrences",
    "abort",
    "force_normal",
]
