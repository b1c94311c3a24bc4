"""Shared result and event types for multiedit sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from multiedit.engine import SessionState

LIVE_STATES = (SessionState.ACTIVE, SessionState.INSERT_FOCUSED)


@dataclass(slots=True)
class ActionResult:
    """Outcome handed back to the key-dispatch layer for one action."""

    consumed: bool
    state: SessionState = SessionState.INACTIVE
    status: str = "ok"
    message: Optional[str] = None
    payload: Optional[object] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionBus:
    """Minimal event bus letting hosts observe session changes."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)
        for callback in self._subscribers.get("*", []):
            callback({"event": event, "payload": payload})


__all__ = ["ActionResult", "SessionBus", "LIVE_STATES"]
