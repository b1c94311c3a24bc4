"""Error taxonomy for match discovery and editing sessions."""

from __future__ import annotations

from typing import Optional


class MultieditError(RuntimeError):
    """Base class for every user-visible multiedit failure."""

    status = "error"


class NoMatchableError(MultieditError):
    """Nothing boundable exists at the point to seed a pattern from."""

    status = "no_matchable"

    def __init__(self, point: int) -> None:
        super().__init__(f"Nothing to match at position {point}")
        self.point = point


class InvalidScopeError(MultieditError):
    """The requested scope unit is unknown or absent at the point."""

    status = "invalid_scope"

    def __init__(self, scope: str, point: Optional[int] = None) -> None:
        where = "" if point is None else f" at position {point}"
        super().__init__(f"No '{scope}' scope{where}")
        self.scope = scope
        self.point = point


class NoMoreMatchesError(MultieditError):
    """Incremental discovery found no unclaimed match in the scope."""

    status = "no_more_matches"

    def __init__(self, direction: str) -> None:
        super().__init__(f"No more matches {direction}")
        self.direction = direction


class NoMoreOccurrencesError(MultieditError):
    """Navigation found no region beyond the cursor."""

    status = "no_more_occurrences"

    def __init__(self, direction: str) -> None:
        super().__init__(f"No more occurrences {direction}")
        self.direction = direction


class RegionCreationError(MultieditError):
    """A region could not be created as a tracked span."""

    status = "region_creation_failed"

    def __init__(self, message: str, *, start: int, end: int) -> None:
        super().__init__(message)
        self.start = start
        self.end = end


class SessionStateError(MultieditError):
    """The operation is not legal in the session's current state."""

    status = "invalid_state"

    def __init__(self, operation: str, state: str) -> None:
        super().__init__(f"Cannot {operation} while {state}")
        self.operation = operation
        self.state = state


class NoHistoryError(MultieditError):
    """There is no previous session to restore for this document."""

    status = "no_history"

    def __init__(self, document: str) -> None:
        super().__init__(f"No previous multiedit session in '{document}'")
        self.document = document


class CommandParseError(MultieditError):
    """An ex-style command line could not be parsed."""

    status = "command_error"

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{reason}: {command!r}")
        self.command = command
        self.reason = reason


__all__ = [
    "MultieditError",
    "NoMatchableError",
    "InvalidScopeError",
    "NoMoreMatchesError",
    "NoMoreOccurrencesError",
    "RegionCreationError",
    "SessionStateError",
    "NoHistoryError",
    "CommandParseError",
]
