"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument


class BufferValidationError(RuntimeError):
    """Raised when callers hand the buffer out-of-bounds positions."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset


def ensure_offset(document: BufferDocument, offset: int) -> int:
    if offset < 0 or offset > len(document):
        raise BufferValidationError("Offset out of range", offset=offset)
    return offset


def ensure_range(document: BufferDocument, start: int, end: int) -> tuple[int, int]:
    ensure_offset(document, start)
    ensure_offset(document, end)
    if start > end:
        raise BufferValidationError("Range start after end", offset=start)
    return start, end
