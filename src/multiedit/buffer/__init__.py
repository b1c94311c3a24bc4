"""Host buffer: document storage, tracked spans, registers and unit lookups."""

from .buffer import Buffer, BufferDelta, Transaction, classify_char
from .document import BufferDocument
from .registers import RegisterBank, RegisterValue
from .spans import (
    AFTER_SPANS,
    BEFORE_SPANS,
    BufferEdit,
    SpanEdit,
    SpanTracker,
    TrackedSpan,
    adjust_bounds,
)
from .state import BufferState, Selection
from .units import DEFAULT_UNITS
from .validation import BufferValidationError, ensure_offset, ensure_range

__all__ = [
    "Buffer",
    "BufferDelta",
    "Transaction",
    "classify_char",
    "BufferDocument",
    "BufferState",
    "Selection",
    "RegisterBank",
    "RegisterValue",
    "AFTER_SPANS",
    "BEFORE_SPANS",
    "BufferEdit",
    "SpanEdit",
    "SpanTracker",
    "TrackedSpan",
    "adjust_bounds",
    "DEFAULT_UNITS",
    "BufferValidationError",
    "ensure_offset",
    "ensure_range",
]
