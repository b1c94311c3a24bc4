"""High-level buffer façade: the host runtime multiedit sessions drive.

Combines the document, point/selection state, registers, tracked spans,
search history, a viewport and syntactic unit lookups.
"""

from __future__ import annotations

import re
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Callable, ContextManager, Dict, List, Optional, Pattern, Tuple

from multiedit.runtime import telemetry

from .document import BufferDocument
from .registers import RegisterBank
from .spans import BufferEdit, SpanTracker, TrackedSpan
from .state import BufferState, Selection
from .units import DEFAULT_UNITS, UnitRange, UnitResolver
from .validation import BufferValidationError, ensure_offset, ensure_range

EditListener = Callable[["Buffer", BufferEdit], None]

WHITESPACE = "whitespace"
WORD = "word"
SYMBOL = "symbol"
PUNCTUATION = "punctuation"


@dataclass(slots=True)
class BufferDelta:
    version: int
    edit: BufferEdit
    point: int
    label: str


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.registers = registers or RegisterBank()
        self.spans = SpanTracker()
        self.search_history: List[str] = []
        self.viewport: Tuple[int, int] = (0, 0)
        self._units: Dict[str, UnitResolver] = dict(DEFAULT_UNITS)
        self._listeners: List[EditListener] = []

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_text(text))

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def point(self) -> int:
        return self.state.point

    def set_point(self, offset: int) -> None:
        self.state.set_point(ensure_offset(self.document, offset))

    # -- editing -----------------------------------------------------------

    def subscribe(self, listener: EditListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: EditListener) -> None:
        self._listeners = [known for known in self._listeners if known != listener]

    def replace_range(
        self,
        start: int,
        end: int,
        text: str,
        *,
        label: str,
        owner: Optional[TrackedSpan] = None,
        outside: Optional[str] = None,
    ) -> BufferDelta:
        """Replace ``[start, end)`` with ``text`` and move every tracked span.

        ``owner`` and ``outside`` settle which span a boundary insertion
        belongs to; see ``multiedit.buffer.spans``.
        """

        start, end = ensure_range(self.document, start, end)
        with Transaction(self, label) as tx:
            edit = BufferEdit(
                start=start,
                end=end,
                text=text,
                removed=self.document.text[start:end],
                version=self.document.version + 1,
            )
            touched = self.spans.apply(edit, owner=owner, outside=outside)
            self.document = self.document.replace(start, end, text)
            self.state.set_point(_map_point(self.state.point, edit))
            self.state.last_change_tick = self.document.version
            tx.commit(edit)

            for listener in list(self._listeners):
                listener(self, edit)
            for span, change in touched:
                if span.alive:
                    span.notify(change)

        return BufferDelta(
            version=self.document.version,
            edit=edit,
            point=self.state.point,
            label=label,
        )

    def insert_text(
        self,
        text: str,
        *,
        at: Optional[int] = None,
        owner: Optional[TrackedSpan] = None,
        outside: Optional[str] = None,
    ) -> BufferDelta:
        position = self.state.point if at is None else at
        return self.replace_range(
            position, position, text, label="insert_text", owner=owner, outside=outside
        )

    def delete_range(self, start: int, end: int) -> BufferDelta:
        return self.replace_range(start, end, "", label="delete_range")

    def get_text_range(self, start: int, end: int) -> str:
        if start > end:
            start, end = end, start
        start, end = ensure_range(self.document, start, end)
        return self.document.text[start:end]

    # -- spans -------------------------------------------------------------

    def track(self, span: TrackedSpan) -> TrackedSpan:
        try:
            ensure_range(self.document, span.start, span.end)
        except BufferValidationError:
            telemetry.record_event(
                "buffer.track_rejected",
                level="warning",
                data={"buffer": self.name, "start": span.start, "end": span.end},
            )
            raise
        return self.spans.track(span)

    def untrack(self, span: TrackedSpan) -> None:
        self.spans.untrack(span)

    # -- queries -----------------------------------------------------------

    def search(
        self, pattern: Pattern[str] | str, start: int = 0, end: Optional[int] = None
    ) -> List[Tuple[int, int]]:
        """Non-overlapping, non-empty matches lying wholly inside ``[start, end]``.

        The regex sees the full text so boundary assertions at ``start`` and
        ``end`` look at the real neighbouring characters.
        """

        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        limit = len(self.document) if end is None else end
        found: List[Tuple[int, int]] = []
        for match in compiled.finditer(self.document.text, start):
            if match.start() >= limit:
                break
            if match.end() == match.start() or match.end() > limit:
                continue
            found.append((match.start(), match.end()))
        return found

    def char_class(self, offset: int, *, symbol_chars: str = "_") -> Optional[str]:
        if offset < 0 or offset >= len(self.document):
            return None
        return classify_char(self.document.text[offset], symbol_chars)

    def run_bounds(self, offset: int, accept: Callable[[str], bool]) -> Tuple[int, int]:
        """Extend from ``offset`` in both directions while ``accept`` holds."""

        text = self.document.text
        start = offset
        while start > 0 and accept(text[start - 1]):
            start -= 1
        end = offset
        while end < len(text) and accept(text[end]):
            end += 1
        return start, end

    def set_viewport(self, top_row: int, height: int) -> None:
        if top_row < 0 or height < 0:
            raise BufferValidationError("Viewport must be non-negative")
        self.viewport = (top_row, height)

    def visible_range(self) -> Tuple[int, int]:
        """Offsets covered by the viewport; a zero height means every line."""

        top, height = self.viewport
        last_row = self.document.line_count - 1
        if height == 0:
            return 0, len(self.document)
        top = min(top, last_row)
        bottom = min(top + height - 1, last_row)
        return self.document.line_start(top), self.document.line_end(bottom)

    def register_unit(self, name: str, resolver: UnitResolver) -> None:
        self._units[name] = resolver

    def unit_range(self, name: str, point: Optional[int] = None) -> UnitRange:
        """Range of the named unit at ``point``; ``KeyError`` for unknown names."""

        resolver = self._units[name]
        position = self.state.point if point is None else point
        return resolver(self.document.text, position)

    def push_search(self, pattern: str) -> None:
        if self.search_history and self.search_history[-1] == pattern:
            return
        self.search_history.append(pattern)


class Transaction(AbstractContextManager["Transaction"]):
    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self.edit: Optional[BufferEdit] = None
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def commit(self, edit: BufferEdit) -> None:
        self.edit = edit
        if self._handle is not None:
            self._handle.add_metadata("range", (edit.start, edit.end))
            self._handle.add_metadata("delta", edit.delta)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


def classify_char(char: str, symbol_chars: str = "_") -> str:
    if char.isspace():
        return WHITESPACE
    if char.isalnum():
        return WORD
    if char in symbol_chars:
        return SYMBOL
    return PUNCTUATION


def _map_point(point: int, edit: BufferEdit) -> int:
    if point < edit.start:
        return point
    if point >= edit.end and point > edit.start:
        return point + edit.delta
    return edit.start + len(edit.text)
