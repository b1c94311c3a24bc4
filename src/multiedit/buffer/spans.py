"""Tracked spans whose bounds follow edits to the document.

Rule set, for an edit replacing ``[s, e)`` with ``n`` characters
(``delta = n - (e - s)``) applied to a span ``[a, b)``:

Pure insertion (``s == e``)
    ``s < a``          shift: ``a += n``, ``b += n``
    ``a < s < b``      grow: ``b += n``
    ``s == a``/``b``   greedy spans grow (``b += n``); otherwise insertion at
                       ``a`` shifts and insertion at ``b`` leaves the span alone
    ``s > b``          unchanged

Replacement or deletion (``e > s``)
    ``e <= a``         shift by ``delta``
    ``s >= b``         unchanged
    ``a <= s``, ``e <= b``
                       contained: ``b += delta``
    ``s < a < e < b``  head clipped: ``a = s + n``, ``b += delta``
    ``a < s < b < e``  tail clipped: ``b = s``
    otherwise          the edit swallows the span: collapse to ``s`` and die

A pure insertion on a boundary shared by several greedy spans belongs to
one of them: the ``owner`` passed with the edit when it touches the
boundary, otherwise the span ending there. The others step aside (a span
ending at ``s`` stays, a span starting at ``s`` shifts). An insertion placed
``outside`` belongs to no span; empty spans at ``s`` then stay
(``AFTER_SPANS``) or shift (``BEFORE_SPANS``).

An edit is reported to a span's listeners only when it is contained in the
span (boundaries inclusive for greedy spans), which is how change
notifications stay scoped to one span.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

BEFORE_SPANS = "before"
AFTER_SPANS = "after"


@dataclass(frozen=True, slots=True)
class BufferEdit:
    """One replacement applied to a document, in pre-edit coordinates."""

    start: int
    end: int
    text: str
    removed: str
    version: int

    @property
    def delta(self) -> int:
        return len(self.text) - (self.end - self.start)


@dataclass(frozen=True, slots=True)
class SpanEdit:
    """An edit translated to offsets relative to the span that contained it."""

    edit: BufferEdit
    rel_start: int
    rel_end: int


SpanListener = Callable[["TrackedSpan", SpanEdit], None]


@dataclass(eq=False)
class TrackedSpan:
    start: int
    end: int
    greedy: bool = True
    alive: bool = True
    listeners: List[SpanListener] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("span start must not exceed end")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def empty(self) -> bool:
        return self.start == self.end

    def contains_edit(self, start: int, end: int) -> bool:
        if not self.alive:
            return False
        if self.greedy:
            return self.start <= start and end <= self.end
        if start == end:
            return self.start < start < self.end
        return self.start <= start and end <= self.end

    def subscribe(self, listener: SpanListener) -> None:
        self.listeners.append(listener)

    def notify(self, change: SpanEdit) -> None:
        for listener in list(self.listeners):
            listener(self, change)

    def adjust(self, edit: BufferEdit) -> None:
        self.start, self.end, self.alive = adjust_bounds(
            self.start, self.end, edit.start, edit.end, len(edit.text), self.greedy
        )


def adjust_bounds(
    a: int, b: int, s: int, e: int, n: int, greedy: bool = True
) -> Tuple[int, int, bool]:
    """Apply the rule set above; returns ``(start, end, alive)``."""

    delta = n - (e - s)
    if s == e:
        if s < a:
            return a + n, b + n, True
        if s > b:
            return a, b, True
        if a < s < b or greedy:
            return a, b + n, True
        if s == a:
            return a + n, b + n, True
        return a, b, True

    if e <= a:
        return a + delta, b + delta, True
    if s >= b:
        return a, b, True
    if a <= s and e <= b:
        return a, b + delta, True
    if s < a and e < b:
        return s + n, b + delta, True
    if a < s and b < e:
        return a, s, True
    return s, s, False


class SpanTracker:
    """Registry of spans kept in step with a document."""

    def __init__(self) -> None:
        self._spans: List[TrackedSpan] = []

    def __len__(self) -> int:
        return len(self._spans)

    def __contains__(self, span: object) -> bool:
        return any(span is tracked for tracked in self._spans)

    def track(self, span: TrackedSpan) -> TrackedSpan:
        """Start tracking ``span``; spans are kept in document order."""

        if span not in self:
            span.alive = True
            position = next(
                (i for i, tracked in enumerate(self._spans) if tracked.start > span.start),
                len(self._spans),
            )
            self._spans.insert(position, span)
        return span

    def untrack(self, span: TrackedSpan) -> None:
        self._spans = [tracked for tracked in self._spans if tracked is not span]

    def apply(
        self,
        edit: BufferEdit,
        *,
        owner: Optional[TrackedSpan] = None,
        outside: Optional[str] = None,
    ) -> List[Tuple[TrackedSpan, SpanEdit]]:
        """Adjust every span for ``edit``; return the spans that contained it."""

        if outside not in (None, BEFORE_SPANS, AFTER_SPANS):
            raise ValueError(f"unknown placement {outside!r}")
        touching: List[TrackedSpan] = []
        winner: Optional[TrackedSpan] = None
        if edit.start == edit.end:
            touching = [
                span
                for span in self._spans
                if span.alive and span.greedy and edit.start in (span.start, span.end)
            ]
            if touching and outside is None:
                winner = _boundary_owner(touching, edit.start, owner)

        touched: List[Tuple[TrackedSpan, SpanEdit]] = []
        survivors: List[TrackedSpan] = []
        for span in self._spans:
            if span is not winner and any(span is t for t in touching):
                if not _text_lands_after(span, edit.start, winner, outside, self._spans):
                    span.start += len(edit.text)
                    span.end += len(edit.text)
                survivors.append(span)
                continue
            if span.contains_edit(edit.start, edit.end):
                touched.append(
                    (
                        span,
                        SpanEdit(
                            edit=edit,
                            rel_start=edit.start - span.start,
                            rel_end=edit.end - span.start,
                        ),
                    )
                )
            span.adjust(edit)
            if span.alive:
                survivors.append(span)
        self._spans = survivors
        return touched


def _boundary_owner(
    touching: Sequence[TrackedSpan], position: int, owner: Optional[TrackedSpan]
) -> TrackedSpan:
    if owner is not None and any(owner is span for span in touching):
        return owner
    return next((span for span in touching if span.start < position), touching[0])


def _text_lands_after(
    span: TrackedSpan,
    position: int,
    winner: Optional[TrackedSpan],
    outside: Optional[str],
    order: Sequence[TrackedSpan],
) -> bool:
    """Whether text inserted at ``position`` ends up after ``span``."""

    if span.start < position:
        return True
    if span.end > position:
        return False
    if winner is None:
        return outside == AFTER_SPANS
    if winner.start < position:
        return False
    if winner.end > position:
        return True
    return _index_of(order, span) < _index_of(order, winner)


def _index_of(order: Sequence[TrackedSpan], span: TrackedSpan) -> int:
    return next(i for i, tracked in enumerate(order) if tracked is span)


__all__ = [
    "AFTER_SPANS",
    "BEFORE_SPANS",
    "BufferEdit",
    "SpanEdit",
    "SpanListener",
    "TrackedSpan",
    "SpanTracker",
    "adjust_bounds",
]
