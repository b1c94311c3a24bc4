"""Seed derivation: from a selection or the point to a search pattern."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from multiedit.buffer import Buffer, classify_char
from multiedit.buffer.buffer import PUNCTUATION, SYMBOL, WHITESPACE, WORD
from multiedit.runtime import telemetry
from multiedit.runtime.config import MultieditSettings

from .errors import CommandParseError, NoMatchableError
from .models import Boundary, Pattern, Region, Scope

Seed = Tuple[Pattern, Region]


class PatternDeriver:
    """Turns a seed span into a ``Pattern`` and the region it came from."""

    def __init__(self, settings: MultieditSettings) -> None:
        self.settings = settings
        self.logger = telemetry.get_logger("multiedit.engine.pattern")

    def derive(
        self,
        buffer: Buffer,
        *,
        point: Optional[int] = None,
        selection: Optional[Tuple[int, int]] = None,
        use_symbols: Optional[bool] = None,
    ) -> Seed:
        """Derive the seed from ``selection`` verbatim, else from ``point``.

        At the point, whitespace and punctuation runs win when their
        matching policies are on; otherwise the symbol or word under (or
        just before) the point is taken, anchored at both ends.
        """

        if selection is not None:
            return self._from_selection(buffer, selection)

        position = buffer.point if point is None else point
        chars = self.settings.symbol_chars
        kind = buffer.char_class(position, symbol_chars=chars)

        if kind == WHITESPACE and self.settings.match_whitespace:
            start, end = buffer.run_bounds(position, str.isspace)
            return self._unanchored(buffer, start, end), Region(start, end)

        if kind == PUNCTUATION and self.settings.match_punctuation:
            start, end = buffer.run_bounds(
                position, lambda ch: classify_char(ch, chars) == PUNCTUATION
            )
            return self._unanchored(buffer, start, end), Region(start, end)

        symbols = self.settings.use_symbols if use_symbols is None else use_symbols
        accepted = {WORD, SYMBOL} if symbols else {WORD}
        bounds = self._thing_at(buffer, position, accepted)
        if bounds is None:
            raise NoMatchableError(position)

        start, end = bounds
        pattern = Pattern(
            literal_text=buffer.text[start:end],
            anchor_start=True,
            anchor_end=True,
            boundary=Boundary.SYMBOL if symbols else Boundary.WORD,
            symbol_chars=chars,
            case_sensitive=self.settings.case_sensitive,
        )
        if self.settings.smart_match_boundaries:
            pattern = self._smart(buffer, pattern, start, end)
        return pattern, Region(start, end)

    def derive_range(self, buffer: Buffer, start: int, end: int) -> Seed:
        """Seed from a host-supplied range that is not a visual selection."""

        if start >= end:
            raise NoMatchableError(start)
        pattern = self._unanchored(buffer, start, end)
        if self.settings.smart_match_boundaries:
            pattern = self._smart(buffer, pattern, start, end)
        return pattern, Region(start, end)

    def from_regexp(
        self, buffer: Buffer, regexp: str, scope: Scope, *, point: Optional[int] = None
    ) -> Seed:
        """Seed from a raw regular expression: its first match in ``scope``
        at or after the point, wrapping to the first match in ``scope``."""

        flags = 0 if self.settings.case_sensitive else re.IGNORECASE
        try:
            compiled = re.compile(regexp, flags)
        except re.error as exc:
            raise CommandParseError(regexp, f"Invalid regexp ({exc})") from exc

        matches = buffer.search(compiled, scope.start, scope.end)
        if not matches:
            raise NoMatchableError(scope.start if point is None else point)
        position = buffer.point if point is None else point
        start, end = next(
            (bounds for bounds in matches if bounds[0] >= position), matches[0]
        )
        pattern = Pattern(
            literal_text=buffer.text[start:end],
            case_sensitive=self.settings.case_sensitive,
            regexp=regexp,
        )
        return pattern, Region(start, end)

    def _from_selection(self, buffer: Buffer, selection: Tuple[int, int]) -> Seed:
        start, end = sorted(selection)
        if start == end:
            raise NoMatchableError(start)
        return self._unanchored(buffer, start, end), Region(start, end)

    def _unanchored(self, buffer: Buffer, start: int, end: int) -> Pattern:
        return Pattern(
            literal_text=buffer.get_text_range(start, end),
            symbol_chars=self.settings.symbol_chars,
            case_sensitive=self.settings.case_sensitive,
        )

    def _thing_at(
        self, buffer: Buffer, position: int, accepted: set[str]
    ) -> Optional[Tuple[int, int]]:
        chars = self.settings.symbol_chars

        def accept(ch: str) -> bool:
            return classify_char(ch, chars) in accepted

        for probe in (position, position - 1):
            if buffer.char_class(probe, symbol_chars=chars) in accepted:
                return buffer.run_bounds(probe, accept)
        return None

    def _smart(self, buffer: Buffer, pattern: Pattern, start: int, end: int) -> Pattern:
        text = buffer.text
        before = text[start - 1] if start > 0 else ""
        after = text[end] if end < len(text) else ""
        refined = Pattern(
            literal_text=pattern.literal_text,
            anchor_start=not before.isalnum(),
            anchor_end=not after.isalnum(),
            boundary=pattern.boundary,
            symbol_chars=pattern.symbol_chars,
            case_sensitive=pattern.case_sensitive,
        )
        if refined != pattern:
            self.logger.debug(
                f"smart boundaries: {pattern.literal_text!r} "
                f"anchors=({refined.anchor_start}, {refined.anchor_end})"
            )
        return refined

