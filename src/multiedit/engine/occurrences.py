"""The live set of edit regions and how new ones are discovered."""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from multiedit.buffer import (
    Buffer,
    BufferEdit,
    BufferValidationError,
    SpanEdit,
    TrackedSpan,
    adjust_bounds,
)
from multiedit.runtime import telemetry
from multiedit.runtime.config import MultieditSettings

from .errors import NoMoreMatchesError, RegionCreationError
from .models import Direction, Pattern, Region, Scope

RegionListener = Callable[[Region, SpanEdit], None]

# Upper bound on candidates ``discover_next`` may reject in one call.
MAX_REJECTED_CANDIDATES = 1000


class OccurrenceIndex:
    """Owns the session's regions, kept sorted by start position.

    Regions never overlap, though neighbours may share a boundary.
    Incremental discovery walks outward from ``outer_start``/``outer_end``,
    the smallest start and largest end seen so far.
    """

    def __init__(
        self,
        buffer: Buffer,
        settings: MultieditSettings,
        *,
        logger_name: str | None = None,
    ) -> None:
        self.buffer = buffer
        self.settings = settings
        self.outer_start: Optional[int] = None
        self.outer_end: Optional[int] = None
        self._regions: List[Region] = []
        self._listeners: List[RegionListener] = []
        self._next_id = 1
        self._logger_name = logger_name
        self.logger = telemetry.get_logger(logger_name or "multiedit.engine.occurrences")
        buffer.subscribe(self._follow_edit)

    # -- collection --------------------------------------------------------

    @property
    def regions(self) -> Tuple[Region, ...]:
        self._prune()
        return tuple(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self.regions)

    def __len__(self) -> int:
        return len(self.regions)

    def starts(self) -> Tuple[int, ...]:
        return tuple(region.start for region in self.regions)

    def region_at(self, position: int) -> Optional[Region]:
        for region in self.regions:
            if region.covers(position):
                return region
        return None

    def next_after(self, position: int) -> Optional[Region]:
        return next((r for r in self.regions if r.start > position), None)

    def previous_before(self, position: int) -> Optional[Region]:
        return next((r for r in reversed(self.regions) if r.start < position), None)

    def subscribe(self, listener: RegionListener) -> None:
        self._listeners.append(listener)

    # -- mutation ----------------------------------------------------------

    def add(self, region: Region) -> Region:
        """Adopt a detached region (a derived seed) into the set."""

        if self._claimed(region.start, region.end):
            raise RegionCreationError(
                "Region overlaps an existing region",
                start=region.start,
                end=region.end,
            )
        self._track(region, is_marker=region.is_marker)
        self._extend_bounds((region,))
        return region

    def discover_all(self, pattern: Pattern, scope: Scope) -> List[Region]:
        """Claim every unclaimed match of ``pattern`` inside ``scope``.

        Either every match becomes a region or, if the host refuses one,
        none does.
        """

        with telemetry.span(
            "occurrences::discover_all",
            logger_name=self._logger_name,
            component="occurrences",
            metadata={"pattern": pattern.regex, "scope": (scope.start, scope.end)},
        ) as handle:
            accepted: List[Tuple[int, int]] = []
            for start, end in self.buffer.search(pattern.compile(), scope.start, scope.end):
                if self._claimed(start, end):
                    continue
                if accepted and start < accepted[-1][1]:
                    continue
                accepted.append((start, end))

            created: List[Region] = []
            try:
                for start, end in accepted:
                    created.append(self._create(start, end))
            except RegionCreationError:
                for region in created:
                    self._discard(region)
                raise

            self._extend_bounds(created)
            handle.add_metadata("created", len(created))
            return created

    def discover_next(
        self, pattern: Pattern, direction: Direction, scope: Scope
    ) -> Region:
        """Claim the next unclaimed match beyond the outer bound.

        Raises ``NoMoreMatchesError`` with the set and bounds untouched when
        the scope holds no further candidate.
        """

        direction = Direction(direction)
        with telemetry.span(
            "occurrences::discover_next",
            logger_name=self._logger_name,
            component="occurrences",
            metadata={"pattern": pattern.regex, "direction": direction.value},
        ) as handle:
            rejected = 0
            for start, end in self._candidates(pattern, direction, scope):
                if self._claimed(start, end) or self._skippable(pattern, start, end):
                    rejected += 1
                    if rejected >= MAX_REJECTED_CANDIDATES:
                        handle.add_metadata("rejected_cap", rejected)
                        break
                    continue
                region = self._create(start, end)
                self._extend_bounds((region,))
                handle.add_metadata("region", region.bounds)
                return region

            telemetry.record_event(
                "occurrences.exhausted",
                data={"direction": direction.value, "rejected": rejected},
            )
            raise NoMoreMatchesError(direction.value)

    def toggle(
        self,
        position: int,
        *,
        pattern: Optional[Pattern] = None,
        scope: Optional[Scope] = None,
    ) -> Optional[Region]:
        """Remove the region at ``position``, or claim what lies there.

        With a ``pattern``, an unclaimed match covering ``position`` is
        selected again; otherwise a zero-width marker is placed. Returns the
        new region, or ``None`` when a region was removed.
        """

        existing = self.region_at(position)
        if existing is not None:
            self._discard(existing)
            return None

        if pattern is not None:
            lower = 0 if scope is None else scope.start
            upper = None if scope is None else scope.end
            for start, end in self.buffer.search(pattern.compile(), lower, upper):
                if start > position:
                    break
                if start <= position < end and not self._claimed(start, end):
                    return self._create(start, end)

        if self._claimed(position, position):
            raise RegionCreationError(
                "Marker would touch an existing region", start=position, end=position
            )
        return self._create(position, position, is_marker=True)

    def restrict(self, inner: Scope) -> List[Region]:
        """Drop every region not wholly inside ``inner``; return the dropped."""

        dropped = [r for r in self.regions if not inner.contains(r.start, r.end)]
        for region in dropped:
            self._discard(region)
        return dropped

    def remove(self, region: Region) -> None:
        self._discard(region)

    def clear(self) -> None:
        for region in list(self._regions):
            self._discard(region)
        self.outer_start = None
        self.outer_end = None

    def close(self) -> None:
        """Clear the set and stop following the buffer's edits."""

        self.clear()
        self._listeners.clear()
        self.buffer.unsubscribe(self._follow_edit)

    # -- internals ---------------------------------------------------------

    def _candidates(
        self, pattern: Pattern, direction: Direction, scope: Scope
    ) -> Sequence[Tuple[int, int]]:
        compiled = pattern.compile()
        if direction is Direction.FORWARD:
            origin = scope.start
            if self.outer_end is not None:
                origin = max(self.outer_end, scope.start)
            return self.buffer.search(compiled, origin, scope.end)
        limit = scope.end if self.outer_start is None else min(self.outer_start, scope.end)
        return list(reversed(self.buffer.search(compiled, scope.start, limit)))

    def _skippable(self, pattern: Pattern, start: int, end: int) -> bool:
        """Pure indentation or trailing whitespace, when that policy is on."""

        if not (pattern.is_whitespace and self.settings.ignore_indent_and_trailing):
            return False
        document = self.buffer.document
        text = self.buffer.text
        line_start = document.line_start(document.row_of(start))
        if not text[line_start:start].strip():
            return True
        line_end = document.line_end(document.row_of(end))
        return not text[end:line_end].strip()

    def _claimed(self, start: int, end: int) -> bool:
        return any(region.claims(start, end) for region in self.regions)

    def _create(self, start: int, end: int, *, is_marker: bool = False) -> Region:
        region = Region(start, end, is_marker=is_marker)
        return self._track(region, is_marker=is_marker)

    def _track(self, region: Region, *, is_marker: bool) -> Region:
        try:
            self.buffer.track(region)
        except BufferValidationError as exc:
            raise RegionCreationError(
                f"Host refused span [{region.start}, {region.end})",
                start=region.start,
                end=region.end,
            ) from exc
        region.id = self._next_id
        region.is_marker = is_marker
        self._next_id += 1
        region.subscribe(self._dispatch)
        self._regions.append(region)
        self._regions.sort(key=lambda r: r.start)
        return region

    def _discard(self, region: Region) -> None:
        self.buffer.untrack(region)
        region.alive = False
        region.listeners.clear()
        self._regions = [r for r in self._regions if r is not region]

    def _prune(self) -> None:
        if any(not region.alive for region in self._regions):
            self._regions = [r for r in self._regions if r.alive]
        self._regions.sort(key=lambda r: r.start)

    def _extend_bounds(self, regions: Sequence[Region]) -> None:
        for region in regions:
            if self.outer_start is None or region.start < self.outer_start:
                self.outer_start = region.start
            if self.outer_end is None or region.end > self.outer_end:
                self.outer_end = region.end

    def _follow_edit(self, buffer: Buffer, edit: BufferEdit) -> None:
        del buffer
        if self.outer_start is None or self.outer_end is None:
            return
        self.outer_start, self.outer_end, _ = adjust_bounds(
            self.outer_start, self.outer_end, edit.start, edit.end, len(edit.text)
        )

    def _dispatch(self, span: TrackedSpan, change: SpanEdit) -> None:
        if not isinstance(span, Region):
            return
        for listener in list(self._listeners):
            listener(span, change)


__all__ = ["OccurrenceIndex", "RegionListener", "MAX_REJECTED_CANDIDATES"]
