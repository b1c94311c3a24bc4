"""The multiedit session: an explicit state machine over one buffer."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from multiedit.buffer import AFTER_SPANS, BEFORE_SPANS, Buffer, BufferDelta
from multiedit.buffer.registers import UNNAMED
from multiedit.engine import (
    Direction,
    HistoryStore,
    NoHistoryError,
    NoMoreMatchesError,
    NoMoreOccurrencesError,
    OccurrenceIndex,
    Pattern,
    PatternDeriver,
    Region,
    Scope,
    ScopeResolver,
    SessionState,
    SessionStateError,
    SyncEditController,
)
from multiedit.runtime import telemetry
from multiedit.runtime.config import MultieditSettings

from .base import LIVE_STATES, SessionBus

_SHARED_HISTORY = HistoryStore()


class MultieditSession:
    """Owns the regions, pattern and scope of one multiedit session.

    States move ``INACTIVE -> ACTIVE`` when a session starts,
    ``ACTIVE -> INSERT_FOCUSED`` on any insertion entry,
    ``INSERT_FOCUSED -> ACTIVE`` on ``exit_insert`` and back to
    ``INACTIVE`` on ``abort``/``force_normal``. Operations called in a state
    that does not allow them raise ``SessionStateError``.
    """

    def __init__(
        self,
        buffer: Buffer,
        *,
        settings: Optional[MultieditSettings] = None,
        history: Optional[HistoryStore] = None,
        bus: Optional[SessionBus] = None,
        logger_name: str | None = None,
    ) -> None:
        self.buffer = buffer
        self.settings = settings or MultieditSettings()
        self.history = history if history is not None else _SHARED_HISTORY
        self.bus = bus or SessionBus()
        self.logger = telemetry.get_logger(logger_name or "multiedit.session")
        self.deriver = PatternDeriver(self.settings)
        self.scopes = ScopeResolver(self.settings)
        self.index = OccurrenceIndex(buffer, self.settings, logger_name=logger_name)
        self.sync = SyncEditController(buffer, self.index, emit=self.bus.emit)

        self.state = SessionState.INACTIVE
        self.pattern: Optional[Pattern] = None
        self.scope: Optional[Scope] = None
        self.current: Optional[Region] = None
        self.no_recall = False

    # -- introspection -----------------------------------------------------

    @property
    def live(self) -> bool:
        return self.state in LIVE_STATES

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self.index.regions

    def region_near(self, position: Optional[int] = None) -> Optional[Region]:
        """Region covering ``position``, or ending exactly there."""

        point = self.buffer.point if position is None else position
        region = self.index.region_at(point)
        if region is None:
            region = next((r for r in self.index.regions if r.end == point), None)
        return region

    # -- starting ----------------------------------------------------------

    def start(
        self,
        *,
        point: Optional[int] = None,
        selection: Optional[Tuple[int, int]] = None,
        scope: Optional[str] = None,
        use_symbols: Optional[bool] = None,
    ) -> Region:
        """Select the seed occurrence only."""

        self._require("start", SessionState.INACTIVE)
        with self._operation("start"):
            pattern, seed = self.deriver.derive(
                self.buffer, point=point, selection=selection, use_symbols=use_symbols
            )
            resolved = self.scopes.resolve(self.buffer, scope, point=seed.start)
            self.index.add(seed)
            self._begin(pattern, resolved)
            self._focus(seed, move_point=False)
            return seed

    def match_all(
        self,
        *,
        point: Optional[int] = None,
        selection: Optional[Tuple[int, int]] = None,
        scope: Optional[str] = None,
        no_recall: bool = False,
        use_symbols: Optional[bool] = None,
    ) -> List[Region]:
        """Select every occurrence in scope; while live, claim the rest."""

        with self._operation("match_all") as handle:
            if self.live:
                assert self.pattern is not None and self.scope is not None
                created = self.index.discover_all(self.pattern, self.scope)
                handle.add_metadata("created", len(created))
                return created

            position = self.buffer.point if point is None else point
            pattern, seed = self.deriver.derive(
                self.buffer, point=position, selection=selection, use_symbols=use_symbols
            )
            resolved = self.scopes.resolve(self.buffer, scope, point=seed.start)
            created = self.index.discover_all(pattern, resolved)
            if not created:
                raise NoMoreMatchesError("in scope")
            self._begin(pattern, resolved)
            self.no_recall = no_recall
            self._focus(self.region_near(position) or created[0], move_point=False)
            handle.add_metadata("created", len(created))
            return created

    def match_and_next(
        self,
        direction: Direction = Direction.FORWARD,
        *,
        point: Optional[int] = None,
        selection: Optional[Tuple[int, int]] = None,
        scope: Optional[str] = None,
        use_symbols: Optional[bool] = None,
    ) -> Region:
        """Start on the seed, or claim the next match outward in ``direction``."""

        if not self.live:
            return self.start(
                point=point, selection=selection, scope=scope, use_symbols=use_symbols
            )
        direction = Direction(direction)
        with self._operation("match_next", direction=direction.value):
            assert self.pattern is not None and self.scope is not None
            region = self.index.discover_next(self.pattern, direction, self.scope)
            self.bus.emit("multiedit.region", _region_payload(region))
            self._focus(region, move_point=self.settings.follow_matches)
            return region

    def match_and_prev(self, **kwargs: object) -> Region:
        return self.match_and_next(Direction.BACKWARD, **kwargs)  # type: ignore[arg-type]

    def ex_match(
        self,
        regexp: str,
        *,
        start: Optional[int] = None,
        end: Optional[int] = None,
        no_recall: bool = False,
    ) -> List[Region]:
        """Start from a raw regexp over ``[start, end)`` (whole document by default).

        An empty ``regexp`` reuses the last search history entry. A live
        session is aborted once the new seed is known; if the regexp is
        invalid or matches nothing, the live session is kept as it was.
        """

        if not regexp:
            if not self.buffer.search_history:
                raise NoHistoryError(self.buffer.name)
            regexp = self.buffer.search_history[-1]
        with self._operation("ex_match", regexp=regexp):
            if start is None and end is None:
                resolved = self.scopes.whole(self.buffer)
            else:
                lower = 0 if start is None else start
                upper = len(self.buffer.text) if end is None else end
                resolved = self.scopes.from_range(lower, upper, kind="ex")
            pattern, seed = self.deriver.from_regexp(self.buffer, regexp, resolved)
            if self.live:
                self.abort()
            created = self.index.discover_all(pattern, resolved)
            self._begin(pattern, resolved)
            self.no_recall = no_recall
            self._focus(self.region_near(seed.start) or created[0], move_point=True)
            return created

    def restore(self, *, point: Optional[int] = None) -> List[Region]:
        """Reselect the regions of the last recorded session in this buffer."""

        self._require("restore", SessionState.INACTIVE)
        snapshot = self.history.load(self.buffer)
        if snapshot is None:
            raise NoHistoryError(self.buffer.name)
        with self._operation("restore", anchors=len(snapshot)):
            position = self.buffer.point if point is None else point
            pattern, _seed = self.deriver.derive(self.buffer, point=position)
            resolved = self.scopes.whole(self.buffer)
            created = self.index.discover_all(pattern, resolved)
            for region in created:
                if region.start not in snapshot:
                    self.index.remove(region)
            kept = list(self.index.regions)
            if not kept:
                self.index.clear()
                raise NoHistoryError(self.buffer.name)
            self._begin(pattern, resolved)
            self._focus(self.region_near(position) or kept[0], move_point=False)
            return kept

    # -- set editing -------------------------------------------------------

    def toggle(self, *, point: Optional[int] = None) -> Optional[Region]:
        """Deselect the region at point, reselect a match, or drop a marker."""

        self._require("toggle", *LIVE_STATES)
        position = self.buffer.point if point is None else point
        with self._operation("toggle", point=position):
            region = self.index.toggle(position, pattern=self.pattern, scope=self.scope)
            if region is not None:
                self.bus.emit("multiedit.region", _region_payload(region))
            self._refresh_current()
            return region

    def restrict(self, start: int, end: int) -> List[Region]:
        self._require("restrict", *LIVE_STATES)
        with self._operation("restrict", range=(start, end)):
            dropped = self.index.restrict(self.scopes.from_range(start, end))
            self._refresh_current()
            return dropped

    def toggle_or_restrict(
        self,
        *,
        selection: Optional[Tuple[int, int]] = None,
        point: Optional[int] = None,
    ) -> object:
        if selection is not None:
            return self.restrict(*selection)
        return self.toggle(point=point)

    # -- navigation --------------------------------------------------------

    def next(self) -> Region:
        return self._navigate(Direction.FORWARD)

    def prev(self) -> Region:
        return self._navigate(Direction.BACKWARD)

    def _navigate(self, direction: Direction) -> Region:
        self._require(f"navigate {direction.value}", *LIVE_STATES)
        point = self.buffer.point
        if direction is Direction.FORWARD:
            target = self.index.next_after(point)
        else:
            target = self.index.previous_before(point)
        if target is None:
            raise NoMoreOccurrencesError(direction.value)
        self._focus(target, move_point=True)
        return target

    # -- insertion ---------------------------------------------------------

    def insert(self) -> Optional[Region]:
        return self._enter_insert("insert", lambda region: region.start)

    def append(self) -> Optional[Region]:
        return self._enter_insert("append", lambda region: region.end)

    def change(self, *, register: str = UNNAMED) -> Optional[Region]:
        def clear(region: Region) -> int:
            self.buffer.registers.yank_to(register, region.text(self.buffer))
            self.sync.delete_all_occurrence_contents()
            return region.start

        return self._enter_insert("change", clear)

    def substitute(self, count: int = 1) -> Optional[Region]:
        """Delete ``count`` characters at the cursor's offset in every region."""

        def cut(region: Region) -> int:
            point = min(max(self.buffer.point, region.start), region.end)
            end = min(point + count, region.end)
            if end > point:
                self.buffer.delete_range(point, end)
            return point

        return self._enter_insert("substitute", cut)

    def open_below(self) -> Optional[Region]:
        return self._enter_insert(
            "open_below", lambda region: self._open_lines(region, below=True)
        )

    def open_above(self) -> Optional[Region]:
        return self._enter_insert(
            "open_above", lambda region: self._open_lines(region, below=False)
        )

    def _open_lines(self, focus: Region, *, below: bool) -> int:
        """Open an empty line below (or above) every region's line.

        Lines holding several regions are opened once. The newlines land
        outside every region. Returns the offset of the line opened for
        ``focus``.
        """

        document = self.buffer.document
        rows = sorted(
            {document.row_of(r.end if below else r.start) for r in self.index.regions},
            reverse=True,
        )
        focus_row = document.row_of(focus.end if below else focus.start)
        if below:
            target = document.line_end(focus_row) + 1
        else:
            target = document.line_start(focus_row)
        target += sum(1 for row in rows if row < focus_row)

        with self.sync.suspended():
            for row in rows:
                document = self.buffer.document
                if below:
                    self.buffer.insert_text(
                        "\n", at=document.line_end(row), outside=AFTER_SPANS
                    )
                else:
                    self.buffer.insert_text(
                        "\n", at=document.line_start(row), outside=BEFORE_SPANS
                    )
        return target

    def type_text(self, text: str) -> BufferDelta:
        self._require("type", SessionState.INSERT_FOCUSED)
        return self.buffer.insert_text(text, owner=self.current)

    def delete_backward(self, count: int = 1) -> Optional[BufferDelta]:
        self._require("delete", SessionState.INSERT_FOCUSED)
        point = self.buffer.point
        floor = 0
        region = self.current
        if region is None or not region.alive or not region.start <= point <= region.end:
            region = self.region_near(point)
        if region is not None:
            floor = region.start
        start = max(point - count, floor)
        if start == point:
            return None
        return self.buffer.delete_range(start, point)

    def exit_insert(self) -> None:
        self._require("exit insert", SessionState.INSERT_FOCUSED)
        with self._operation("exit_insert"):
            self.sync.resync_markers()
            self._refresh_current()
            self._transition(SessionState.ACTIVE)

    def _enter_insert(
        self, operation: str, place: Callable[[Region], int]
    ) -> Optional[Region]:
        self._require(operation, SessionState.ACTIVE)
        with self._operation(operation) as handle:
            region = self.region_near()
            if region is None:
                handle.add_metadata("fallback", "line_start")
                self.current = None
                line_start, _ = self.buffer.document.line_bounds(self.buffer.point)
                self.buffer.set_point(line_start)
            else:
                self.current = region
                target = place(region)
                self.buffer.set_point(target)
            self._transition(SessionState.INSERT_FOCUSED)
            return self.current

    # -- bulk edits --------------------------------------------------------

    def paste_replace(self, *, register: str = UNNAMED) -> None:
        """Replace every region's content with the register's text."""

        self._require("paste", *LIVE_STATES)
        text = self.buffer.registers.get(register).text
        with self._operation("paste_replace", length=len(text)):
            self.sync.replace_all_with_yanked_text(text)
            if self.current is not None and self.current.alive:
                self.buffer.set_point(self.current.start)

    def delete_occurrences(self, *, register: str = UNNAMED) -> None:
        """Empty every region, yanking the current region's text."""

        self._require("delete", *LIVE_STATES)
        with self._operation("delete_occurrences"):
            source = self.current
            if source is None or not source.alive:
                source = self.region_near()
            if source is None and self.index.regions:
                source = self.index.regions[0]
            if source is not None:
                self.buffer.registers.yank_to(register, source.text(self.buffer))
            self.sync.delete_all_occurrence_contents()

    # -- ending ------------------------------------------------------------

    def abort(self) -> Tuple[int, ...]:
        """End the session; returns the anchors recorded (empty for no-recall)."""

        self._require("abort", *LIVE_STATES)
        with self._operation("abort") as handle:
            starts: Tuple[int, ...] = ()
            if not self.no_recall:
                starts = self.history.save(self.buffer, self.index.starts()).starts
            handle.add_metadata("recorded", len(starts))
            self.index.clear()
            self.pattern = None
            self.scope = None
            self.current = None
            self.no_recall = False
            self.sync.markers_visible = True
            self._transition(SessionState.INACTIVE)
            self.bus.emit("multiedit.abort", {"starts": starts})
            telemetry.record_event(
                "session.abort", data={"buffer": self.buffer.name, "recorded": len(starts)}
            )
            return starts

    def force_normal(self) -> bool:
        """Host escape hatch: end any live session; ``False`` if none was live."""

        if not self.live:
            return False
        self.abort()
        return True

    def close(self) -> None:
        """End any live session and detach from the buffer for good."""

        self.force_normal()
        self.index.close()

    # -- internals ---------------------------------------------------------

    def _require(self, operation: str, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise SessionStateError(operation, self.state.value)

    def _begin(self, pattern: Optional[Pattern], scope: Scope) -> None:
        self.pattern = pattern
        self.scope = scope
        if pattern is not None and self.settings.store_in_search_history:
            self.buffer.push_search(pattern.history_entry)
        self._transition(SessionState.ACTIVE)
        self.bus.emit(
            "multiedit.start",
            {
                "pattern": None if pattern is None else pattern.regex,
                "scope": (scope.start, scope.end),
                "regions": len(self.index),
            },
        )
        telemetry.record_event(
            "session.start",
            data={"buffer": self.buffer.name, "regions": len(self.index)},
        )

    def _transition(self, target: SessionState) -> None:
        previous = self.state
        self.state = target
        if previous is not target:
            self.bus.emit(
                "multiedit.state", {"from": previous.value, "to": target.value}
            )

    def _focus(self, region: Optional[Region], *, move_point: bool) -> None:
        self.current = region
        if region is not None and move_point:
            self.buffer.set_point(region.start)

    def _refresh_current(self) -> None:
        current = self.current
        if current is None or not current.alive or current not in self.index.regions:
            self.current = self.region_near()

    @contextmanager
    def _operation(self, name: str, **metadata: object) -> Iterator[telemetry.SpanHandle]:
        with telemetry.span(
            f"session::{name}",
            component="session",
            metadata={"buffer": self.buffer.name, "state": self.state.value, **metadata},
        ) as handle:
            yield handle


def _region_payload(region: Region) -> dict[str, object]:
    return {
        "id": region.id,
        "start": region.start,
        "end": region.end,
        "marker": region.is_marker,
    }


__all__ = ["MultieditSession"]
