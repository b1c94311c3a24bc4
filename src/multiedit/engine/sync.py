"""Keeps every region's content in step with edits made in any one of them."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from multiedit.buffer import Buffer, SpanEdit
from multiedit.runtime import telemetry

from .models import Region
from .occurrences import OccurrenceIndex

EventSink = Callable[[str, Optional[object]], None]


def _ignore(event: str, payload: Optional[object] = None) -> None:  # pragma: no cover
    del event, payload


class SyncEditController:
    """Mirrors region edits and owns the shared marker visibility flag.

    An edit the host applies inside one region is replayed in every other
    region at the same offset relative to the region start. Replays run
    with mirroring suspended so they are not mirrored again.
    """

    def __init__(
        self,
        buffer: Buffer,
        index: OccurrenceIndex,
        *,
        emit: EventSink = _ignore,
    ) -> None:
        self.buffer = buffer
        self.index = index
        self.markers_visible = True
        self._emit = emit
        self._replaying = False
        self.logger = telemetry.get_logger("multiedit.engine.sync")
        index.subscribe(self._on_region_edit)

    @property
    def replaying(self) -> bool:
        return self._replaying

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Edit the buffer without mirroring."""

        previous = self._replaying
        self._replaying = True
        try:
            yield
        finally:
            self._replaying = previous

    def on_region_content_changed(self, region: Region, new_text: str) -> None:
        """Flip marker glyphs in lock step with the edited region's content."""

        del region
        self._set_markers_visible(new_text == "")

    def resync_markers(self) -> None:
        markers = [region for region in self.index.regions if region.is_marker]
        if markers:
            self._set_markers_visible(all(region.empty for region in markers))

    def delete_all_occurrence_contents(self) -> None:
        """Empty every region, keeping the regions themselves."""

        with telemetry.span("sync::delete_all", component="sync"):
            with self.suspended():
                for region in reversed(self.index.regions):
                    if not region.empty:
                        self.buffer.replace_range(
                            region.start, region.end, "", label="delete_occurrence"
                        )
            self._set_markers_visible(True)

    def replace_all_with_yanked_text(self, text: str) -> None:
        with telemetry.span(
            "sync::replace_all", component="sync", metadata={"length": len(text)}
        ):
            self.delete_all_occurrence_contents()
            with self.suspended():
                for region in reversed(self.index.regions):
                    self.buffer.replace_range(
                        region.start,
                        region.start,
                        text,
                        label="paste_occurrence",
                        owner=region,
                    )
            self._set_markers_visible(text == "")

    def insert_at_all(self, offset_in_region: int, text: str) -> None:
        """Insert ``text`` at the same relative offset of every region."""

        with self.suspended():
            for region in reversed(self.index.regions):
                position = min(region.start + offset_in_region, region.end)
                self.buffer.replace_range(
                    position, position, text, label="insert_all", owner=region
                )
        self.resync_markers()

    def _on_region_edit(self, region: Region, change: SpanEdit) -> None:
        if self._replaying:
            return
        self._mirror(region, change)
        if region.alive:
            self.on_region_content_changed(region, region.text(self.buffer))

    def _mirror(self, source: Region, change: SpanEdit) -> None:
        text = change.edit.text
        removed = change.rel_end - change.rel_start
        targets = [r for r in self.index.regions if r is not source]
        if not targets:
            return
        with telemetry.span(
            "sync::mirror",
            component="sync",
            metadata={"source": source.id, "targets": len(targets)},
        ):
            with self.suspended():
                for region in reversed(targets):
                    if not region.alive:
                        continue
                    start = min(region.start + change.rel_start, region.end)
                    end = min(start + removed, region.end)
                    self.buffer.replace_range(
                        start, end, text, label="mirror_edit", owner=region
                    )

    def _set_markers_visible(self, visible: bool) -> None:
        changed = visible != self.markers_visible
        self.markers_visible = visible
        for region in self.index.regions:
            if region.is_marker:
                region.marker_visible = visible
        if changed:
            self._emit("multiedit.markers", {"visible": visible})


__all__ = ["SyncEditController", "EventSink"]
