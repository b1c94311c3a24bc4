from multiedit.buffer import Buffer
from multiedit.engine import (
    OccurrenceIndex,
    PatternDeriver,
    ScopeResolver,
    SyncEditController,
)
from multiedit.runtime.config import MultieditSettings


def make_synced(
    text: str, point: int = 0
) -> tuple[Buffer, OccurrenceIndex, SyncEditController, list[tuple[str, object]]]:
    settings = MultieditSettings()
    buffer = Buffer.from_text(text)
    index = OccurrenceIndex(buffer, settings)
    events: list[tuple[str, object]] = []
    sync = SyncEditController(
        buffer, index, emit=lambda event, payload=None: events.append((event, payload))
    )
    pattern, _ = PatternDeriver(settings).derive(buffer, point=point)
    index.discover_all(pattern, ScopeResolver.whole(buffer))
    return buffer, index, sync, events


def test_insertion_inside_region_is_mirrored() -> None:
    buffer, index, _, _ = make_synced("foo bar foo baz foo")

    buffer.insert_text("d", at=3)

    assert buffer.text == "food bar food baz food"
    assert [region.text(buffer) for region in index] == ["food"] * 3


def test_relative_offsets_are_preserved() -> None:
    buffer, index, _, _ = make_synced("abc-abc")

    buffer.replace_range(5, 6, "X", label="edit")

    assert buffer.text == "aXc-aXc"
    assert index.starts() == (0, 4)


def test_edits_outside_regions_are_not_mirrored() -> None:
    buffer, _, _, _ = make_synced("foo bar foo")

    buffer.insert_text("!", at=5)

    assert buffer.text == "foo b!ar foo"


def test_suspended_edits_are_not_mirrored() -> None:
    buffer, _, sync, _ = make_synced("foo bar foo")

    with sync.suspended():
        buffer.insert_text("x", at=1)

    assert buffer.text == "fxoo bar foo"
    assert not sync.replaying


def test_delete_all_keeps_empty_regions() -> None:
    buffer, index, sync, _ = make_synced("foo bar foo")

    sync.delete_all_occurrence_contents()

    assert buffer.text == " bar "
    assert [region.bounds for region in index] == [(0, 0), (5, 5)]


def test_replace_all_with_yanked_text() -> None:
    buffer, index, sync, _ = make_synced("foo bar foo")

    sync.replace_all_with_yanked_text("quux")

    assert buffer.text == "quux bar quux"
    assert [region.text(buffer) for region in index] == ["quux", "quux"]


def test_insert_at_all_clamps_offset() -> None:
    buffer, _, sync, _ = make_synced("ab cd ab")

    sync.insert_at_all(10, "!")

    assert buffer.text == "ab! cd ab!"


def test_marker_visibility_follows_edited_region() -> None:
    buffer, index, sync, events = make_synced("ab cd ab")
    marker = index.toggle(4)
    assert marker is not None and marker.marker_visible

    buffer.insert_text("x", at=0)

    assert not sync.markers_visible
    assert not marker.marker_visible
    assert ("multiedit.markers", {"visible": False}) in events
    assert marker.text(buffer) == "x"

    sync.delete_all_occurrence_contents()

    assert sync.markers_visible
    assert marker.marker_visible and marker.empty
