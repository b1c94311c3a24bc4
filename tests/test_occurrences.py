import pytest

from multiedit.buffer import Buffer, BufferValidationError
from multiedit.engine import (
    MAX_REJECTED_CANDIDATES,
    Direction,
    NoMoreMatchesError,
    OccurrenceIndex,
    Pattern,
    PatternDeriver,
    Region,
    RegionCreationError,
    Scope,
    ScopeResolver,
)
from multiedit.runtime.config import MultieditSettings


def make_index(text: str, **overrides: object) -> tuple[Buffer, OccurrenceIndex]:
    buffer = Buffer.from_text(text)
    settings = MultieditSettings().updated(**overrides)
    return buffer, OccurrenceIndex(buffer, settings)


def make_seed(buffer: Buffer, point: int, **overrides: object) -> tuple[Pattern, Region]:
    return PatternDeriver(MultieditSettings().updated(**overrides)).derive(
        buffer, point=point
    )


def whole(buffer: Buffer) -> Scope:
    return ScopeResolver.whole(buffer)


def test_discover_all_claims_every_match() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, _ = make_seed(buffer, 0)

    created = index.discover_all(pattern, whole(buffer))

    assert [region.bounds for region in created] == [(0, 3), (8, 11), (16, 19)]
    assert index.starts() == (0, 8, 16)
    assert all(not region.is_marker for region in index)
    assert len({region.id for region in index}) == 3


def test_discover_all_respects_anchors() -> None:
    buffer, index = make_index("i ignition i")
    pattern, _ = make_seed(buffer, 0)

    created = index.discover_all(pattern, whole(buffer))

    assert [region.bounds for region in created] == [(0, 1), (11, 12)]


def test_discover_all_stays_inside_scope() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, _ = make_seed(buffer, 0)

    created = index.discover_all(pattern, Scope(4, 15))

    assert [region.bounds for region in created] == [(8, 11)]


def test_discover_all_skips_claimed_matches() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, seed = make_seed(buffer, 0)
    index.add(seed)

    created = index.discover_all(pattern, whole(buffer))

    assert [region.bounds for region in created] == [(8, 11)]
    assert index.starts() == (0, 8)


def test_discover_all_claims_adjacent_matches() -> None:
    buffer, index = make_index("aaaa")
    pattern = Pattern(literal_text="a")

    created = index.discover_all(pattern, whole(buffer))

    assert [region.bounds for region in created] == [(0, 1), (1, 2), (2, 3), (3, 4)]
    assert len(buffer.spans) == 4


def test_adjacent_words_from_a_selection() -> None:
    buffer, index = make_index("foofoo bar foo")
    pattern, _ = PatternDeriver(MultieditSettings()).derive(buffer, selection=(0, 3))

    created = index.discover_all(pattern, whole(buffer))

    assert [region.bounds for region in created] == [(0, 3), (3, 6), (11, 14)]


def test_discover_next_takes_the_neighbouring_match() -> None:
    buffer, index = make_index("foofoo")
    pattern, seed = PatternDeriver(MultieditSettings()).derive(buffer, selection=(3, 6))
    index.add(seed)

    region = index.discover_next(pattern, Direction.BACKWARD, whole(buffer))

    assert region.bounds == (0, 3)
    assert index.starts() == (0, 3)


def test_discover_all_rolls_back_on_refused_span() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, _ = make_seed(buffer, 0)
    refused = {8}
    track = buffer.track

    def picky_track(span):
        if span.start in refused:
            raise BufferValidationError("refused", offset=span.start)
        return track(span)

    buffer.track = picky_track  # type: ignore[method-assign]

    with pytest.raises(RegionCreationError):
        index.discover_all(pattern, whole(buffer))

    assert len(index) == 0
    assert len(buffer.spans) == 0


def test_discover_next_walks_outward_and_exhausts() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, seed = make_seed(buffer, 0)
    index.add(seed)
    scope = whole(buffer)

    assert index.discover_next(pattern, Direction.FORWARD, scope).bounds == (8, 11)
    assert index.discover_next(pattern, Direction.FORWARD, scope).bounds == (16, 19)
    with pytest.raises(NoMoreMatchesError):
        index.discover_next(pattern, Direction.FORWARD, scope)

    assert len(index) == 3
    assert (index.outer_start, index.outer_end) == (0, 19)


def test_discover_next_backward() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, seed = make_seed(buffer, 17)
    index.add(seed)

    region = index.discover_next(pattern, "backward", whole(buffer))

    assert region.bounds == (8, 11)
    assert index.outer_start == 8


def test_failed_discover_next_leaves_bounds_untouched() -> None:
    buffer, index = make_index("foo bar")
    pattern, seed = make_seed(buffer, 0)
    index.add(seed)

    with pytest.raises(NoMoreMatchesError):
        index.discover_next(pattern, Direction.BACKWARD, whole(buffer))

    assert (index.outer_start, index.outer_end) == (0, 3)
    assert index.starts() == (0,)


def test_whitespace_discovery_skips_indentation_and_trailing() -> None:
    text = "def f():\n    a = 1\n    b = 2  \n"
    buffer, index = make_index(text)
    pattern, seed = make_seed(buffer, 14)
    index.add(seed)
    scope = whole(buffer)

    found = [
        index.discover_next(pattern, Direction.FORWARD, scope).bounds
        for _ in range(3)
    ]

    assert seed.bounds == (14, 15)
    assert found == [(16, 17), (24, 25), (26, 27)]
    with pytest.raises(NoMoreMatchesError):
        index.discover_next(pattern, Direction.FORWARD, scope)


def test_whitespace_discovery_without_skip_policy() -> None:
    text = "x = 1\n    y = 2\n"
    buffer, index = make_index(text, ignore_indent_and_trailing=False)
    pattern, seed = make_seed(buffer, 1)
    index.add(seed)
    scope = whole(buffer)

    index.discover_next(pattern, Direction.FORWARD, scope)
    region = index.discover_next(pattern, Direction.FORWARD, scope)

    assert region.bounds == (6, 7)


def test_rejected_candidates_are_capped() -> None:
    text = "x y\n" + " z\n" * (MAX_REJECTED_CANDIDATES + 5)
    buffer, index = make_index(text)
    pattern, seed = make_seed(buffer, 1)
    index.add(seed)

    with pytest.raises(NoMoreMatchesError):
        index.discover_next(pattern, Direction.FORWARD, whole(buffer))

    assert index.starts() == (1,)


def test_regions_follow_edits_and_bounds_shift() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))

    buffer.insert_text("## ", at=4)

    assert index.starts() == (0, 11)
    assert (index.outer_start, index.outer_end) == (0, 14)
    assert [region.text(buffer) for region in index] == ["foo", "foo"]


def test_swallowed_region_is_dropped() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))

    buffer.delete_range(6, 11)

    assert index.starts() == (0,)


def test_toggle_is_its_own_inverse() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, _ = make_seed(buffer, 0)
    scope = whole(buffer)
    index.discover_all(pattern, scope)

    assert index.toggle(9, pattern=pattern, scope=scope) is None
    assert index.starts() == (0, 16)

    restored = index.toggle(9, pattern=pattern, scope=scope)

    assert restored is not None and restored.bounds == (8, 11)
    assert index.starts() == (0, 8, 16)


def test_toggle_places_marker_off_match() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))

    marker = index.toggle(5, pattern=pattern)

    assert marker is not None
    assert marker.is_marker and marker.empty
    assert index.starts() == (0, 5, 8)
    assert index.toggle(5) is None
    assert index.starts() == (0, 8)


def test_marker_touching_region_is_refused() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))

    with pytest.raises(RegionCreationError):
        index.toggle(3)

    assert index.starts() == (0, 8)


def test_restrict_drops_outside_regions_and_is_idempotent() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))
    inner = ScopeResolver.from_range(0, 11)

    dropped = index.restrict(inner)

    assert [region.bounds for region in dropped] == [(16, 19)]
    assert not dropped[0].alive
    assert index.restrict(inner) == []
    assert index.starts() == (0, 8)


def test_navigation_queries() -> None:
    buffer, index = make_index("foo bar foo baz foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))

    assert index.region_at(9).bounds == (8, 11)
    assert index.region_at(5) is None
    assert index.next_after(8).start == 16
    assert index.previous_before(8).start == 0
    assert index.next_after(16) is None


def test_clear_releases_spans() -> None:
    buffer, index = make_index("foo bar foo")
    pattern, _ = make_seed(buffer, 0)
    index.discover_all(pattern, whole(buffer))

    index.clear()

    assert len(index) == 0
    assert len(buffer.spans) == 0
    assert index.outer_start is None
