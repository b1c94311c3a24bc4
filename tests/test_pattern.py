import pytest

from multiedit.buffer import Buffer
from multiedit.engine import (
    Boundary,
    CommandParseError,
    NoMatchableError,
    PatternDeriver,
    ScopeResolver,
)
from multiedit.runtime.config import MultieditSettings


def make_deriver(**overrides: object) -> PatternDeriver:
    return PatternDeriver(MultieditSettings().updated(**overrides))


def test_word_under_point_is_anchored() -> None:
    buffer = Buffer.from_text("foo bar foo")

    pattern, seed = make_deriver().derive(buffer, point=5)

    assert pattern.literal_text == "bar"
    assert (pattern.anchor_start, pattern.anchor_end) == (True, True)
    assert pattern.boundary is Boundary.WORD
    assert seed.bounds == (4, 7)


def test_point_just_after_word_takes_that_word() -> None:
    buffer = Buffer.from_text("foo bar")

    pattern, seed = make_deriver().derive(buffer, point=7)
    assert pattern.literal_text == "bar"
    assert seed.bounds == (4, 7)

    pattern, seed = make_deriver(match_whitespace=False).derive(buffer, point=3)
    assert pattern.literal_text == "foo"
    assert seed.bounds == (0, 3)


def test_whitespace_run_is_unanchored() -> None:
    buffer = Buffer.from_text("a   b")

    pattern, seed = make_deriver().derive(buffer, point=2)

    assert pattern.literal_text == "   "
    assert pattern.is_whitespace
    assert (pattern.anchor_start, pattern.anchor_end) == (False, False)
    assert seed.bounds == (1, 4)


def test_punctuation_run() -> None:
    buffer = Buffer.from_text("a -> b")

    pattern, seed = make_deriver().derive(buffer, point=2)

    assert pattern.literal_text == "->"
    assert not pattern.anchor_start
    assert seed.bounds == (2, 4)


def test_punctuation_disabled_without_adjacent_word() -> None:
    buffer = Buffer.from_text("a , b")

    with pytest.raises(NoMatchableError):
        make_deriver(match_punctuation=False, match_whitespace=False).derive(
            buffer, point=2
        )


def test_empty_buffer_has_nothing_to_match() -> None:
    with pytest.raises(NoMatchableError):
        make_deriver().derive(Buffer.from_text(""), point=0)


def test_symbols_include_underscores() -> None:
    buffer = Buffer.from_text("foo_bar foo")

    symbol, symbol_seed = make_deriver().derive(buffer, point=1, use_symbols=True)
    word, word_seed = make_deriver().derive(buffer, point=1)

    assert symbol.literal_text == "foo_bar"
    assert symbol.boundary is Boundary.SYMBOL
    assert symbol_seed.bounds == (0, 7)
    assert word.literal_text == "foo"
    assert word_seed.bounds == (0, 3)
    assert buffer.search(word.compile()) == [(0, 3), (8, 11)]
    assert buffer.search(symbol.compile()) == [(0, 7)]


def test_selection_is_used_verbatim() -> None:
    buffer = Buffer.from_text("a.b a.b axb")

    pattern, seed = make_deriver().derive(buffer, point=0, selection=(3, 0))

    assert pattern.literal_text == "a.b"
    assert (pattern.anchor_start, pattern.anchor_end) == (False, False)
    assert seed.bounds == (0, 3)
    assert buffer.search(pattern.compile()) == [(0, 3), (4, 7)]


def test_empty_selection_rejected() -> None:
    with pytest.raises(NoMatchableError):
        make_deriver().derive(Buffer.from_text("abc"), selection=(1, 1))


def test_smart_boundaries_on_ranges() -> None:
    buffer = Buffer.from_text("i ignition i")
    deriver = make_deriver()

    whole, _ = deriver.derive_range(buffer, 0, 1)
    inner, _ = deriver.derive_range(buffer, 3, 5)

    assert (whole.anchor_start, whole.anchor_end) == (True, True)
    assert buffer.search(whole.compile()) == [(0, 1), (11, 12)]
    assert (inner.anchor_start, inner.anchor_end) == (False, False)


def test_smart_boundaries_disabled_keeps_range_unanchored() -> None:
    buffer = Buffer.from_text("i ignition i")

    pattern, _ = make_deriver(smart_match_boundaries=False).derive_range(buffer, 0, 1)

    assert not pattern.anchor_start
    assert len(buffer.search(pattern.compile())) == 5


def test_case_insensitive_setting() -> None:
    buffer = Buffer.from_text("Foo foo FOO")

    pattern, _ = make_deriver(case_sensitive=False).derive(buffer, point=4)

    assert len(buffer.search(pattern.compile())) == 3


def test_from_regexp_seeds_at_or_after_point() -> None:
    buffer = Buffer.from_text("cat cot cut")
    scope = ScopeResolver(MultieditSettings()).whole(buffer)

    pattern, seed = make_deriver().from_regexp(buffer, "c.t", scope, point=5)

    assert pattern.regexp == "c.t"
    assert seed.bounds == (8, 11)
    assert pattern.literal_text == "cut"


def test_from_regexp_rejects_bad_expression() -> None:
    buffer = Buffer.from_text("abc")
    scope = ScopeResolver(MultieditSettings()).whole(buffer)

    with pytest.raises(CommandParseError):
        make_deriver().from_regexp(buffer, "(", scope)

    with pytest.raises(NoMatchableError):
        make_deriver().from_regexp(buffer, "z+", scope)
