import pytest

from fzfcore.algo.exact import (
    equal_match,
    exact_match_boundary,
    exact_match_naive,
    prefix_match,
    suffix_match,
)
from fzfcore.algo.scheme import (
    BONUS_BOUNDARY,
    BONUS_CAMEL123,
    BONUS_CONSECUTIVE,
    BONUS_FIRST_CHAR_MULTIPLIER,
    SCORE_MATCH,
    init,
)

WHITE = 10  # word boundary after whitespace, default scheme
DELIM = 9  # word boundary after a delimiter, default scheme


@pytest.fixture(autouse=True)
def default_scheme():
    init("default")
    yield
    init("default")


def span(outcome):
    result, positions = outcome
    if positions:
        return min(positions), max(positions) + 1, result.score
    return result.start, result.end, result.score


@pytest.mark.parametrize("forward", [True, False])
def test_exact_match_naive(forward):
    assert span(exact_match_naive(True, False, forward, "fooBarbaz", "oBA", True, None)) == (-1, -1, 0)
    assert span(exact_match_naive(True, False, forward, "fooBarbaz", "fooBarbazz", True, None)) == (-1, -1, 0)
    assert span(exact_match_naive(False, False, forward, "fooBarbaz", "oba", True, None)) == (
        2, 5, SCORE_MATCH * 3 + BONUS_CAMEL123 + BONUS_CONSECUTIVE)
    assert span(exact_match_naive(False, False, forward, "/AutomatorDocument.icns", "rdoc", True, None)) == (
        9, 13, SCORE_MATCH * 4 + BONUS_CAMEL123 + BONUS_CONSECUTIVE * 2)
    assert span(exact_match_naive(False, False, forward, "/man1/zshcompctl.1", "zshc", True, None)) == (
        6, 10, SCORE_MATCH * 4 + DELIM * (BONUS_FIRST_CHAR_MULTIPLIER + 3))
    assert span(exact_match_naive(False, False, forward, "/.oh-my-zsh/cache", "zsh/c", True, None)) == (
        8, 13, SCORE_MATCH * 5 + BONUS_BOUNDARY * (BONUS_FIRST_CHAR_MULTIPLIER + 3) + DELIM)


def test_exact_match_naive_backward():
    assert span(exact_match_naive(False, False, True, "foobar foob", "oo", True, None)) == (
        1, 3, SCORE_MATCH * 2 + BONUS_CONSECUTIVE)
    assert span(exact_match_naive(False, False, False, "foobar foob", "oo", True, None)) == (
        8, 10, SCORE_MATCH * 2 + BONUS_CONSECUTIVE)


@pytest.mark.parametrize("forward", [True, False])
def test_prefix_match(forward):
    score = SCORE_MATCH * 3 + WHITE * BONUS_FIRST_CHAR_MULTIPLIER + WHITE * 2
    assert span(prefix_match(True, False, forward, "fooBarbaz", "Foo", True, None)) == (-1, -1, 0)
    assert span(prefix_match(False, False, forward, "fooBarBaz", "baz", True, None)) == (-1, -1, 0)
    assert span(prefix_match(False, False, forward, "fooBarbaz", "foo", True, None)) == (0, 3, score)
    assert span(prefix_match(False, False, forward, "foOBarBaZ", "foo", True, None)) == (0, 3, score)
    assert span(prefix_match(False, False, forward, "f-oBarbaz", "f-o", True, None)) == (0, 3, score)
    assert span(prefix_match(False, False, forward, " fooBar", "foo", True, None)) == (1, 4, score)
    assert span(prefix_match(False, False, forward, " fooBar", " fo", True, None)) == (0, 3, score)
    assert span(prefix_match(False, False, forward, "     fo", "foo", True, None)) == (-1, -1, 0)


@pytest.mark.parametrize("forward", [True, False])
def test_suffix_match(forward):
    assert span(suffix_match(True, False, forward, "fooBarbaz", "Baz", True, None)) == (-1, -1, 0)
    assert span(suffix_match(False, False, forward, "fooBarbaz", "foo", True, None)) == (-1, -1, 0)
    assert span(suffix_match(False, False, forward, "fooBarbaz", "baz", True, None)) == (
        6, 9, SCORE_MATCH * 3 + BONUS_CONSECUTIVE * 2)
    assert span(suffix_match(False, False, forward, "fooBarBaZ", "baz", True, None)) == (
        6, 9, (SCORE_MATCH + BONUS_CAMEL123) * 3 + BONUS_CAMEL123 * (BONUS_FIRST_CHAR_MULTIPLIER - 1))
    assert span(suffix_match(False, False, forward, "fooBarbaz ", "baz", True, None)) == (
        6, 9, SCORE_MATCH * 3 + BONUS_CONSECUTIVE * 2)
    assert span(suffix_match(False, False, forward, "fooBarbaz ", "baz ", True, None)) == (
        6, 10, SCORE_MATCH * 4 + BONUS_CONSECUTIVE * 2 + WHITE)


@pytest.mark.parametrize("forward", [True, False])
def test_empty_pattern(forward):
    assert span(exact_match_naive(True, False, forward, "foobar", "", True, None)) == (0, 0, 0)
    assert span(prefix_match(True, False, forward, "foobar", "", True, None)) == (0, 0, 0)
    assert span(suffix_match(True, False, forward, "foobar", "", True, None)) == (6, 6, 0)


@pytest.mark.parametrize("fn", [prefix_match, exact_match_naive])
def test_normalize_short(fn):
    assert span(fn(False, True, True, "Só Danço Samba", "so", True, None)) == (0, 2, 62)


@pytest.mark.parametrize("fn", [prefix_match, suffix_match, exact_match_naive, equal_match])
def test_normalize_word(fn):
    assert span(fn(False, True, True, "Danço", "danco", True, None)) == (0, 5, 140)


def test_equal_match_strips_whitespace():
    expected = (SCORE_MATCH + WHITE) * 3 + (BONUS_FIRST_CHAR_MULTIPLIER - 1) * WHITE
    assert span(equal_match(False, False, True, "  Foo  ", "foo", True, None)) == (2, 5, expected)
    assert span(equal_match(False, False, True, "foobar", "foo", True, None)) == (-1, -1, 0)
    assert span(equal_match(True, False, True, "Foo", "foo", True, None)) == (-1, -1, 0)
    assert span(equal_match(True, False, True, "foo", "", True, None)) == (-1, -1, 0)


def test_exact_match_boundary_requires_word_boundaries():
    assert span(exact_match_boundary(True, False, True, "foobar", "bar", True, None)) == (-1, -1, 0)
    start, end, score = span(exact_match_boundary(True, False, True, "foo bar", "bar", True, None))
    assert (start, end) == (4, 7)
    _, _, underscore_score = span(exact_match_boundary(True, False, True, "foo_bar", "bar", True, None))
    assert underscore_score < score