"""Exact, boundary, prefix, suffix and equality matchers."""

from __future__ import annotations

from itertools import takewhile

from .fuzzy import ascii_fuzzy_index
from .normalize import normalize_rune
from .scheme import (
    BONUS_BOUNDARY,
    BONUS_FIRST_CHAR_MULTIPLIER,
    NO_MATCH,
    SCHEME,
    SCORE_MATCH,
    WHITE_CHARS,
    CharClass,
    MatchResult,
    Slab,
    _fold,
    _index_at,
    _lower_rune,
    bonus_at,
    calculate_score,
    char_class_of,
)

MatchOutput = tuple[MatchResult, "list[int] | None"]


def _is_space(char: str) -> bool:
    if ord(char) <= 0xFF:
        return char in WHITE_CHARS
    return char.isspace()


def _leading_whitespaces(text: str) -> int:
    return sum(1 for _ in takewhile(_is_space, text))


def _trailing_whitespaces(text: str) -> int:
    return sum(1 for _ in takewhile(_is_space, reversed(text)))


def _is_boundary_char(char: str) -> bool:
    return char_class_of(char) <= CharClass.DELIMITER


def _exact_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    boundary_check: bool,
    text: str,
    pattern: str,
) -> MatchOutput:
    if not pattern:
        return MatchResult(0, 0, 0), None

    len_runes = len(text)
    len_pattern = len(pattern)
    if len_runes < len_pattern:
        return NO_MATCH, None

    idx, _ = ascii_fuzzy_index(text, pattern, case_sensitive)
    if idx < 0:
        return NO_MATCH, None

    # Only the bonus at the first character position is considered.
    pidx = 0
    best_pos, bonus, best_bonus = -1, 0, -1
    index = 0
    while index < len_runes:
        text_idx = _index_at(index, len_runes, forward)
        char = _fold(text[text_idx], case_sensitive, normalize)
        pattern_idx = _index_at(pidx, len_pattern, forward)
        ok = pattern[pattern_idx] == char
        if ok:
            if pattern_idx == 0:
                bonus = bonus_at(text, text_idx)
            if boundary_check:
                ok = bonus >= BONUS_BOUNDARY
                if ok and pattern_idx == 0:
                    ok = text_idx == 0 or _is_boundary_char(text[text_idx - 1])
                if ok and pattern_idx == len_pattern - 1:
                    ok = text_idx == len_runes - 1 or _is_boundary_char(text[text_idx + 1])
        if ok:
            pidx += 1
            if pidx == len_pattern:
                if bonus > best_bonus:
                    best_pos, best_bonus = index, bonus
                if bonus >= BONUS_BOUNDARY:
                    break
                index -= pidx - 1
                pidx, bonus = 0, 0
        else:
            index -= pidx
            pidx, bonus = 0, 0
        index += 1

    if best_pos < 0:
        return NO_MATCH, None

    if forward:
        sidx = best_pos - len_pattern + 1
        eidx = best_pos + 1
    else:
        sidx = len_runes - (best_pos + 1)
        eidx = len_runes - (best_pos - len_pattern + 1)

    if boundary_check:
        # Underscore boundaries rank lower than other kinds of boundaries
        score = bonus
        deduct = bonus - BONUS_BOUNDARY + 1
        if sidx > 0 and text[sidx - 1] == "_":
            score -= deduct + 1
            deduct = 1
        if eidx < len_runes and text[eidx] == "_":
            score -= deduct
        # Base score so that this can compete with other match types
        score += SCORE_MATCH * len_pattern + SCHEME.bonus_boundary_white * (len_pattern + 1)
    else:
        score, _ = calculate_score(case_sensitive, normalize, text, pattern, sidx, eidx, False)
    return MatchResult(sidx, eidx, score), None


def exact_match_naive(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> MatchOutput:
    """Find the occurrence of pattern as a substring with the highest first-character bonus."""
    return _exact_match(case_sensitive, normalize, forward, False, text, pattern)


def exact_match_boundary(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> MatchOutput:
    """Like exact_match_naive, but the occurrence must start and end on word boundaries."""
    return _exact_match(case_sensitive, normalize, forward, True, text, pattern)


def _fold_simple(char: str, case_sensitive: bool, normalize: bool) -> str:
    if not case_sensitive:
        char = _lower_rune(char)
    if normalize:
        char = normalize_rune(char)
    return char


def prefix_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> MatchOutput:
    """Match pattern at the start of text, ignoring leading whitespace unless the pattern has some."""
    if not pattern:
        return MatchResult(0, 0, 0), None

    trimmed = 0 if _is_space(pattern[0]) else _leading_whitespaces(text)
    if len(text) - trimmed < len(pattern):
        return NO_MATCH, None

    segment = text[trimmed:trimmed + len(pattern)]
    if any(_fold_simple(c, case_sensitive, normalize) != p for c, p in zip(segment, pattern)):
        return NO_MATCH, None

    end = trimmed + len(pattern)
    score, _ = calculate_score(case_sensitive, normalize, text, pattern, trimmed, end, False)
    return MatchResult(trimmed, end, score), None


def suffix_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> MatchOutput:
    """Match pattern at the end of text, ignoring trailing whitespace unless the pattern has some."""
    trimmed = len(text)
    if not pattern or not _is_space(pattern[-1]):
        trimmed -= _trailing_whitespaces(text)
    if not pattern:
        return MatchResult(trimmed, trimmed, 0), None

    diff = trimmed - len(pattern)
    if diff < 0:
        return NO_MATCH, None

    segment = text[diff:trimmed]
    if any(_fold_simple(c, case_sensitive, normalize) != p for c, p in zip(segment, pattern)):
        return NO_MATCH, None

    score, _ = calculate_score(case_sensitive, normalize, text, pattern, diff, trimmed, False)
    return MatchResult(diff, trimmed, score), None


def equal_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> MatchOutput:
    """Match when text, stripped of surrounding whitespace, equals pattern."""
    len_pattern = len(pattern)
    if len_pattern == 0:
        return NO_MATCH, None

    trimmed = 0 if _is_space(pattern[0]) else _leading_whitespaces(text)
    trimmed_end = 0 if _is_space(pattern[-1]) else _trailing_whitespaces(text)

    if len(text) - trimmed - trimmed_end != len_pattern:
        return NO_MATCH, None

    segment = text[trimmed:len(text) - trimmed_end]
    if normalize:
        matched = all(
            normalize_rune(p) == normalize_rune(c if case_sensitive else _lower_rune(c))
            for p, c in zip(pattern, segment)
        )
    else:
        if not case_sensitive:
            segment = "".join(_lower_rune(c) for c in segment)
        matched = segment == pattern

    if not matched:
        return NO_MATCH, None
    white = SCHEME.bonus_boundary_white
    score = (SCORE_MATCH + white) * len_pattern + (BONUS_FIRST_CHAR_MULTIPLIER - 1) * white
    return MatchResult(trimmed, trimmed + len_pattern, score), None