"""Character classes, bonus tables and the shared scoring rules of the matchers."""

from __future__ import annotations

import os
import unicodedata
from dataclasses import dataclass, field
from enum import IntEnum

from .normalize import normalize_rune

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1

# Chosen so that the bonus is cancelled once the gap between acronym
# characters grows beyond about 8 characters.
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL123 = BONUS_BOUNDARY + SCORE_GAP_EXTENSION
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

WHITE_CHARS = " \t\n\v\f\r\x85\xa0"
DEFAULT_DELIMITER_CHARS = "/,:;|"

_MAX_ASCII = 0x7F


class CharClass(IntEnum):
    """Classes of characters that decide the bonus of a matching position."""

    WHITE = 0
    NON_WORD = 1
    DELIMITER = 2
    LOWER = 3
    UPPER = 4
    LETTER = 5
    NUMBER = 6


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Span of a match in the text and its score; start and end are -1 when nothing matched."""

    start: int
    end: int
    score: int


NO_MATCH = MatchResult(-1, -1, 0)


@dataclass(frozen=True, slots=True)
class Slab:
    """Capacity budget for the score matrices of the optimal matcher."""

    i16_capacity: int = 100 * 1024
    i32_capacity: int = 2048


@dataclass
class _ScoringScheme:
    bonus_boundary_white: int = BONUS_BOUNDARY + 2
    bonus_boundary_delimiter: int = BONUS_BOUNDARY + 1
    initial_char_class: CharClass = CharClass.WHITE
    delimiter_chars: str = DEFAULT_DELIMITER_CHARS
    ascii_classes: list[CharClass] = field(default_factory=list)
    bonus_matrix: list[list[int]] = field(default_factory=list)


SCHEME = _ScoringScheme()


def init(scheme: str) -> None:
    """Select the scoring scheme: "default", "path" or "history"."""
    if scheme == "default":
        white, delimiter = BONUS_BOUNDARY + 2, BONUS_BOUNDARY + 1
        delimiters, initial = DEFAULT_DELIMITER_CHARS, CharClass.WHITE
    elif scheme == "path":
        white, delimiter = BONUS_BOUNDARY, BONUS_BOUNDARY + 1
        delimiters = "/" if os.sep == "/" else os.sep + "/"
        initial = CharClass.DELIMITER
    elif scheme == "history":
        white, delimiter = BONUS_BOUNDARY, BONUS_BOUNDARY
        delimiters, initial = DEFAULT_DELIMITER_CHARS, CharClass.WHITE
    else:
        raise ValueError(f"invalid scoring scheme: {scheme!r}")

    SCHEME.bonus_boundary_white = white
    SCHEME.bonus_boundary_delimiter = delimiter
    SCHEME.delimiter_chars = delimiters
    SCHEME.initial_char_class = initial
    SCHEME.ascii_classes = [_ascii_class(chr(code)) for code in range(_MAX_ASCII + 1)]
    SCHEME.bonus_matrix = [
        [bonus_for(prev, cur) for cur in CharClass] for prev in CharClass
    ]


def _ascii_class(char: str) -> CharClass:
    if "a" <= char <= "z":
        return CharClass.LOWER
    if "A" <= char <= "Z":
        return CharClass.UPPER
    if "0" <= char <= "9":
        return CharClass.NUMBER
    if char in WHITE_CHARS:
        return CharClass.WHITE
    if char in SCHEME.delimiter_chars:
        return CharClass.DELIMITER
    return CharClass.NON_WORD


def _char_class_of_non_ascii(char: str) -> CharClass:
    category = unicodedata.category(char)
    if category == "Ll":
        return CharClass.LOWER
    if category == "Lu":
        return CharClass.UPPER
    if category.startswith("N"):
        return CharClass.NUMBER
    if category.startswith("L"):
        return CharClass.LETTER
    if char.isspace():
        return CharClass.WHITE
    if char in SCHEME.delimiter_chars:
        return CharClass.DELIMITER
    return CharClass.NON_WORD


def char_class_of(char: str) -> CharClass:
    """Return the class of a single character under the current scheme."""
    if ord(char) <= _MAX_ASCII:
        return SCHEME.ascii_classes[ord(char)]
    return _char_class_of_non_ascii(char)


def bonus_for(prev_class: CharClass, char_class: CharClass) -> int:
    """Return the bonus for a character of char_class following one of prev_class."""
    if char_class > CharClass.NON_WORD:
        if prev_class == CharClass.WHITE:
            return SCHEME.bonus_boundary_white
        if prev_class == CharClass.DELIMITER:
            return SCHEME.bonus_boundary_delimiter
        if prev_class == CharClass.NON_WORD:
            return BONUS_BOUNDARY

    if (prev_class == CharClass.LOWER and char_class == CharClass.UPPER) or (
        prev_class != CharClass.NUMBER and char_class == CharClass.NUMBER
    ):
        return BONUS_CAMEL123

    if char_class in (CharClass.NON_WORD, CharClass.DELIMITER):
        return BONUS_NON_WORD
    if char_class == CharClass.WHITE:
        return SCHEME.bonus_boundary_white
    return 0


def bonus_at(text: str, idx: int) -> int:
    """Return the bonus of the character at idx in text."""
    if idx == 0:
        return SCHEME.bonus_boundary_white
    return SCHEME.bonus_matrix[char_class_of(text[idx - 1])][char_class_of(text[idx])]


def _lower_rune(char: str) -> str:
    lowered = char.lower()
    return lowered if len(lowered) == 1 else lowered[0]


def _fold(char: str, case_sensitive: bool, normalize: bool) -> str:
    if not case_sensitive:
        if "A" <= char <= "Z":
            char = chr(ord(char) + 32)
        elif ord(char) > _MAX_ASCII:
            char = _lower_rune(char)
    if normalize:
        char = normalize_rune(char)
    return char


def _index_at(index: int, size: int, forward: bool) -> int:
    return index if forward else size - index - 1


def calculate_score(
    case_sensitive: bool,
    normalize: bool,
    text: str,
    pattern: str,
    sidx: int,
    eidx: int,
    with_pos: bool,
) -> tuple[int, list[int] | None]:
    """Score the greedy alignment of pattern within text[sidx:eidx].

    Returns the score and, if with_pos is set, the matched positions.
    """
    pidx, score, in_gap, consecutive, first_bonus = 0, 0, False, 0, 0
    positions: list[int] | None = [] if with_pos else None
    matrix = SCHEME.bonus_matrix
    prev_class = SCHEME.initial_char_class
    if sidx > 0:
        prev_class = char_class_of(text[sidx - 1])

    for idx in range(sidx, eidx):
        char = text[idx]
        char_class = char_class_of(char)
        char = _fold(char, case_sensitive, normalize)
        if pidx < len(pattern) and char == pattern[pidx]:
            if positions is not None:
                positions.append(idx)
            score += SCORE_MATCH
            bonus = matrix[prev_class][char_class]
            if consecutive == 0:
                first_bonus = bonus
            else:
                # Break the consecutive chunk on a stronger boundary
                if bonus >= BONUS_BOUNDARY and bonus > first_bonus:
                    first_bonus = bonus
                bonus = max(bonus, first_bonus, BONUS_CONSECUTIVE)
            score += bonus * BONUS_FIRST_CHAR_MULTIPLIER if pidx == 0 else bonus
            in_gap = False
            consecutive += 1
            pidx += 1
        else:
            score += SCORE_GAP_EXTENSION if in_gap else SCORE_GAP_START
            in_gap = True
            consecutive = 0
            first_bonus = 0
        prev_class = char_class
    return score, positions


init("default")