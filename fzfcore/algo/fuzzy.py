"""Fuzzy matchers: a fast greedy one and an optimal Smith-Waterman variant."""

from __future__ import annotations

from .normalize import normalize_rune
from .scheme import (
    BONUS_BOUNDARY,
    BONUS_CONSECUTIVE,
    BONUS_FIRST_CHAR_MULTIPLIER,
    NO_MATCH,
    SCHEME,
    SCORE_GAP_EXTENSION,
    SCORE_GAP_START,
    SCORE_MATCH,
    CharClass,
    MatchResult,
    Slab,
    _char_class_of_non_ascii,
    _fold,
    _index_at,
    _lower_rune,
    calculate_score,
)

Positions = "list[int] | None"


def _try_skip(text: str, case_sensitive: bool, b: str, start: int) -> int:
    idx = text.find(b, start)
    if idx == start:
        return start
    # The uppercase form may occur earlier; the text is ASCII here.
    if not case_sensitive and "a" <= b <= "z":
        end = idx if idx >= 0 else len(text)
        uidx = text.find(b.upper(), start, end)
        if uidx >= 0:
            idx = uidx
    return idx


def ascii_fuzzy_index(text: str, pattern: str, case_sensitive: bool) -> tuple[int, int]:
    """Narrow the range of text in which pattern can match.

    Returns (-1, -1) when no match is possible, and the whole range when the
    text is not ASCII.
    """
    if not text.isascii():
        return 0, len(text)
    if not pattern.isascii():
        return -1, -1

    first_idx = idx = last_idx = 0
    b = "\x00"
    for pidx, b in enumerate(pattern):
        idx = _try_skip(text, case_sensitive, b, idx)
        if idx < 0:
            return -1, -1
        if pidx == 0 and idx > 0:
            # Step back to find the right bonus point
            first_idx = idx - 1
        last_idx = idx
        idx += 1

    # Limit the scope to the last appearance of the last pattern character
    bu = b.upper() if not case_sensitive and "a" <= b <= "z" else b
    last = max(text.rfind(b, last_idx + 1), text.rfind(bu, last_idx + 1))
    if last > last_idx:
        return first_idx, last + 1
    return first_idx, last_idx + 1


def fuzzy_match_v1(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> tuple[MatchResult, list[int] | None]:
    """Find the first fuzzy occurrence of pattern and shrink it backwards."""
    if not pattern:
        return MatchResult(0, 0, 0), None
    idx, _ = ascii_fuzzy_index(text, pattern, case_sensitive)
    if idx < 0:
        return NO_MATCH, None

    pidx, sidx, eidx = 0, -1, -1
    len_runes = len(text)
    len_pattern = len(pattern)

    for index in range(len_runes):
        char = _fold(text[_index_at(index, len_runes, forward)], case_sensitive, normalize)
        if char == pattern[_index_at(pidx, len_pattern, forward)]:
            if sidx < 0:
                sidx = index
            pidx += 1
            if pidx == len_pattern:
                eidx = index + 1
                break

    if sidx < 0 or eidx < 0:
        return NO_MATCH, None

    pidx -= 1
    for index in range(eidx - 1, sidx - 1, -1):
        char = _fold(text[_index_at(index, len_runes, forward)], case_sensitive, normalize)
        if char == pattern[_index_at(pidx, len_pattern, forward)]:
            pidx -= 1
            if pidx < 0:
                sidx = index
                break

    if not forward:
        sidx, eidx = len_runes - eidx, len_runes - sidx

    score, positions = calculate_score(case_sensitive, normalize, text, pattern, sidx, eidx, with_pos)
    return MatchResult(sidx, eidx, score), positions


def fuzzy_match_v2(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    slab: Slab | None = None,
) -> tuple[MatchResult, list[int] | None]:
    """Find the highest-scoring fuzzy occurrence of pattern in text.

    Falls back to fuzzy_match_v1 when the score matrix would exceed the slab.
    """
    m = len(pattern)
    if m == 0:
        return MatchResult(0, 0, 0), ([] if with_pos else None)
    n = len(text)
    if m > n:
        return NO_MATCH, None

    if slab is not None and n * m > slab.i16_capacity:
        return fuzzy_match_v1(case_sensitive, normalize, forward, text, pattern, with_pos, slab)

    # Phase 1. Narrow the search range
    min_idx, max_idx = ascii_fuzzy_index(text, pattern, case_sensitive)
    if min_idx < 0:
        return NO_MATCH, None
    n = max_idx - min_idx

    h0 = [0] * n
    c0 = [0] * n
    bonuses = [0] * n
    first_occ = [0] * m
    chars = list(text[min_idx:max_idx])

    ascii_classes = SCHEME.ascii_classes
    matrix = SCHEME.bonus_matrix

    # Phase 2. Bonus for each position and the first row of the matrix
    max_score, max_score_pos = 0, 0
    pidx, last_idx = 0, 0
    pchar0 = pchar = pattern[0]
    prev_h0 = 0
    prev_class = SCHEME.initial_char_class
    in_gap = False
    for off, char in enumerate(chars):
        code = ord(char)
        if code <= 0x7F:
            char_class = ascii_classes[code]
            if not case_sensitive and char_class == CharClass.UPPER:
                char = chr(code + 32)
                chars[off] = char
        else:
            char_class = _char_class_of_non_ascii(char)
            if not case_sensitive and char_class == CharClass.UPPER:
                char = _lower_rune(char)
            if normalize:
                char = normalize_rune(char)
            chars[off] = char

        bonus = matrix[prev_class][char_class]
        bonuses[off] = bonus
        prev_class = char_class

        if char == pchar:
            if pidx < m:
                first_occ[pidx] = off
                pidx += 1
                pchar = pattern[min(pidx, m - 1)]
            last_idx = off

        if char == pchar0:
            score = SCORE_MATCH + bonus * BONUS_FIRST_CHAR_MULTIPLIER
            h0[off] = score
            c0[off] = 1
            if m == 1 and ((forward and score > max_score) or (not forward and score >= max_score)):
                max_score, max_score_pos = score, off
                if forward and bonus >= BONUS_BOUNDARY:
                    break
            in_gap = False
        else:
            gap = SCORE_GAP_EXTENSION if in_gap else SCORE_GAP_START
            h0[off] = max(prev_h0 + gap, 0)
            c0[off] = 0
            in_gap = True
        prev_h0 = h0[off]

    if pidx != m:
        return NO_MATCH, None
    if m == 1:
        result = MatchResult(min_idx + max_score_pos, min_idx + max_score_pos + 1, max_score)
        return result, ([min_idx + max_score_pos] if with_pos else None)

    # Phase 3. Fill in the score matrix; omission is not allowed
    f0 = first_occ[0]
    width = last_idx - f0 + 1
    h = [0] * (width * m)
    h[:width] = h0[f0:last_idx + 1]
    consec = [0] * (width * m)
    consec[:width] = c0[f0:last_idx + 1]

    for pidx in range(1, m):
        f = first_occ[pidx]
        pchar = pattern[pidx]
        row = pidx * width
        in_gap = False
        h[row + f - f0 - 1] = 0
        for col in range(f, last_idx + 1):
            j0 = col - f0
            gap = SCORE_GAP_EXTENSION if in_gap else SCORE_GAP_START
            s2 = h[row + j0 - 1] + gap
            s1 = 0
            consecutive = 0
            if pchar == chars[col]:
                diag = row - width + j0 - 1
                s1 = h[diag] + SCORE_MATCH
                b = bonuses[col]
                consecutive = consec[diag] + 1
                if consecutive > 1:
                    fb = bonuses[col - consecutive + 1]
                    # Break the consecutive chunk
                    if b >= BONUS_BOUNDARY and b > fb:
                        consecutive = 1
                    else:
                        b = max(b, BONUS_CONSECUTIVE, fb)
                if s1 + b < s2:
                    s1 += bonuses[col]
                    consecutive = 0
                else:
                    s1 += b
            consec[row + j0] = consecutive

            in_gap = s1 < s2
            score = max(s1, s2, 0)
            if pidx == m - 1 and ((forward and score > max_score) or (not forward and score >= max_score)):
                max_score, max_score_pos = score, col
            h[row + j0] = score

    # Phase 4. Backtrace to find character positions
    positions: list[int] | None = None
    j = f0
    if with_pos:
        positions = []
        i = m - 1
        j = max_score_pos
        prefer_match = True
        while True:
            base = i * width
            j0 = j - f0
            s = h[base + j0]
            s1 = h[base - width + j0 - 1] if i > 0 and j >= first_occ[i] else 0
            s2 = h[base + j0 - 1] if j > first_occ[i] else 0

            if s > s1 and (s > s2 or (s == s2 and prefer_match)):
                positions.append(j + min_idx)
                if i == 0:
                    break
                i -= 1
            below = base + width + j0 + 1
            prefer_match = consec[base + j0] > 1 or (below < len(consec) and consec[below] > 0)
            j -= 1

    # The start offset is only exact when positions were traced back.
    return MatchResult(min_idx + j, min_idx + max_score_pos + 1, max_score), positions