"""Parsing of ANSI escape sequences and tracking of the colour state they set."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import Callable, Optional

DEFAULT_COLOR = -1


class Attr(IntFlag):
    """Text attributes set by SGR sequences."""

    BOLD = 1
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    REVERSE = 1 << 5
    STRIKE_THROUGH = 1 << 6
    BOLD_FORCE = 1 << 10


NO_ATTR = Attr(0)


@dataclass(frozen=True)
class Url:
    """Target of an OSC 8 hyperlink."""

    uri: str
    params: str


@dataclass(frozen=True)
class AnsiState:
    """Foreground, background, attributes, line background and hyperlink in effect."""

    fg: int = DEFAULT_COLOR
    bg: int = DEFAULT_COLOR
    attr: Attr = NO_ATTR
    lbg: int = DEFAULT_COLOR
    url: Optional[Url] = None

    def colored(self) -> bool:
        return (
            self.fg != -1
            or self.bg != -1
            or self.attr > 0
            or self.lbg >= 0
            or self.url is not None
        )

    def equals(self, other: Optional["AnsiState"]) -> bool:
        """Compare states; None stands for the uncoloured state. Hyperlinks compare by identity."""
        if other is None:
            return not self.colored()
        return (
            self.fg == other.fg
            and self.bg == other.bg
            and self.attr == other.attr
            and self.lbg == other.lbg
            and self.url is other.url
        )

    def to_string(self) -> str:
        """Render the state as an escape sequence, or "" when uncoloured."""
        if not self.colored():
            return ""
        codes = ""
        if self.attr & (Attr.BOLD | Attr.BOLD_FORCE):
            codes += "1;"
        for flag, code in (
            (Attr.DIM, "2;"),
            (Attr.ITALIC, "3;"),
            (Attr.UNDERLINE, "4;"),
            (Attr.BLINK, "5;"),
            (Attr.REVERSE, "7;"),
            (Attr.STRIKE_THROUGH, "9;"),
        ):
            if self.attr & flag:
                codes += code
        codes += _to_ansi_string(self.fg, 30) + _to_ansi_string(self.bg, 40)
        result = "\x1b[" + codes.removesuffix(";") + "m"
        if self.url is not None:
            result = f"\x1b]8;{self.url.params};{self.url.uri}\x1b\\{result}\x1b]8;;\x1b"
        return result


@dataclass
class AnsiOffset:
    """A run of characters [start, end) drawn with the given colour state."""

    start: int
    end: int
    color: AnsiState


def _to_ansi_string(color: int, offset: int) -> str:
    if color == -1:
        code = str(offset + 9)
    elif color < 8:
        code = str(offset + color)
    elif color < 16:
        code = str(offset - 30 + 90 + color - 8)
    elif color < 256:
        code = f"{offset + 8};5;{color}"
    elif color >= 1 << 24:
        r, g, b = (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
        code = f"{offset + 8};2;{r};{g};{b}"
    else:
        code = ""
    return code + ";"


def _is_print(char: str) -> bool:
    return "\x20" <= char <= "\x7e"


def _match_operating_system_command(s: str, base: int, start: int) -> int:
    # Matches the tail of `\x1b][0-9]+[;:][[:print:]]+(?:\x1b\\|\x07)`
    # beginning at start; base is the position of the escape character.
    n = len(s)
    i = start
    while i < n and _is_print(s[i]):
        i += 1
    if i < n:
        if s[i] == "\x07":
            return i + 1
        if s[i] == "\x1b" and i < n - 1 and s[i + 1] == "\\":
            return i + 2
    # The closing `\x1b]8;;\x1b` of a hyperlink
    if i < n and s[base:i + 1] == "\x1b]8;;\x1b":
        return i + 1
    return -1


def _match_control_sequence(s: str, base: int) -> int:
    # Matches `\x1b[\\[()][0-9;:?]*[a-zA-Z@]` from base + 2.
    for i in range(base + 2, len(s)):
        c = s[i]
        if c in "0123456789;:?":
            continue
        if "a" <= c <= "z" or "A" <= c <= "Z" or c == "@":
            return i + 1
        return -1
    return -1


_SPECIAL = frozenset("\x0e\x0f\x1b\x08")


def _find_sequence(s: str, pos: int = 0) -> tuple[int, int]:
    n = len(s)
    first = next((i for i in range(pos, n) if s[i] in _SPECIAL), -1)
    if first < 0:
        return -1, -1

    for i in range(first, n):
        c = s[i]
        if c == "\x08":
            if i > pos and s[i - 1] != "\n":
                return i - 1, i + 1
        elif c == "\x1b":
            if i + 2 < n and s[i + 1] in "\\[()":
                j = _match_control_sequence(s, i)
                if j != -1:
                    return i, j

            if i + 5 < n and s[i + 1] == "]":
                j = i + 2
                while j < n and "0" <= s[j] <= "9":
                    j += 1
                if j > i + 2 and j + 1 < n and s[j] in ";:" and _is_print(s[j + 1]):
                    k = _match_operating_system_command(s, i, j + 2)
                    if k != -1:
                        return i, k

            if i + 1 < n and s[i + 1] != "\n":
                return i, i + 2
        elif c in "\x0e\x0f":
            return i, i + 1
    return -1, -1


def next_ansi_escape_sequence(s: str) -> tuple[int, int]:
    """Return the [start, end) span of the first escape sequence in s, or (-1, -1)."""
    return _find_sequence(s, 0)


def parse_ansi_code(s: str) -> tuple[int, str]:
    """Split off the first numeric parameter; returns (number or -1, remaining text)."""
    remaining = ""
    i = s.find(";")
    if i < 0:
        i = s.find(":")
    if i >= 0:
        remaining = s[i + 1:]
        s = s[:i]
    if s and all("0" <= c <= "9" for c in s):
        return int(s), remaining
    return -1, remaining


def interpret_code(ansi_code: str, prev_state: Optional[AnsiState]) -> AnsiState:
    """Apply one escape sequence to prev_state and return the resulting state."""
    base = prev_state if prev_state is not None else AnsiState()
    colors = {"fg": base.fg, "bg": base.bg}
    attr, lbg, url = base.attr, base.lbg, base.url

    def build() -> AnsiState:
        return AnsiState(colors["fg"], colors["bg"], attr, lbg, url)

    if not (ansi_code.startswith("\x1b[") and ansi_code.endswith("m")):
        if prev_state is not None and ansi_code.endswith("0K"):
            lbg = prev_state.bg
        elif ansi_code.startswith("\x1b]8;") and (
            ansi_code.endswith("\x1b\\") or ansi_code.endswith("\a")
        ):
            st_len = 1 if ansi_code.endswith("\a") else 2
            if len(ansi_code) == 5 + st_len and ansi_code[4] == ";":
                url = None
            else:
                params_end = ansi_code.find(";", 4)
                if params_end >= 0:
                    url = Url(
                        uri=ansi_code[params_end + 1:len(ansi_code) - st_len],
                        params=ansi_code[4:params_end],
                    )
        return build()

    if len(ansi_code) <= 3:
        return AnsiState(DEFAULT_COLOR, DEFAULT_COLOR, NO_ATTR, lbg, url)

    body = ansi_code[2:-1]
    state256 = 0
    target = "fg"
    count = 0
    set_attrs = {
        1: Attr.BOLD, 2: Attr.DIM, 3: Attr.ITALIC, 4: Attr.UNDERLINE,
        5: Attr.BLINK, 7: Attr.REVERSE, 9: Attr.STRIKE_THROUGH,
    }
    clear_attrs = {
        22: Attr.BOLD | Attr.DIM, 23: Attr.ITALIC, 24: Attr.UNDERLINE,
        25: Attr.BLINK, 27: Attr.REVERSE, 29: Attr.STRIKE_THROUGH,
    }
    while body:
        num, body = parse_ansi_code(body)
        if num == -1:
            continue
        count += 1
        if state256 == 0:
            if num == 38:
                target, state256 = "fg", 1
            elif num == 48:
                target, state256 = "bg", 1
            elif num == 39:
                colors["fg"] = DEFAULT_COLOR
            elif num == 49:
                colors["bg"] = DEFAULT_COLOR
            elif num in set_attrs:
                attr |= set_attrs[num]
            elif num in clear_attrs:
                attr &= ~clear_attrs[num]
            elif num == 0:
                colors["fg"] = colors["bg"] = DEFAULT_COLOR
                attr = NO_ATTR
            elif 30 <= num <= 37:
                colors["fg"] = num - 30
            elif 40 <= num <= 47:
                colors["bg"] = num - 40
            elif 90 <= num <= 97:
                colors["fg"] = num - 90 + 8
            elif 100 <= num <= 107:
                colors["bg"] = num - 100 + 8
        elif state256 == 1:
            if num == 2:
                state256 = 10
            elif num == 5:
                state256 = 2
            else:
                state256 = 0
        elif state256 == 2:
            colors[target] = num
            state256 = 0
        elif state256 == 10:
            colors[target] = (1 << 24) | (num << 16)
            state256 = 11
        elif state256 == 11:
            colors[target] |= num << 8
            state256 = 12
        elif state256 == 12:
            colors[target] |= num
            state256 = 0

    if count == 0:
        colors["fg"] = colors["bg"] = DEFAULT_COLOR
        attr = NO_ATTR
    if state256 > 0:
        colors[target] = DEFAULT_COLOR
    return build()


Processor = Callable[[str, Optional[AnsiState]], bool]


def extract_color(
    text: str,
    state: Optional[AnsiState],
    proc: Optional[Processor] = None,
) -> tuple[str, Optional[list[AnsiOffset]], Optional[AnsiState]]:
    """Strip escape sequences from text.

    Returns the plain text, the coloured runs (None if there are none) and
    the state in effect at the end. proc, if given, is called with each
    plain segment and the state before it; returning False aborts with
    ("", None, None).
    """
    offsets: list[AnsiOffset] = []
    if state is not None:
        offsets.append(AnsiOffset(0, 0, state))

    parts: list[str] = []
    prev_idx = 0
    rune_count = 0
    idx = 0
    while idx < len(text):
        start, end = _find_sequence(text, idx)
        if start == -1:
            break
        idx = end

        prev = text[prev_idx:start]
        if proc is not None and not proc(prev, state):
            return "", None, None
        prev_idx = idx

        if prev:
            rune_count += len(prev)
            parts.append(prev)

        new_state = interpret_code(text[start:idx], state)
        if not new_state.equals(state):
            if state is not None:
                offsets[-1].end = rune_count
            if new_state.colored():
                state = new_state
                offsets.append(AnsiOffset(rune_count, rune_count, new_state))
            else:
                state = None

    if prev_idx == 0:
        rest = text
        trimmed = text
    else:
        rest = text[prev_idx:]
        parts.append(rest)
        trimmed = "".join(parts)
    if proc is not None:
        proc(rest, state)
    if offsets:
        if rest and state is not None:
            rune_count += len(rest)
            offsets[-1].end = rune_count
        return trimmed, offsets, state
    return trimmed, None, state