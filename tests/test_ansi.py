import random
import re

import pytest

from fzfcore.ansi import (
    AnsiState,
    Attr,
    Url,
    extract_color,
    interpret_code,
    next_ansi_escape_sequence,
    parse_ansi_code,
)

REFERENCE = re.compile(
    "(?:\x1b[\\[()][0-9;:]*[a-zA-Z@]|\x1b][0-9][;:][\x20-\x7e]+(?:\x1b\\\\|\x07)|\x1b.|[\x0e\x0f]|.\x08)"
)

BENCHMARK_STRING = (
    "\x1b[38;5;81m\x1b[01;31m\x1b[Kkernel/\x1b[0m\x1b[38:5:81mbpf/"
    "\x1b[0m\x1b[38:5:81mpreload/\x1b[0m\x1b[38;5;81miterators/"
    "\x1b[0m\x1b[38:5:149mMakefile\x1b[m\x1b[K\x1b[0m"
)

BASE_STRINGS = [
    "\x1b[0mhello world",
    "\x1b[1mhello world",
    "椙\x1b[1m椙",
    "椙\x1b[1椙m椙",
    "\x1b[1mhello \x1b[mw\x1b7o\x1b8r\x1b(Bl\x1b[2@d",
    "\x1b[1mhello \x1b[Kworld",
    "hello \x1b[34;45;1mworld",
    "hello \x1b[34;45;1mwor\x1b[34;45;1mld",
    "hello \x1b[34;45;1mwor\x1b[0mld",
    "hello \x1b[34;48;5;233;1mwo\x1b[38;5;161mr\x1b[0ml\x1b[38;5;161md",
    "hello \x1b[38;5;38;48;5;48;1mwor\x1b[38;5;48;48;5;38ml\x1b[0md",
    "hello \x1b[32;1mworld",
    "hello world",
    "hello \x1b[0;38;5;200;48;5;100mworld",
    BENCHMARK_STRING,
]


def reference_spans(s):
    spans = []
    while True:
        got = next_ansi_escape_sequence(s)
        m = REFERENCE.search(s)
        expected = (m.start(), m.end()) if m else (-1, -1)
        spans.append((got, expected))
        if m is None:
            return spans
        s = s[m.end():]


def assert_matches_reference(s):
    for got, expected in reference_spans(s):
        assert got == expected, repr(s)


@pytest.mark.parametrize(
    "s",
    BASE_STRINGS
    + [
        "\x1b椙",
        "椙\x08",
        "\n\x08",
        "X\x08",
        "",
        "\x1b]4;3;rgb:aa/bb/cc\x07 ",
        "\x1b]4;3;rgb:aa/bb/cc\x1b\\ ",
    ],
)
def test_next_ansi_escape_sequence(s):
    assert_matches_reference(s)


def test_next_ansi_escape_sequence_spans():
    assert next_ansi_escape_sequence("hello world") == (-1, -1)
    assert next_ansi_escape_sequence("ab\x1b[31mc") == (2, 7)
    assert next_ansi_escape_sequence("椙\x08") == (0, 2)


def _random_char(rng):
    while True:
        code = rng.randrange(0x110000)
        if not 0xD800 <= code <= 0xDFFF:
            return chr(code)


def test_next_ansi_escape_sequence_modified_strings():
    rng = random.Random(1)
    replacements = "\x0e\x0f\x1b\x08"
    for base in BASE_STRINGS:
        for _ in range(200):
            chars = list(base)
            for _ in range(rng.randrange(len(base)) + 1):
                if not chars:
                    break
                i = rng.randrange(len(chars))
                choice = rng.randrange(3)
                if choice == 0:
                    del chars[i]
                elif choice == 1:
                    chars[i] = replacements[rng.randrange(len(replacements) - 1)]
                else:
                    chars[i] = _random_char(rng)
            assert_matches_reference("".join(chars))


def test_next_ansi_escape_sequence_random_strings():
    rng = random.Random(1)
    for _ in range(2000):
        s = "".join(_random_char(rng) for _ in range(rng.randrange(50)))
        assert_matches_reference(s)


def assert_offset(offset, start, end, fg, bg, bold):
    attr = Attr.BOLD if bold else Attr(0)
    assert (offset.start, offset.end) == (start, end)
    assert (offset.color.fg, offset.color.bg, offset.color.attr) == (fg, bg, attr)


def test_extract_color():
    def check(src, state):
        output, offsets, new_state = extract_color(src, state, None)
        assert output == "hello world"
        return offsets, new_state

    offsets, state = check("hello world", None)
    assert offsets is None

    offsets, state = check("\x1b[0mhello world", None)
    assert offsets is None

    offsets, state = check("\x1b[1mhello world", None)
    assert len(offsets) == 1
    assert_offset(offsets[0], 0, 11, -1, -1, True)

    offsets, state = check("\x1b[1mhello \x1b[mw\x1b7o\x1b8r\x1b(Bl\x1b[2@d", None)
    assert len(offsets) == 1
    assert_offset(offsets[0], 0, 6, -1, -1, True)

    offsets, state = check("\x1b[1mhello \x1b[Kworld", None)
    assert len(offsets) == 1
    assert_offset(offsets[0], 0, 11, -1, -1, True)

    offsets, state = check("hello \x1b[34;45;1mworld", None)
    assert len(offsets) == 1
    assert_offset(offsets[0], 6, 11, 4, 5, True)

    offsets, state = check("hello \x1b[34;45;1mwor\x1b[34;45;1mld", None)
    assert len(offsets) == 1
    assert_offset(offsets[0], 6, 11, 4, 5, True)

    offsets, state = check("hello \x1b[34;45;1mwor\x1b[0mld", None)
    assert len(offsets) == 1
    assert_offset(offsets[0], 6, 9, 4, 5, True)

    offsets, state = check(
        "hello \x1b[34;48;5;233;1mwo\x1b[38;5;161mr\x1b[0ml\x1b[38;5;161md", None)
    assert len(offsets) == 3
    assert_offset(offsets[0], 6, 8, 4, 233, True)
    assert_offset(offsets[1], 8, 9, 161, 233, True)
    assert_offset(offsets[2], 10, 11, 161, -1, False)

    offsets, state = check(
        "hello \x1b[38;5;38;48;5;48;1mwor\x1b[38;5;48;48;5;38ml\x1b[0md", None)
    assert len(offsets) == 2
    assert_offset(offsets[0], 6, 9, 38, 48, True)
    assert_offset(offsets[1], 9, 10, 48, 38, True)

    offsets, state = check("hello \x1b[32;1mworld", state)
    assert len(offsets) == 1
    assert (state.fg, state.bg) == (2, -1) and state.attr != 0
    assert_offset(offsets[0], 6, 11, 2, -1, True)

    offsets, state = check("hello world", state)
    assert len(offsets) == 1
    assert (state.fg, state.bg) == (2, -1) and state.attr != 0
    assert_offset(offsets[0], 0, 11, 2, -1, True)

    offsets, state = check("hello \x1b[0;38;5;200;48;5;100mworld", state)
    assert len(offsets) == 2
    assert (state.fg, state.bg, state.attr) == (200, 100, Attr(0))
    assert_offset(offsets[0], 0, 6, 2, -1, True)
    assert_offset(offsets[1], 6, 11, 200, 100, False)

    color24 = (1 << 24) + (180 << 16) + (190 << 8) + 254
    offsets, state = check("\x1b[1mhello \x1b[22;1;38:2:180:190:254mworld", None)
    assert len(offsets) == 2
    assert state.fg == color24 and state.attr == Attr.BOLD
    assert_offset(offsets[0], 0, 6, -1, -1, True)
    assert_offset(offsets[1], 6, 11, color24, -1, True)

    offsets, state = check("\x1b]133;A\x1b\\hello \x1b]133;C\x1b\\world", state)
    assert len(offsets) == 1
    assert_offset(offsets[0], 0, 11, color24, -1, True)


def test_extract_color_proc_can_abort():
    seen = []

    def proc(segment, state):
        seen.append(segment)
        return False

    assert extract_color("foo\x1b[31mbar", None, proc) == ("", None, None)
    assert seen == ["foo"]


@pytest.mark.parametrize(
    "code, prev, expected",
    [
        ("\x1b[m", None, ""),
        ("\x1b[m", AnsiState(fg=0, bg=0, attr=Attr.BLINK, lbg=-1), ""),
        ("\x1b[0m", AnsiState(fg=4, bg=4, lbg=-1), ""),
        ("\x1b[;m", AnsiState(fg=4, bg=4, lbg=-1), ""),
        ("\x1b[;;m", AnsiState(fg=4, bg=4, lbg=-1), ""),
        ("\x1b[31m", None, "\x1b[31;49m"),
        ("\x1b[41m", None, "\x1b[39;41m"),
        ("\x1b[92m", None, "\x1b[92;49m"),
        ("\x1b[102m", None, "\x1b[39;102m"),
        ("\x1b[31m", AnsiState(fg=4, bg=4, lbg=-1), "\x1b[31;44m"),
        ("\x1b[1;2;31m", AnsiState(fg=2, bg=-1, attr=Attr.REVERSE, lbg=-1), "\x1b[1;2;7;31;49m"),
        ("\x1b[38;5;100;48;5;200m", None, "\x1b[38;5;100;48;5;200m"),
        ("\x1b[38:5:100:48:5:200m", None, "\x1b[38;5;100;48;5;200m"),
        ("\x1b[48;5;100;38;5;200m", None, "\x1b[38;5;200;48;5;100m"),
        ("\x1b[48;5;100;38;2;10;20;30;1m", None, "\x1b[1;38;2;10;20;30;48;5;100m"),
        (
            "\x1b[48;5;100;38;2;10;20;30;7m",
            AnsiState(fg=1, bg=1, attr=Attr.DIM | Attr.ITALIC, lbg=0),
            "\x1b[2;3;7;38;2;10;20;30;48;5;100m",
        ),
    ],
)
def test_ansi_code_string_conversion(code, prev, expected):
    assert interpret_code(code, prev).to_string() == expected


@pytest.mark.parametrize(
    "text, number, remaining",
    [
        ("123", 123, ""),
        ("1a", -1, ""),
        ("1a;12", -1, "12"),
        ("12;a", 12, "a"),
        ("-2", -1, ""),
    ],
)
def test_parse_ansi_code(text, number, remaining):
    assert parse_ansi_code(text) == (number, remaining)


def test_hyperlink_state():
    state = interpret_code("\x1b]8;id=1;https://example.com/doc\x1b\\", None)
    assert state.url == Url(uri="https://example.com/doc", params="id=1")
    assert state.to_string() == "\x1b]8;id=1;https://example.com/doc\x1b\\\x1b[39;49m\x1b]8;;\x1b"
    closed = interpret_code("\x1b]8;;\x1b\\", state)
    assert closed.url is None
    assert not closed.colored()


def test_line_background_from_erase():
    prev = AnsiState(fg=1, bg=3)
    assert interpret_code("\x1b[0K", prev).lbg == 3


def test_equals_with_none():
    assert AnsiState().equals(None)
    assert not AnsiState(fg=1).equals(None)
    assert AnsiState(fg=1).equals(AnsiState(fg=1))