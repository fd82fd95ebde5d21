# fzfcore

The matching core of a command-line fuzzy finder as a plain Python library,
with no third-party dependencies.

## What it contains

- `fzfcore.algo.scheme`: character classes (`CharClass`), the `MatchResult`
  span and score, the `Slab` capacity budget, and `init(scheme)`. `init`
  selects the bonus values with `"default"`, `"path"` or `"history"`, and
  raises `ValueError` for any other name. `"default"` is active on import.
  The module also has `char_class_of`, `bonus_for`, `bonus_at` and
  `calculate_score`.
- `fzfcore.algo.fuzzy`:
  - `fuzzy_match_v1` is greedy: it takes the first occurrence and shrinks it
    backwards.
  - `fuzzy_match_v2` finds the optimal alignment. It falls back to v1 when a
    `Slab` is given and the score matrix would exceed it.
  - `ascii_fuzzy_index` narrows the search range.
- `fzfcore.algo.exact`: `exact_match_naive`, `exact_match_boundary`,
  `prefix_match`, `suffix_match` and `equal_match`.
- `fzfcore.algo.normalize`: `normalize_rune` and `normalize_runes` map
  accented and variant Latin letters to their plain forms.
- `fzfcore.ansi`: `extract_color` strips escape sequences from a line. It
  returns the plain text, the colored runs (`AnsiOffset`) and the final
  `AnsiState`. The module also has `next_ansi_escape_sequence`,
  `parse_ansi_code` and `interpret_code`, plus the `Attr`, `Url`,
  `AnsiState` and `AnsiOffset` types.
- `fzfcore.item`: `Item`, which holds a line's text, its index, its optional
  original text and its colors.
- `fzfcore.chunklist`: `Chunk` (up to 100 items), `ChunkList` and
  `count_items`. `ChunkList` is thread-safe and append-only, and
  `ChunkList.snapshot(tail)` returns `(chunks, count, changed)`.
- `fzfcore.cache`: `ChunkCache`, which caches query results for full chunks.
- `fzfcore.merger`: `Merger`, `Result`, `empty_merger` and `pass_merger`. A
  `Merger` gives one ordered view over several result lists, or over whole
  chunks in their original order.
- `fzfcore.history`: `History`, a query history kept in a file and capped at
  `max_size` entries. It raises `HistoryError` when the file cannot be read
  or created.
- `fzfcore.functions`: `write_temporary_file` and `remove_files`.
- `fzfcore.constants`: sizes and limits, and the `ExitCode` enum.

## Matching

Every matcher takes the arguments
`(case_sensitive, normalize, forward, text, pattern, with_pos, slab)` and
returns `(MatchResult, positions)`. Only the two fuzzy matchers fill in
`positions`, and only when `with_pos` is true. The other matchers always
return `None` for it. A failed match has `start == end == -1`.

In case-insensitive mode, pass the pattern already in lowercase. With
`normalize`, pass it already normalized.

```python
from fzfcore.algo.fuzzy import fuzzy_match_v2
from fzfcore.algo.exact import prefix_match

result, positions = fuzzy_match_v2(False, False, True, "foo bar baz", "fbb", True, None)
print(result.start, result.end, result.score, sorted(positions))  # 0 9 ... [0, 4, 8]

result, _ = prefix_match(False, False, True, "  fooBar", "foo", False, None)
print(result.start, result.end)  # 2 5
```

## Stripping colors

```python
from fzfcore.ansi import extract_color

text, offsets, state = extract_color("hello \x1b[31mworld", None, None)
# text == "hello world"
# offsets == [AnsiOffset(start=6, end=11, color=AnsiState(fg=1, ...))]
```

To carry the color state across lines, pass the returned `state` into the
next call.

## Storing items and listing them

```python
from itertools import count
from fzfcore.cache import ChunkCache
from fzfcore.chunklist import ChunkList
from fzfcore.item import Item
from fzfcore.merger import pass_merger

counter = count()
chunks = ChunkList(ChunkCache(), lambda data: Item(text=data.decode(), index=next(counter)))
for line in (b"alpha", b"beta", b"gamma"):
    chunks.push(line)

snapshot, total, _ = chunks.snapshot(0)
merger = pass_merger(snapshot, False, None)
print([merger.get(i).item.text for i in range(merger.length())])
```

## What it does not do

This is a library only. It has no command to run and no interactive
terminal interface. It does not read input from processes or walk
directories. It does not parse extended query syntax, and it does not
schedule searches across threads. The matchers, storage and merger are the
building blocks for such a program.

## Running the tests

```
pip install ".[test]"
pytest
```