"""A single input line together with its colours and original text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .ansi import AnsiOffset, extract_color


@dataclass
class Item:
    """One input line.

    text is what is matched against; orig_text, when set, is the line as it
    was read, before any field transformation.
    """

    text: str = ""
    index: int = 0
    orig_text: Optional[str] = None
    colors: Optional[list[AnsiOffset]] = None

    def colors_or_empty(self) -> list[AnsiOffset]:
        """Return the coloured runs of the item, or an empty list."""
        return self.colors if self.colors is not None else []

    def as_string(self, strip_ansi: bool) -> str:
        """Return the original line, with escape sequences removed if strip_ansi."""
        if self.orig_text is not None:
            if strip_ansi:
                trimmed, _, _ = extract_color(self.orig_text, None, None)
                return trimmed
            return self.orig_text
        return self.text


MIN_ITEM = Item(index=-(2**31))