"""Query history stored in a plain text file, one entry per line."""

from __future__ import annotations

import os


class HistoryError(Exception):
    """The history file cannot be read or created."""


def _write(path: str, text: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(text)


class History:
    """Navigable query history; the last line is the entry being edited."""

    def __init__(self, path: str, max_size: int) -> None:
        self.path = path
        self.max_size = max_size
        try:
            with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
                data = f.read()
        except FileNotFoundError:
            data = ""
            try:
                _write(path, data)
            except OSError as exc:
                raise self._error(exc) from exc
        except OSError as exc:
            raise self._error(exc) from exc

        lines = data.strip("\n").split("\n")
        if lines[-1]:
            lines.append("")
        self.lines = lines
        self.modified: dict[int, str] = {}
        self.cursor = len(lines) - 1

    def _error(self, exc: OSError) -> HistoryError:
        if isinstance(exc, PermissionError):
            return HistoryError("permission denied: " + self.path)
        return HistoryError("invalid history file: " + str(exc))

    def append(self, line: str) -> None:
        """Add a non-empty line, keep at most max_size entries and save the file."""
        if not line:
            return
        lines = self.lines[:-1] + [line]
        if len(lines) > self.max_size:
            lines = lines[len(lines) - self.max_size:]
        self.lines = lines + [""]
        _write(self.path, "\n".join(self.lines))

    def override(self, text: str) -> None:
        """Replace the entry under the cursor in memory only."""
        last = len(self.lines) - 1
        if self.cursor == last:
            self.lines[self.cursor] = text
        elif self.cursor < last:
            self.modified[self.cursor] = text

    def current(self) -> str:
        """The entry under the cursor."""
        return self.modified.get(self.cursor, self.lines[self.cursor])

    def previous(self) -> str:
        """Move to the older entry and return it."""
        if self.cursor > 0:
            self.cursor -= 1
        return self.current()

    def next(self) -> str:
        """Move to the newer entry and return it."""
        if self.cursor < len(self.lines) - 1:
            self.cursor += 1
        return self.current()