"""Temporary file helpers."""

from __future__ import annotations

import os
import tempfile
from typing import Iterable


def write_temporary_file(data: Iterable[str], print_sep: str) -> str:
    """Write the entries, each followed by print_sep, to a new temporary file.

    Returns the file name, or "" if the file could not be created.
    """
    try:
        fd, name = tempfile.mkstemp(prefix="fzf-temp-")
    except OSError:
        return ""
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
        f.write(print_sep.join(data))
        f.write(print_sep)
    return name


def remove_files(files: Iterable[str]) -> None:
    """Delete the given files, ignoring those that cannot be removed."""
    for filename in files:
        try:
            os.remove(filename)
        except OSError:
            pass