"""Fuzzy matching core: scoring algorithms, ANSI parsing, chunked item storage, result merging and query history."""

__version__ = "0.62.0"