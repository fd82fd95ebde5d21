"""Fuzzy, exact, prefix, suffix and equality matchers, scoring schemes and Latin normalization."""

__all__ = ["normalize", "scheme", "fuzzy", "exact"]