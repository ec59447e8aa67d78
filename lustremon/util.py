"""Field-group helpers for the semicolon-delimited metric strings."""

from __future__ import annotations

import re

# Seconds between metric samples.
UPDATE_INTERVAL = 5


class ParseError(ValueError):
    """A metric string did not have the expected shape."""


def skip_fields(s: str, n: int, sep: str) -> str:
    """Return what is left of ``s`` after ``n`` ``sep``-delimited fields.

    A trailing delimiter after the last skipped field is consumed too.
    Raises ParseError if ``s`` holds fewer than ``n`` fields.
    """
    pos = 0
    remaining = n
    while remaining > 0 and pos < len(s):
        found = s.find(sep, pos)
        pos = len(s) if found < 0 else found + 1
        remaining -= 1
    if remaining > 0:
        raise ParseError(f"expected {n} fields, found {n - remaining}")
    return s[pos:]


def take_fields(s: str, n: int, sep: str) -> tuple[str, str] | None:
    """Split off a group of ``n`` fields from the front of ``s``.

    Returns ``(group, rest)`` where ``group`` has no trailing delimiter,
    or None when ``s`` does not start with a complete, non-empty group.
    """
    try:
        rest = skip_fields(s, n, sep)
    except ParseError:
        return None
    consumed = len(s) - len(rest)
    if consumed == 0:
        return None
    group = s[:consumed]
    if group.endswith(sep):
        group = group[:-1]
    return group, rest


def append_field(s1: str, s2: str, sep: str) -> str:
    """Join ``s2`` onto ``s1`` with ``sep`` between them."""
    return f"{s1}{sep}{s2}"


def split_tokens(s: str, sep: str) -> list[str]:
    """Split ``s`` on any character of ``sep``, dropping empty tokens."""
    if not sep:
        return [s] if s else []
    pattern = "[" + re.escape(sep) + "]"
    return [tok for tok in re.split(pattern, s) if tok]


def memory_percent(ktotal: int, kfree: int) -> float:
    """Percentage of memory in use, given total and free kilobytes."""
    if ktotal == 0:
        raise ValueError("total memory is zero")
    return (ktotal - kfree) / ktotal * 100.0