"""Deterministic sort keys for catalog output.

Line labels use a natural ordering where digit runs compare as numbers,
so ``"7A"`` sorts before ``"10"``. Text runs compare case-insensitively;
the original string breaks remaining ties so the order is total.
"""

from __future__ import annotations

import re

_DIGITS = re.compile(r"(\d+)")


def natural_key(value: str) -> tuple[tuple[str | int, ...], str]:
    # re.split with a capture group alternates text/digits, so even
    # positions are always text and odd positions always digit runs.
    parts = _DIGITS.split(value)
    return tuple(int(part) if i % 2 else part.casefold() for i, part in enumerate(parts)), value


def text_key(value: str) -> tuple[str, str]:
    return value.casefold(), value


def leading_number(value: str | None) -> int:
    """First digit run of *value* as an int, ``0`` when there is none."""
    match = _DIGITS.search(value or "")
    return int(match.group(1)) if match else 0


def sort_natural(values: set[str] | list[str] | tuple[str, ...]) -> list[str]:
    return sorted(values, key=natural_key)
