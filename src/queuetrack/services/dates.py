"""Normalize the date formats found in exported queue sheets to ``YYYY-MM-DD``."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

# Separators must agree within one value: 2026-01-15, 01/15/2026, 15.01.26.
_YEAR_FIRST = re.compile(r"^(\d{4})([/.\-])(\d{1,2})\2(\d{1,2})$")
_YEAR_LAST = re.compile(r"^(\d{1,2})([/.\-])(\d{1,2})\2(\d{2}|\d{4})$")

MIN_YEAR = 1900
MAX_YEAR = 2100


def _expand_year(text: str) -> int:
    year = int(text)
    if len(text) == 2:
        year += 2000 if year < 50 else 1900
    return year


def _month_day(first: int, second: int) -> tuple[int, int]:
    """Pick (month, day) from the two leading fields of a year-last date.

    Unambiguous values decide the order; when both fields could be a month the
    US month-first reading wins.
    """

    if first > 12 and second <= 12:
        return second, first
    return first, second


def normalize_date(raw: object) -> Optional[str]:
    """Return the canonical ``YYYY-MM-DD`` form of ``raw`` or ``None``.

    Never raises; anything unparseable or outside 1900-2100 yields ``None``.
    """

    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None

    match = _YEAR_FIRST.match(text)
    if match:
        year, month, day = int(match.group(1)), int(match.group(3)), int(match.group(4))
    else:
        match = _YEAR_LAST.match(text)
        if not match:
            return None
        month, day = _month_day(int(match.group(1)), int(match.group(3)))
        year = _expand_year(match.group(4))

    if not (1 <= month <= 12 and 1 <= day <= 31 and MIN_YEAR <= year <= MAX_YEAR):
        return None
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        # Fields in range but not a calendar date, e.g. Feb 30.
        return None


__all__ = ["normalize_date", "MIN_YEAR", "MAX_YEAR"]
