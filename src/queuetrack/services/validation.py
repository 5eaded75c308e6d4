"""Field-level checks for a single imported CSV row."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..errors import ErrorDescriptor
from .dates import normalize_date

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EVENT_NAME = 200
MAX_QUEUE_VALUE = 10_000_000


@dataclass(slots=True)
class CandidateRow:
    """A CSV row after trimming, before it is accepted as a test record.

    Numeric fields hold an ``int`` when the cell parsed as a whole number and
    the raw cell text otherwise, so error messages can quote what was typed.
    """

    email: str
    testing_date: str
    event_name: str
    queue_number: int | str
    queue_anchor: int | str | None = None


def _is_queue_value(value: object) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= MAX_QUEUE_VALUE
    )


def validate_row(candidate: CandidateRow, row_index: int) -> list[ErrorDescriptor]:
    """Return every problem with ``candidate``; an empty list means it is valid."""

    errors: list[ErrorDescriptor] = []

    def fail(field: str, message: str) -> None:
        errors.append(ErrorDescriptor(row=row_index, field=field, message=message))

    if not EMAIL_PATTERN.match(candidate.email or ""):
        fail("Email", f'Invalid email "{candidate.email}"')

    if normalize_date(candidate.testing_date) is None:
        fail(
            "Testing Date",
            f'Invalid date "{candidate.testing_date}" '
            "(expected YYYY-MM-DD, MM/DD/YYYY or DD/MM/YYYY)",
        )

    name_length = len(candidate.event_name or "")
    if not 1 <= name_length <= MAX_EVENT_NAME:
        fail(
            "Event Name",
            f"Event name must be 1-{MAX_EVENT_NAME} characters (got {name_length})",
        )

    number_ok = _is_queue_value(candidate.queue_number)
    if not number_ok:
        fail(
            "Queue Number",
            f'Queue Number "{candidate.queue_number}" must be a whole number '
            f"between 0 and {MAX_QUEUE_VALUE:,}",
        )

    anchor = candidate.queue_anchor
    if anchor is not None:
        if not _is_queue_value(anchor):
            fail(
                "Queue Anchor",
                f'Queue Anchor "{anchor}" must be a whole number '
                f"between 0 and {MAX_QUEUE_VALUE:,}",
            )
        elif number_ok and anchor < candidate.queue_number:  # type: ignore[operator]
            fail(
                "Queue Anchor",
                f"Queue Anchor {anchor:,} is less than Queue Number "
                f"{candidate.queue_number:,}",
            )

    return errors


def parse_whole_number(text: str) -> Optional[int]:
    """Parse ``"500"``, ``"+500"`` or ``"500.0"``; ``None`` for anything else."""

    cleaned = text.strip().replace(",", "")
    if re.fullmatch(r"[+-]?\d+", cleaned):
        return int(cleaned)
    if re.fullmatch(r"[+-]?\d+\.0*", cleaned):
        return int(cleaned.split(".", 1)[0])
    return None


__all__ = [
    "CandidateRow",
    "EMAIL_PATTERN",
    "MAX_EVENT_NAME",
    "MAX_QUEUE_VALUE",
    "parse_whole_number",
    "validate_row",
]
