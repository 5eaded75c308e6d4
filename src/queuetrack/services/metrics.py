"""Derived per-account metrics: test number, queue percent and change."""

from __future__ import annotations

from typing import Iterable, Optional

from ..models import Dataset, TestRecord


def queue_percent(record: TestRecord) -> float:
    """Position as a percentage of the anchor; 0 when the anchor is missing or zero."""

    anchor = record.queue_anchor
    if not anchor or anchor <= 0:
        return 0.0
    return record.queue_number / anchor * 100


def chronological(tests: Iterable[TestRecord]) -> list[TestRecord]:
    """Oldest first; records sharing a date keep their input order."""

    return sorted(tests, key=lambda t: t.testing_date)


def group_by_account(tests: Iterable[TestRecord]) -> dict[str, list[TestRecord]]:
    groups: dict[str, list[TestRecord]] = {}
    for record in tests:
        groups.setdefault(record.email, []).append(record)
    return groups


def recalculate(dataset: Dataset) -> None:
    """Recompute every derived field from scratch.

    The order of ``dataset.tests`` is left untouched, so running this twice
    yields identical results.
    """

    for records in group_by_account(dataset.tests).values():
        previous: Optional[float] = None
        for index, record in enumerate(chronological(records)):
            percent = queue_percent(record)
            record.testing_num = index + 1
            record.queue_percent = percent
            record.queue_change_percent = 0.0 if previous is None else percent - previous
            previous = percent


def overall_change(tests: Iterable[TestRecord]) -> Optional[float]:
    """Improvement between an account's two most recent tests.

    Positive means the latest percent is lower (better). ``None`` when fewer
    than two tests exist; callers must not treat that as zero.
    """

    ordered = chronological(tests)
    if len(ordered) < 2:
        return None
    return _percent(ordered[-2]) - _percent(ordered[-1])


def _percent(record: TestRecord) -> float:
    return record.queue_percent if record.queue_percent is not None else queue_percent(record)


__all__ = [
    "chronological",
    "group_by_account",
    "overall_change",
    "queue_percent",
    "recalculate",
]
