"""Reporting utilities: dashboard totals, per-account timelines and display helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..models import Dataset, TestRecord
from .metrics import chronological

# Upper bound (inclusive) of queue percent for each color bucket.
COLOR_BUCKETS = (
    (1.0, "instants"),
    (10.0, "juice"),
    (20.0, "excellent"),
    (40.0, "good"),
    (60.0, "neutral"),
)


def color_bucket(percent: float) -> str:
    for bound, name in COLOR_BUCKETS:
        if percent <= bound:
            return name
    return "poor"


def _compact(value: float, suffix: str) -> str:
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text + suffix


def format_num(n: Optional[int]) -> str:
    """Compact queue numbers: 1500 -> ``1.5k``, 2000000 -> ``2M``."""

    if n is None:
        return "-"
    if n >= 1_000_000:
        return _compact(n / 1_000_000, "M")
    if n >= 1000:
        return _compact(n / 1000, "k")
    return str(n)


def format_change(change: Optional[float]) -> str:
    if change is None:
        return "N/A"
    return f"{'+' if change >= 0 else ''}{change:.1f}%"


@dataclass
class DashboardSummary:
    total_accounts: int = 0
    total_tests: int = 0
    best_percent: Optional[float] = None
    best_email: Optional[str] = None


def dashboard_summary(dataset: Dataset) -> DashboardSummary:
    """Account count and the single best (lowest) queue percent across all tests."""

    summary = DashboardSummary(
        total_accounts=len(dataset.emails()),
        total_tests=len(dataset.tests),
    )
    for record in dataset.tests:
        percent = record.queue_percent or 0.0
        if summary.best_percent is None or percent < summary.best_percent:
            summary.best_percent = percent
            summary.best_email = record.email
    return summary


@dataclass
class Timeline:
    """Chronological history of one account with min/max/mean percent."""

    email: str
    tests: list[TestRecord] = field(default_factory=list)
    best: float = 0.0
    worst: float = 0.0
    average: float = 0.0

    @property
    def total(self) -> int:
        return len(self.tests)


def timeline(dataset: Dataset, email: str) -> Optional[Timeline]:
    tests = chronological(dataset.tests_for(email))
    if not tests:
        return None
    percents = [t.queue_percent or 0.0 for t in tests]
    return Timeline(
        email=email,
        tests=tests,
        best=min(percents),
        worst=max(percents),
        average=sum(percents) / len(percents),
    )


@dataclass
class RecordDetails:
    record: TestRecord
    change: Optional[float]
    days_since: int


def record_details(dataset: Dataset, record: TestRecord, *, today: date | None = None) -> RecordDetails:
    """Change from the account's previous test and age of ``record`` in days."""

    today = today or date.today()
    ordered = chronological(dataset.tests_for(record.email))
    index = next((i for i, t in enumerate(ordered) if t is record), None)
    if index is None:
        raise ValueError(f"Record is not part of the dataset: {record.email} {record.testing_date}")

    change = None
    if index > 0:
        change = (record.queue_percent or 0.0) - (ordered[index - 1].queue_percent or 0.0)
    days = (today - date.fromisoformat(record.testing_date)).days
    return RecordDetails(record=record, change=change, days_since=days)


__all__ = [
    "COLOR_BUCKETS",
    "DashboardSummary",
    "RecordDetails",
    "Timeline",
    "color_bucket",
    "dashboard_summary",
    "format_change",
    "format_num",
    "record_details",
    "timeline",
]
