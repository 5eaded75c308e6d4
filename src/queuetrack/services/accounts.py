"""Group tests by account and apply the active filter and sort."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..models import Dataset, TestRecord, TrackerSettings
from .metrics import chronological, group_by_account, overall_change


class FilterKind(str, Enum):
    ALL = "all"
    INSTANTS = "instants"
    JUICE = "juice"
    EXCELLENT = "excellent"
    IMPROVING = "improving"
    DECLINING = "declining"
    SEARCH = "search"
    GROUP = "group"


class SortKey(str, Enum):
    EMAIL = "email"
    CHANGE = "change"


@dataclass(frozen=True)
class AccountFilter:
    """Which accounts to show. ``text`` is the search query or the group name."""

    kind: FilterKind = FilterKind.ALL
    text: str = ""

    @classmethod
    def search(cls, query: str) -> "AccountFilter":
        return cls(FilterKind.SEARCH, query)

    @classmethod
    def group(cls, name: str) -> "AccountFilter":
        return cls(FilterKind.GROUP, name)


@dataclass
class AccountView:
    """One account with its tests, newest first."""

    email: str
    tests: list[TestRecord] = field(default_factory=list)
    change: Optional[float] = None

    @property
    def latest(self) -> TestRecord:
        return self.tests[0]


def _latest_percent(view: AccountView) -> float:
    return view.latest.queue_percent or 0.0


def is_juice(view: AccountView, settings: TrackerSettings) -> bool:
    """Latest test is within the juice percent on a large enough queue."""

    return (
        _latest_percent(view) <= settings.juice_percent
        and (view.latest.queue_anchor or 0) >= settings.juice_anchor
    )


def matches(view: AccountView, account_filter: AccountFilter, settings: TrackerSettings) -> bool:
    kind = account_filter.kind
    if kind is FilterKind.ALL:
        return True
    if kind is FilterKind.SEARCH:
        return account_filter.text.lower() in view.email.lower()
    if kind is FilterKind.GROUP:
        return settings.groups.get(view.email) == account_filter.text
    if kind is FilterKind.INSTANTS:
        return _latest_percent(view) <= 1
    if kind is FilterKind.JUICE:
        return is_juice(view, settings)
    if kind is FilterKind.EXCELLENT:
        return 10 < _latest_percent(view) <= 20
    # A missing change is incomparable, never zero.
    if kind is FilterKind.IMPROVING:
        return view.change is not None and view.change > 0
    if kind is FilterKind.DECLINING:
        return view.change is not None and view.change < 0
    raise ValueError(f"Unsupported filter: {kind!r}")


def build_views(dataset: Dataset) -> list[AccountView]:
    views = []
    for email, tests in group_by_account(dataset.tests).items():
        newest_first = chronological(tests)[::-1]
        views.append(AccountView(email=email, tests=newest_first, change=overall_change(tests)))
    return views


def list_accounts(
    dataset: Dataset,
    account_filter: AccountFilter | None = None,
    *,
    settings: TrackerSettings | None = None,
    sort: SortKey = SortKey.CHANGE,
    descending: bool = True,
) -> list[AccountView]:
    """Return filtered account views in the requested order."""

    account_filter = account_filter or AccountFilter()
    settings = settings or TrackerSettings()
    views = [v for v in build_views(dataset) if matches(v, account_filter, settings)]

    if sort is SortKey.EMAIL:
        views.sort(key=lambda v: v.email, reverse=descending)
    else:
        # Missing change orders as 0 here only; filters above already excluded it.
        views.sort(key=lambda v: v.change or 0.0, reverse=descending)
    return views


__all__ = [
    "AccountFilter",
    "AccountView",
    "FilterKind",
    "SortKey",
    "build_views",
    "is_juice",
    "list_accounts",
    "matches",
]
