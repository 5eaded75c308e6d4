"""Tests for account grouping, filter predicates and sorting."""

from __future__ import annotations

import pytest

from queuetrack.models import TrackerSettings
from queuetrack.services.accounts import (
    AccountFilter,
    FilterKind,
    SortKey,
    build_views,
    list_accounts,
)


@pytest.fixture
def dataset(dataset_factory):
    return dataset_factory(
        [
            # improving: 50% -> 0.5% (instant), anchor 100k (juice)
            ("improver@x.com", "2026-01-01", 50000, 100000),
            ("improver@x.com", "2026-01-10", 500, 100000),
            # declining: 5% -> 15% (excellent)
            ("decliner@x.com", "2026-01-01", 50, 1000),
            ("decliner@x.com", "2026-01-10", 150, 1000),
            # single test: 8% on a small queue (no change metric)
            ("Solo@X.com", "2026-01-05", 80, 1000),
        ]
    )


def _emails(views):
    return [v.email for v in views]


def test_views_hold_tests_newest_first(dataset):
    views = {v.email: v for v in build_views(dataset)}
    improver = views["improver@x.com"]
    assert [t.testing_date for t in improver.tests] == ["2026-01-10", "2026-01-01"]
    assert improver.latest.queue_number == 500
    assert improver.change == pytest.approx(49.5)
    assert views["Solo@X.com"].change is None


def test_all_filter_returns_every_account(dataset):
    assert sorted(_emails(list_accounts(dataset))) == ["Solo@X.com", "decliner@x.com", "improver@x.com"]


def test_instants_filter(dataset):
    views = list_accounts(dataset, AccountFilter(FilterKind.INSTANTS))
    assert _emails(views) == ["improver@x.com"]


def test_juice_filter_uses_thresholds(dataset):
    juice = AccountFilter(FilterKind.JUICE)
    assert _emails(list_accounts(dataset, juice)) == ["improver@x.com"]

    relaxed = TrackerSettings(juice_percent=10, juice_anchor=1000)
    assert sorted(_emails(list_accounts(dataset, juice, settings=relaxed))) == [
        "Solo@X.com",
        "improver@x.com",
    ]


def test_excellent_filter_is_half_open(dataset_factory):
    dataset = dataset_factory(
        [
            ("ten@x.com", "2026-01-01", 10, 100),
            ("eleven@x.com", "2026-01-01", 11, 100),
            ("twenty@x.com", "2026-01-01", 20, 100),
            ("twentyone@x.com", "2026-01-01", 21, 100),
        ]
    )
    views = list_accounts(dataset, AccountFilter(FilterKind.EXCELLENT), sort=SortKey.EMAIL, descending=False)
    assert _emails(views) == ["eleven@x.com", "twenty@x.com"]


def test_improving_and_declining_exclude_single_test_accounts(dataset):
    assert _emails(list_accounts(dataset, AccountFilter(FilterKind.IMPROVING))) == ["improver@x.com"]
    assert _emails(list_accounts(dataset, AccountFilter(FilterKind.DECLINING))) == ["decliner@x.com"]


def test_unchanged_account_is_neither_improving_nor_declining(dataset_factory):
    dataset = dataset_factory(
        [
            ("flat@x.com", "2026-01-01", 10, 100),
            ("flat@x.com", "2026-01-02", 10, 100),
        ]
    )
    assert list_accounts(dataset, AccountFilter(FilterKind.IMPROVING)) == []
    assert list_accounts(dataset, AccountFilter(FilterKind.DECLINING)) == []


def test_search_is_case_insensitive_substring(dataset):
    assert _emails(list_accounts(dataset, AccountFilter.search("SOLO"))) == ["Solo@X.com"]
    assert len(list_accounts(dataset, AccountFilter.search("x.com"))) == 3
    assert list_accounts(dataset, AccountFilter.search("nobody")) == []


def test_group_filter_uses_configured_membership(dataset):
    settings = TrackerSettings(groups={"improver@x.com": "Main", "Solo@X.com": "Alt"})
    views = list_accounts(dataset, AccountFilter.group("Main"), settings=settings)
    assert _emails(views) == ["improver@x.com"]
    assert list_accounts(dataset, AccountFilter.group("Missing"), settings=settings) == []


def test_sort_by_change_treats_missing_as_zero(dataset):
    descending = list_accounts(dataset, sort=SortKey.CHANGE, descending=True)
    assert _emails(descending) == ["improver@x.com", "Solo@X.com", "decliner@x.com"]

    ascending = list_accounts(dataset, sort=SortKey.CHANGE, descending=False)
    assert _emails(ascending) == ["decliner@x.com", "Solo@X.com", "improver@x.com"]


def test_sort_by_email(dataset):
    views = list_accounts(dataset, sort=SortKey.EMAIL, descending=False)
    assert _emails(views) == ["Solo@X.com", "decliner@x.com", "improver@x.com"]
    views = list_accounts(dataset, sort=SortKey.EMAIL, descending=True)
    assert _emails(views) == ["improver@x.com", "decliner@x.com", "Solo@X.com"]
