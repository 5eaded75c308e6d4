"""Tests for single-row validation."""

from __future__ import annotations

import pytest

from queuetrack.services.validation import CandidateRow, parse_whole_number, validate_row


def _row(**overrides) -> CandidateRow:
    values = dict(
        email="a@b.com",
        testing_date="2026-01-15",
        event_name="Show",
        queue_number=500,
        queue_anchor=None,
    )
    values.update(overrides)
    return CandidateRow(**values)


def test_valid_row_has_no_errors():
    assert validate_row(_row(), 2) == []
    assert validate_row(_row(queue_anchor=500), 2) == []
    assert validate_row(_row(queue_number=0, queue_anchor=0), 2) == []
    assert validate_row(_row(queue_number=10_000_000, queue_anchor=10_000_000), 2) == []


@pytest.mark.parametrize("email", ["plainaddress", "a@b", "@b.com", "a b@c.com", "a@b .com"])
def test_invalid_email(email):
    errors = validate_row(_row(email=email), 3)
    assert [e.field for e in errors] == ["Email"]
    assert errors[0].row == 3
    assert email in errors[0].message


def test_invalid_date_is_quoted():
    errors = validate_row(_row(testing_date="31/31/2026"), 4)
    assert [e.field for e in errors] == ["Testing Date"]
    assert '"31/31/2026"' in errors[0].message
    assert str(errors[0]).startswith("Row 4: ")


def test_event_name_length_bounds():
    assert validate_row(_row(event_name="x" * 200), 2) == []
    errors = validate_row(_row(event_name="x" * 201), 2)
    assert [e.field for e in errors] == ["Event Name"]
    assert "got 201" in errors[0].message
    assert [e.field for e in validate_row(_row(event_name=""), 2)] == ["Event Name"]


@pytest.mark.parametrize("value", [-1, 10_000_001, "abc", "12.5", True])
def test_queue_number_out_of_range_or_not_integer(value):
    errors = validate_row(_row(queue_number=value), 2)
    assert [e.field for e in errors] == ["Queue Number"]


def test_anchor_below_queue_number_rejected():
    errors = validate_row(_row(queue_number=500, queue_anchor=100), 5)
    assert len(errors) == 1
    assert errors[0].field == "Queue Anchor"
    assert "less than Queue Number" in errors[0].message
    assert "100" in errors[0].message and "500" in errors[0].message


@pytest.mark.parametrize("value", [-5, 10_000_001, "n/a"])
def test_invalid_anchor_value(value):
    errors = validate_row(_row(queue_anchor=value), 2)
    assert [e.field for e in errors] == ["Queue Anchor"]


def test_all_checks_run_without_short_circuit():
    errors = validate_row(
        _row(email="bad", testing_date="nope", event_name="", queue_number=-1, queue_anchor="x"),
        7,
    )
    assert [e.field for e in errors] == [
        "Email",
        "Testing Date",
        "Event Name",
        "Queue Number",
        "Queue Anchor",
    ]
    assert {e.row for e in errors} == {7}


def test_anchor_comparison_skipped_when_number_invalid():
    errors = validate_row(_row(queue_number="abc", queue_anchor=100), 2)
    assert [e.field for e in errors] == ["Queue Number"]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("500", 500),
        (" 500 ", 500),
        ("+7", 7),
        ("-3", -3),
        ("500.0", 500),
        ("1,234", 1234),
        ("12.5", None),
        ("abc", None),
        ("", None),
    ],
)
def test_parse_whole_number(text, expected):
    assert parse_whole_number(text) == expected
