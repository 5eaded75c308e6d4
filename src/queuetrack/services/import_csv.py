"""CSV ingestion utilities."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..errors import EmptyResultError, ErrorDescriptor, FileReadError, FormatError, ValidationError
from ..models import TestRecord
from .dates import normalize_date
from .validation import CandidateRow, parse_whole_number, validate_row

logger = logging.getLogger(__name__)

EMAIL = "Email"
TESTING_DATE = "Testing Date"
EVENT_NAME = "Event Name"
QUEUE_NUMBER = "Queue Number"
QUEUE_ANCHOR = "Queue Anchor"

REQUIRED_COLUMNS = (EMAIL, TESTING_DATE, EVENT_NAME, QUEUE_NUMBER)

# Header is row 1, so the first data row is reported as row 2.
FIRST_DATA_ROW = 2


def read_csv_file(path: Path, *, max_mb: float = 50.0) -> str:
    """Read a CSV file as text, rejecting missing, empty and oversized files."""

    path = Path(path)
    try:
        if not path.is_file():
            raise FileReadError("File not found")
        size = path.stat().st_size
        size_mb = size / (1024 * 1024)
        if size_mb > max_mb:
            raise FileReadError(
                f"File too large ({size_mb:.1f}MB). Maximum size is {max_mb:g}MB."
            )
        if size == 0:
            raise FileReadError("File is empty")
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"File read error for {path}: {exc}")
        raise FileReadError(str(exc)) from exc


def normalize_frame(text: str) -> pd.DataFrame:
    """Load CSV text into an all-string DataFrame with trimmed header names."""

    text = text.lstrip("\ufeff")
    width = len(next(csv.reader(io.StringIO(text)), []))

    def _trim_extra_cells(fields: list[str]) -> list[str]:
        # Rows longer than the header (e.g. a trailing comma) keep their leading cells.
        return fields[:width]

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            index_col=False,
            engine="python",
            on_bad_lines=_trim_extra_cells,
        )
    except pd.errors.EmptyDataError as exc:
        raise FormatError("CSV file has no header row") from exc
    except pd.errors.ParserError as exc:
        raise FormatError(f"Could not parse CSV: {exc}") from exc
    frame.columns = [str(c).strip() for c in frame.columns]
    return frame


def _cell(row: pd.Series, column: str) -> str:
    if column not in row.index:
        return ""
    value: Any = row[column]
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _number(text: str) -> int | str:
    parsed = parse_whole_number(text)
    return text if parsed is None else parsed


def ingest_csv(text: str, *, import_id: Optional[str] = None, max_errors: int = 10) -> list[TestRecord]:
    """Parse CSV text into validated test records, all or nothing.

    Rows missing any required value are skipped silently. Raises
    :class:`FormatError` for absent columns, :class:`ValidationError` when any
    remaining row is invalid and :class:`EmptyResultError` when nothing is left.
    """

    frame = normalize_frame(text)

    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise FormatError(f"Missing required column(s): {', '.join(missing)}", missing=missing)

    has_anchor = QUEUE_ANCHOR in frame.columns
    logger.info(f"CSV headers found: {list(frame.columns)}")

    candidates: list[tuple[int, CandidateRow]] = []
    skipped = 0
    for position, (_, row) in enumerate(frame.iterrows()):
        row_index = position + FIRST_DATA_ROW
        values = {c: _cell(row, c) for c in REQUIRED_COLUMNS}
        if not all(values.values()):
            skipped += 1
            continue

        raw_date = values[TESTING_DATE]
        anchor_text = _cell(row, QUEUE_ANCHOR) if has_anchor else ""
        candidates.append(
            (
                row_index,
                CandidateRow(
                    email=values[EMAIL],
                    # Unparseable dates stay raw so validation can quote them.
                    testing_date=normalize_date(raw_date) or raw_date,
                    event_name=values[EVENT_NAME],
                    queue_number=_number(values[QUEUE_NUMBER]),
                    queue_anchor=_number(anchor_text) if anchor_text else None,
                ),
            )
        )

    errors: list[ErrorDescriptor] = []
    for row_index, candidate in candidates:
        errors.extend(validate_row(candidate, row_index))
    if errors:
        logger.warning(f"CSV rejected: {len(errors)} validation error(s)")
        raise ValidationError(errors, limit=max_errors)

    if not candidates:
        raise EmptyResultError("No valid data found in CSV")

    logger.info(f"Parsed {len(candidates)} row(s), skipped {skipped} incomplete row(s)")
    return [
        TestRecord(
            email=c.email,
            testing_date=c.testing_date,
            event_name=c.event_name,
            queue_number=int(c.queue_number),
            queue_anchor=None if c.queue_anchor is None else int(c.queue_anchor),
            import_id=import_id,
        )
        for _, c in candidates
    ]


__all__ = [
    "REQUIRED_COLUMNS",
    "QUEUE_ANCHOR",
    "ingest_csv",
    "normalize_frame",
    "read_csv_file",
]
