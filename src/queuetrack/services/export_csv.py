"""CSV export helpers for QueueTrack."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from ..models import TestRecord
from .import_csv import QUEUE_ANCHOR, REQUIRED_COLUMNS


def _serialize_value(value):
    if value is None:
        return ""
    return str(value)


def export_tests_csv(*, tests: Iterable[TestRecord], output_path: Path) -> Path:
    """Write tests to CSV at `output_path` using the importable column names.

    Returns the path written.
    """

    headers = [*REQUIRED_COLUMNS, QUEUE_ANCHOR]
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(headers)
        for test in tests:
            writer.writerow(
                [
                    test.email,
                    test.testing_date,
                    test.event_name,
                    _serialize_value(test.queue_number),
                    _serialize_value(test.queue_anchor),
                ]
            )

    return output_path


__all__ = ["export_tests_csv"]
