"""Exception types raised by the import, persistence and history layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence


class QueueTrackError(Exception):
    """Base class for all QueueTrack failures surfaced to callers."""


class FormatError(QueueTrackError):
    """The CSV text cannot be read as a table with the required columns."""

    def __init__(self, message: str, *, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


@dataclass(frozen=True)
class ErrorDescriptor:
    """One field-level problem found in a CSV row."""

    row: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


class ValidationError(QueueTrackError):
    """One or more rows failed validation; the whole batch is rejected."""

    def __init__(self, errors: Sequence[ErrorDescriptor], *, limit: int = 10) -> None:
        self.total = len(errors)
        self.errors = list(errors[:limit])
        self.omitted = self.total - len(self.errors)
        lines = [str(err) for err in self.errors]
        if self.omitted:
            lines.append(f"...and {self.omitted} more error(s)")
        super().__init__(f"{self.total} validation error(s):\n" + "\n".join(lines))


class EmptyResultError(QueueTrackError):
    """No usable rows remained after incomplete rows were skipped."""


class FileReadError(QueueTrackError):
    """The CSV file is missing, empty, too large or unreadable."""


class DatasetError(QueueTrackError):
    """Persisted data does not have the expected shape."""


class StorageError(QueueTrackError):
    """Writing the dataset to disk failed."""


class UnknownImportError(QueueTrackError, LookupError):
    """No import batch exists with the requested id."""


__all__ = [
    "DatasetError",
    "EmptyResultError",
    "ErrorDescriptor",
    "FileReadError",
    "FormatError",
    "QueueTrackError",
    "StorageError",
    "UnknownImportError",
    "ValidationError",
]
