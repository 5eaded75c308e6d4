"""Controller helpers for the user-facing actions that change the dataset.

Every mutating action snapshots the pre-mutation dataset, builds the changed
dataset, recalculates derived metrics and saves. Any failure, a failed save
included, leaves the dataset, import log and undo history as they were.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import StorageError, UnknownImportError
from .models import Dataset, ImportBatch
from .services.anchors import resolve_anchors
from .services.history import HistoryMark
from .services.import_csv import ingest_csv, read_csv_file
from .services.metrics import recalculate

if TYPE_CHECKING:
    from .context import AppContext

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    batch: ImportBatch
    warnings: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        count = self.batch.test_count
        return f"Successfully imported {count} test{'s' if count != 1 else ''}!"


@dataclass
class HistoryResult:
    """Result of undo/redo; ``ok`` is False when the stack was empty."""

    ok: bool
    message: str


def import_csv_text(ctx: AppContext, text: str, *, filename: str) -> ImportOutcome:
    """Validate, anchor and append one CSV batch, all or nothing."""

    logger.info(f"Starting import of {filename}")
    records = ingest_csv(text, max_errors=ctx.config.MAX_REPORTED_ERRORS)
    warnings = resolve_anchors(records)

    batch = ImportBatch(
        id=uuid.uuid4().hex,
        filename=filename,
        date=datetime.now(timezone.utc).isoformat(),
        test_count=len(records),
    )
    for record in records:
        record.import_id = batch.id

    mark = ctx.history.mark()
    ctx.history.snapshot(ctx.dataset)
    updated = Dataset(
        tests=[*ctx.dataset.tests, *records],
        imports=[*ctx.dataset.imports, batch],
    )
    _commit(ctx, updated, mark)

    logger.info(
        "Import complete",
        extra={"import_id": batch.id, "tests": batch.test_count, "warnings": len(warnings)},
    )
    return ImportOutcome(batch=batch, warnings=warnings)


def import_csv(ctx: AppContext, csv_path: Path) -> ImportOutcome:
    """Read ``csv_path`` through the size-capped reader and import it."""

    csv_path = Path(csv_path)
    text = read_csv_file(csv_path, max_mb=ctx.config.MAX_CSV_MB)
    return import_csv_text(ctx, text, filename=csv_path.name)


def _commit(ctx: AppContext, updated: Dataset, mark: HistoryMark) -> None:
    """Make ``updated`` current and save it, rolling back on a failed save.

    The previous dataset object is never mutated apart from derived fields,
    which are recalculated again if the save fails.
    """

    previous = ctx.dataset
    recalculate(updated)
    ctx.dataset = updated
    try:
        ctx.save()
    except StorageError:
        recalculate(previous)
        ctx.dataset = previous
        ctx.history.restore(mark)
        logger.error("Save failed; change rolled back")
        raise


def undo(ctx: AppContext) -> HistoryResult:
    mark = ctx.history.mark()
    restored = ctx.history.undo(ctx.dataset)
    if restored is None:
        return HistoryResult(ok=False, message="Nothing to undo")
    _commit(ctx, restored, mark)
    return HistoryResult(ok=True, message="Undone")


def redo(ctx: AppContext) -> HistoryResult:
    mark = ctx.history.mark()
    restored = ctx.history.redo(ctx.dataset)
    if restored is None:
        return HistoryResult(ok=False, message="Nothing to redo")
    _commit(ctx, restored, mark)
    return HistoryResult(ok=True, message="Redone")


def clear_all(ctx: AppContext) -> int:
    """Delete every test and import batch; returns the number of tests removed."""

    removed = len(ctx.dataset.tests)
    if not removed and not ctx.dataset.imports:
        return 0
    mark = ctx.history.mark()
    ctx.history.snapshot(ctx.dataset)
    _commit(ctx, Dataset(), mark)
    logger.info("Cleared all data", extra={"tests": removed})
    return removed


def remove_import(ctx: AppContext, import_id: str) -> int:
    """Delete an import batch and every test it created; returns tests removed."""

    batch = ctx.dataset.find_import(import_id)
    if batch is None:
        raise UnknownImportError(f"No import with id {import_id!r}")

    mark = ctx.history.mark()
    ctx.history.snapshot(ctx.dataset)
    before = len(ctx.dataset.tests)
    updated = Dataset(
        tests=[t for t in ctx.dataset.tests if t.import_id != import_id],
        imports=[b for b in ctx.dataset.imports if b.id != import_id],
    )
    _commit(ctx, updated, mark)

    removed = before - len(ctx.dataset.tests)
    logger.info(
        "Removed import batch",
        extra={"import_id": import_id, "filename": batch.filename, "tests": removed},
    )
    return removed


def update_settings(ctx: AppContext, **changes: Any) -> None:
    """Apply setting changes and persist them; settings are outside undo history."""

    for name, value in changes.items():
        if not hasattr(ctx.settings, name):
            raise AttributeError(f"Unknown setting: {name}")
        setattr(ctx.settings, name, value)
    ctx.save_settings()


__all__ = [
    "HistoryResult",
    "ImportOutcome",
    "clear_all",
    "import_csv",
    "import_csv_text",
    "redo",
    "remove_import",
    "undo",
    "update_settings",
]
