"""JSON persistence for the dataset, with backup-before-save and recovery."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config import BaseConfig
from ..errors import DatasetError, StorageError
from ..models import SCHEMA_VERSION, Dataset
from .dates import normalize_date

logger = logging.getLogger(__name__)

# A data file that cannot be decoded is treated like one that is not JSON.
_UNREADABLE = (json.JSONDecodeError, UnicodeDecodeError)


@dataclass
class LoadResult:
    """Outcome of :meth:`JSONDatasetStore.load`."""

    dataset: Dataset = field(default_factory=Dataset)
    recovered: bool = False
    corrupted: bool = False
    migrated: bool = False


def migrate_payload(raw: Any) -> tuple[dict[str, Any], bool]:
    """Bring a loaded payload to the current schema; returns (payload, migrated)."""

    if isinstance(raw, list):
        payload = {"version": SCHEMA_VERSION, "tests": raw, "imports": []}
    elif not isinstance(raw, dict):
        raise DatasetError(f"Unexpected data file contents: {type(raw).__name__}")
    elif "version" in raw:
        return raw, False
    else:
        payload = dict(raw)
        payload.setdefault("imports", [])
        payload["version"] = SCHEMA_VERSION
    payload["tests"] = _normalize_legacy_dates(payload.get("tests", []))
    return payload, True


def _normalize_legacy_dates(tests: Any) -> Any:
    """Rewrite legacy ``testingDate`` values, stored as typed, to ``YYYY-MM-DD``."""

    if not isinstance(tests, list):
        # Dataset.from_payload reports the bad shape.
        return tests
    normalized = []
    for index, item in enumerate(tests):
        if isinstance(item, dict) and isinstance(item.get("testingDate"), str):
            canonical = normalize_date(item["testingDate"])
            if canonical is None:
                raise DatasetError(
                    f"tests[{index}]: unreadable testingDate {item['testingDate']!r}"
                )
            item = {**item, "testingDate": canonical}
        normalized.append(item)
    return normalized


class JSONDatasetStore:
    """Reads and writes ``{version, tests, imports}`` under the data directory."""

    def __init__(self, config: BaseConfig) -> None:
        self.data_path = config.data_path
        self.backup_path = config.backup_path

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def load(self) -> LoadResult:
        if not self.data_path.exists():
            return LoadResult()

        recovered = False
        try:
            raw = self._read_json(self.data_path)
        except _UNREADABLE as exc:
            logger.error(f"Corrupted data file, attempting backup recovery: {exc}")
            raw = self._recover_from_backup()
            if raw is None:
                return LoadResult(corrupted=True)
            recovered = True

        payload, migrated = migrate_payload(raw)
        if migrated:
            logger.info("Migrated legacy data file", extra={"path": str(self.data_path)})
        return LoadResult(
            dataset=Dataset.from_payload(payload),
            recovered=recovered,
            migrated=migrated,
        )

    def _recover_from_backup(self) -> Any:
        if not self.backup_path.exists():
            return None
        try:
            backup_text = self.backup_path.read_text(encoding="utf-8")
            data = json.loads(backup_text)
        except _UNREADABLE as exc:
            logger.error(f"Backup also corrupted: {exc}")
            return None
        self.data_path.write_text(backup_text, encoding="utf-8")
        logger.warning("Data restored from backup", extra={"backup": str(self.backup_path)})
        return data

    def save(self, dataset: Dataset) -> None:
        """Write the dataset, copying the previous file to the backup path first."""

        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            if self.data_path.exists():
                shutil.copyfile(self.data_path, self.backup_path)
            self.data_path.write_text(
                json.dumps(dataset.to_payload(), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.error(f"Data save error: {exc}")
            raise StorageError(str(exc)) from exc


__all__ = ["JSONDatasetStore", "LoadResult", "migrate_payload"]
