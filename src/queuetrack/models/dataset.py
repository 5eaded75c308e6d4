"""The dataset snapshotted by history and written by the JSON store."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..errors import DatasetError
from .test_record import ImportBatch, TestRecord

SCHEMA_VERSION = 1


@dataclass
class Dataset:
    """All test records, in import order, plus the import batch log."""

    tests: list[TestRecord] = field(default_factory=list)
    imports: list[ImportBatch] = field(default_factory=list)

    def copy(self) -> "Dataset":
        """Return a deep copy sharing no records with this dataset."""

        return copy.deepcopy(self)

    def emails(self) -> list[str]:
        """Distinct account emails in first-seen order."""

        return list(dict.fromkeys(t.email for t in self.tests))

    def tests_for(self, email: str) -> list[TestRecord]:
        return [t for t in self.tests if t.email == email]

    def find_import(self, import_id: str) -> ImportBatch | None:
        return next((b for b in self.imports if b.id == import_id), None)

    def to_payload(self) -> dict[str, Any]:
        return {
            "version": SCHEMA_VERSION,
            "tests": [t.to_dict() for t in self.tests],
            "imports": [b.to_dict() for b in self.imports],
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Dataset":
        """Build a dataset from a versioned payload, failing loudly on bad shapes."""

        tests = payload.get("tests", [])
        imports = payload.get("imports", [])
        if not isinstance(tests, list):
            raise DatasetError(f"'tests' must be a list, got {type(tests).__name__}")
        if not isinstance(imports, list):
            raise DatasetError(f"'imports' must be a list, got {type(imports).__name__}")
        return cls(
            tests=[TestRecord.from_dict(item, index=i) for i, item in enumerate(tests)],
            imports=[ImportBatch.from_dict(item, index=i) for i, item in enumerate(imports)],
        )
