"""Service module exports."""

from . import (
    accounts,
    anchors,
    dates,
    export_csv,
    history,
    import_csv,
    metrics,
    reports,
    storage,
    validation,
)

__all__ = [
    "accounts",
    "anchors",
    "dates",
    "export_csv",
    "history",
    "import_csv",
    "metrics",
    "reports",
    "storage",
    "validation",
]
