"""Bounded undo/redo stacks of full dataset snapshots."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from ..models import Dataset

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20


@dataclass(frozen=True)
class HistoryMark:
    undo: tuple[Dataset, ...]
    redo: tuple[Dataset, ...]


class HistoryManager:
    """Undo/redo over deep-copied datasets.

    Call :meth:`snapshot` with the pre-mutation dataset before every edit. The
    oldest snapshot is evicted once ``limit`` is exceeded, and any new snapshot
    discards the redo stack.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self._undo: deque[Dataset] = deque(maxlen=limit)
        self._redo: deque[Dataset] = deque(maxlen=limit)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def snapshot(self, current: Dataset) -> None:
        self._undo.append(current.copy())
        self._redo.clear()
        logger.debug("History snapshot taken", extra={"undo_depth": len(self._undo)})

    def undo(self, current: Dataset) -> Optional[Dataset]:
        """Return the previous dataset, or ``None`` when there is nothing to undo."""

        if not self._undo:
            return None
        self._redo.append(current.copy())
        restored = self._undo.pop()
        logger.info("Undo applied", extra={"undo_depth": len(self._undo)})
        return restored

    def redo(self, current: Dataset) -> Optional[Dataset]:
        """Return the dataset undone last, or ``None`` when there is nothing to redo."""

        if not self._redo:
            return None
        self._undo.append(current.copy())
        restored = self._redo.pop()
        logger.info("Redo applied", extra={"redo_depth": len(self._redo)})
        return restored

    def mark(self) -> HistoryMark:
        """Capture both stacks so a failed change can be rolled back with :meth:`restore`."""

        return HistoryMark(undo=tuple(self._undo), redo=tuple(self._redo))

    def restore(self, mark: HistoryMark) -> None:
        self._undo = deque(mark.undo, maxlen=self.limit)
        self._redo = deque(mark.redo, maxlen=self.limit)
        logger.debug("History rolled back", extra={"undo_depth": len(self._undo)})

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()


__all__ = ["DEFAULT_LIMIT", "HistoryManager", "HistoryMark"]
