"""Application context for dependency injection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import SQLModelSettingsRepository
from .models import Dataset, TrackerSettings
from .services.history import HistoryManager
from .services.metrics import recalculate
from .services.storage import JSONDatasetStore, LoadResult

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Owns the dataset, its history and the collaborators that persist them.

    Nothing is loaded at construction; call :meth:`init` to read settings and
    data from disk and :meth:`reset` to drop everything held in memory.
    """

    config: BaseConfig
    session_factory: SessionFactory
    settings_repo: SQLModelSettingsRepository
    store: JSONDatasetStore
    history: HistoryManager

    dataset: Dataset = field(default_factory=Dataset)
    settings: TrackerSettings = field(default_factory=TrackerSettings)
    last_load: Optional[LoadResult] = None

    def init(self) -> LoadResult:
        """Load settings and dataset, re-saving at once if the data was migrated."""

        self.settings = self.settings_repo.load_settings()
        result = self.store.load()
        self.dataset = result.dataset
        self.history.clear()
        recalculate(self.dataset)
        if result.migrated:
            self.save()
        if result.recovered:
            logger.warning("Dataset recovered from backup")
        if result.corrupted:
            logger.error("Dataset file corrupted and no usable backup; starting empty")
        logger.info(
            "Dataset loaded",
            extra={"tests": len(self.dataset.tests), "imports": len(self.dataset.imports)},
        )
        self.last_load = result
        return result

    def reset(self) -> None:
        """Forget the in-memory dataset and history without touching disk."""

        self.dataset = Dataset()
        self.history.clear()
        self.last_load = None

    def save(self) -> None:
        self.store.save(self.dataset)

    def save_settings(self) -> None:
        self.settings_repo.save_settings(self.settings)


def create_app_context(config: Optional[BaseConfig] = None, *, load: bool = True) -> AppContext:
    """Create the application context, loading persisted state unless ``load`` is False."""

    if config is None:
        config = BaseConfig()

    _, session_factory = bootstrap_database(config)

    ctx = AppContext(
        config=config,
        session_factory=session_factory,
        settings_repo=SQLModelSettingsRepository(session_factory),
        store=JSONDatasetStore(config),
        history=HistoryManager(limit=config.HISTORY_LIMIT),
    )
    if load:
        ctx.init()
    return ctx


__all__ = ["AppContext", "create_app_context"]
