"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "QueueTrack"
    DATA_FILENAME = "queuetrack-data.json"
    BACKUP_FILENAME = "queuetrack-data.backup.json"
    DB_FILENAME = "queuetrack.db"
    SCHEMA_VERSION = 1
    HISTORY_LIMIT = 20
    MAX_REPORTED_ERRORS = 10

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self.DATA_DIR = self._resolve_data_dir(data_dir)
        self.DEV_MODE = _env_bool("QUEUETRACK_DEV_MODE", default=True)
        self.MAX_CSV_MB = _env_float("QUEUETRACK_MAX_CSV_MB", 50.0)
        self.DATABASE_URL = os.getenv("QUEUETRACK_DATABASE_URL", self._build_sqlite_url())

    def _resolve_data_dir(self, data_dir: str | Path | None = None) -> Path:
        """Return the directory holding the dataset JSON, its backup and the settings DB."""

        data_root = data_dir or os.getenv("QUEUETRACK_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations block writes; fall back to user-local storage.
            local_app_data = os.getenv("LOCALAPPDATA") or (Path.home() / "AppData" / "Local")
            fallback_path = Path(local_app_data).expanduser() / self.APP_NAME
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        db_path = Path(self.DATA_DIR) / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    @property
    def data_path(self) -> Path:
        return Path(self.DATA_DIR) / self.DATA_FILENAME

    @property
    def backup_path(self) -> Path:
        return Path(self.DATA_DIR) / self.BACKUP_FILENAME

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Local development: verbose console logging regardless of the environment."""

    def __init__(self, data_dir: str | Path | None = None) -> None:
        super().__init__(data_dir)
        self.DEV_MODE = True
