"""Settings repository for app-level key/value pairs."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from sqlmodel import select

from ...models.settings import AppSetting, TrackerSettings
from ..database import SessionFactory

logger = logging.getLogger(__name__)


# Stored key -> TrackerSettings attribute; keys keep the camelCase of the data file.
_KEYS = {
    "juicePercent": "juice_percent",
    "juiceAnchor": "juice_anchor",
    "darkMode": "dark_mode",
    "rowSize": "row_size",
    "groups": "groups",
}


def _coerce(attr: str, value: Any, default: Any) -> Any:
    """Return ``value`` shaped like ``default`` or raise ValueError."""

    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
    elif isinstance(default, int) and not isinstance(default, bool):
        if isinstance(value, (int, float)) and not isinstance(value, bool) and float(value).is_integer():
            return int(value)
    elif isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif isinstance(default, str):
        if isinstance(value, str):
            return value
    elif isinstance(default, dict):
        if isinstance(value, dict) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in value.items()
        ):
            return dict(value)
    raise ValueError(f"invalid value for {attr}: {value!r}")


class SQLModelSettingsRepository:
    """SQLModel-based settings repository."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[AppSetting]:
        with self.session_factory() as session:
            return session.exec(select(AppSetting).where(AppSetting.key == key)).first()

    def set(self, key: str, value: str, description: str | None = None) -> AppSetting:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                setting.value = value
                setting.description = description
            else:
                setting = AppSetting(key=key, value=value, description=description)
            session.add(setting)
            session.commit()
            session.refresh(setting)
            return setting

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            setting = session.exec(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                session.delete(setting)
                session.commit()

    def load_settings(self) -> TrackerSettings:
        """Stored values merged over defaults; unreadable entries keep the default."""

        settings = TrackerSettings()
        for key, attr in _KEYS.items():
            stored = self.get(key)
            if stored is None:
                continue
            default = getattr(settings, attr)
            try:
                setattr(settings, attr, _coerce(attr, json.loads(stored.value), default))
            except ValueError as exc:
                # json.JSONDecodeError is a ValueError too.
                logger.warning(f"Ignoring corrupted setting {key!r}: {exc}")
        return settings

    def save_settings(self, settings: TrackerSettings) -> None:
        for key, attr in _KEYS.items():
            self.set(key, json.dumps(getattr(settings, attr)))


def assign_group(settings: TrackerSettings, email: str, name: str) -> None:
    """Put ``email`` in group ``name``, replacing any previous group."""

    name = name.strip()
    if not name:
        raise ValueError("Group name must not be empty")
    settings.groups[email] = name


def unassign_group(settings: TrackerSettings, email: str) -> bool:
    return settings.groups.pop(email, None) is not None


def group_names(settings: TrackerSettings) -> list[str]:
    return sorted(set(settings.groups.values()))


__all__ = [
    "SQLModelSettingsRepository",
    "assign_group",
    "group_names",
    "unassign_group",
]
