"""Repository implementations."""

from .settings import SQLModelSettingsRepository, assign_group, group_names, unassign_group

__all__ = [
    "SQLModelSettingsRepository",
    "assign_group",
    "group_names",
    "unassign_group",
]
