"""Application-level settings stored in the database."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class AppSetting(SQLModel, table=True):
    """Key-value storage for runtime configurable options."""

    __tablename__: ClassVar[str] = "app_setting"

    key: str = Field(primary_key=True, max_length=64)
    # JSON-encoded; the groups mapping outgrows a short varchar.
    value: str = Field(nullable=False)
    description: Optional[str] = Field(default=None, max_length=255)


@dataclass
class TrackerSettings:
    """User preferences consumed by filters and reports.

    ``groups`` maps an email to its single group name.
    """

    juice_percent: float = 10.0
    juice_anchor: int = 50000
    dark_mode: bool = False
    row_size: str = "normal"
    groups: dict[str, str] = field(default_factory=dict)
