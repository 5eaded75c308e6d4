"""Model exports."""

from .dataset import SCHEMA_VERSION, Dataset
from .settings import AppSetting, TrackerSettings
from .test_record import ImportBatch, TestRecord

__all__ = [
    "AppSetting",
    "Dataset",
    "ImportBatch",
    "SCHEMA_VERSION",
    "TestRecord",
    "TrackerSettings",
]
