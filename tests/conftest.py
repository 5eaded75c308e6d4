"""Pytest configuration and shared fixtures for QueueTrack tests.

This module provides config, database and context fixtures rooted in a
temporary directory, plus a record factory for building datasets without
going through CSV import.
"""

from __future__ import annotations

import pytest
from sqlmodel import Session, SQLModel, create_engine

from queuetrack.config import BaseConfig
from queuetrack.context import create_app_context
from queuetrack.models import Dataset, TestRecord
from queuetrack.services.metrics import recalculate

# =============================================================================
# Configuration / Context Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config whose data dir, JSON files and settings DB live under tmp_path."""

    monkeypatch.delenv("QUEUETRACK_DATABASE_URL", raising=False)
    monkeypatch.delenv("QUEUETRACK_MAX_CSV_MB", raising=False)
    return BaseConfig(data_dir=tmp_path / "data")


@pytest.fixture
def ctx(config):
    """Initialised application context with an empty dataset."""

    return create_app_context(config)


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a file under tmp_path and return its path."""

    def _write(text: str, name: str = "tests.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database for each test."""

    engine = create_engine(f"sqlite:///{tmp_path / 'settings.db'}", echo=False)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the Callable[[], Session] repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def record_factory():
    """Factory for TestRecord instances with sensible defaults."""

    def _create(
        email: str = "a@b.com",
        testing_date: str = "2026-01-15",
        queue_number: int = 500,
        queue_anchor: int | None = 1000,
        event_name: str = "Show",
        import_id: str | None = "batch-1",
    ) -> TestRecord:
        return TestRecord(
            email=email,
            testing_date=testing_date,
            event_name=event_name,
            queue_number=queue_number,
            queue_anchor=queue_anchor,
            import_id=import_id,
        )

    return _create


@pytest.fixture
def dataset_factory(record_factory):
    """Build a recalculated Dataset from (email, date, number, anchor) tuples."""

    def _create(rows) -> Dataset:
        dataset = Dataset(
            tests=[
                record_factory(email=email, testing_date=day, queue_number=number, queue_anchor=anchor)
                for email, day, number, anchor in rows
            ]
        )
        recalculate(dataset)
        return dataset

    return _create
