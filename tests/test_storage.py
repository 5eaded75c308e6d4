"""Tests for the JSON dataset store: save, backup, recovery and migration."""

from __future__ import annotations

import json

import pytest

from queuetrack.errors import DatasetError
from queuetrack.models import Dataset, ImportBatch
from queuetrack.services.storage import JSONDatasetStore, migrate_payload


@pytest.fixture
def store(config):
    return JSONDatasetStore(config)


def _legacy_test(**overrides):
    data = {
        "email": "a@b.com",
        "testingDate": "2026-01-15",
        "eventName": "Show",
        "queueNumber": 500,
        "queueAnchor": 1000,
    }
    data.update(overrides)
    return data


def test_missing_file_loads_empty(store):
    result = store.load()
    assert result.dataset == Dataset()
    assert not (result.recovered or result.corrupted or result.migrated)


def test_save_then_load_round_trip(store, record_factory):
    dataset = Dataset(
        tests=[record_factory()],
        imports=[ImportBatch(id="batch-1", filename="a.csv", date="2026-01-15T00:00:00+00:00", test_count=1)],
    )
    store.save(dataset)

    payload = json.loads(store.data_path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["tests"][0]["testingDate"] == "2026-01-15"
    assert payload["imports"][0]["testCount"] == 1

    assert store.load().dataset == dataset


def test_save_backs_up_previous_file(store, record_factory):
    store.save(Dataset(tests=[record_factory(queue_number=1)]))
    assert not store.backup_path.exists()

    store.save(Dataset(tests=[record_factory(queue_number=2)]))
    backup = json.loads(store.backup_path.read_text(encoding="utf-8"))
    assert backup["tests"][0]["queueNumber"] == 1


def test_corrupted_file_recovers_from_backup(store, record_factory):
    store.save(Dataset(tests=[record_factory(queue_number=1)]))
    store.save(Dataset(tests=[record_factory(queue_number=2)]))
    store.data_path.write_text("{not json", encoding="utf-8")

    result = store.load()
    assert result.recovered
    assert result.dataset.tests[0].queue_number == 1
    # The good backup is written back over the corrupted file.
    assert json.loads(store.data_path.read_text(encoding="utf-8"))["tests"][0]["queueNumber"] == 1


def test_corrupted_file_and_backup_resets_to_empty(store):
    store.data_path.write_text("{not json", encoding="utf-8")
    store.backup_path.write_text("also broken", encoding="utf-8")

    result = store.load()
    assert result.corrupted
    assert result.dataset == Dataset()


def test_legacy_array_is_migrated(store):
    store.data_path.write_text(json.dumps([_legacy_test()]), encoding="utf-8")
    result = store.load()

    assert result.migrated
    assert len(result.dataset.tests) == 1
    assert result.dataset.tests[0].import_id is None
    assert result.dataset.imports == []


def test_legacy_object_without_version_gets_imports():
    payload, migrated = migrate_payload({"tests": []})
    assert migrated
    assert payload == {"tests": [], "imports": [], "version": 1}


def test_versioned_payload_is_not_migrated():
    payload = {"version": 1, "tests": [], "imports": []}
    assert migrate_payload(payload) == (payload, False)


@pytest.mark.parametrize("raw", ["text", 42, None])
def test_unexpected_top_level_shape_fails_loudly(raw):
    with pytest.raises(DatasetError):
        migrate_payload(raw)


def test_malformed_record_fails_loudly(store):
    store.data_path.write_text(
        json.dumps({"version": 1, "tests": [_legacy_test(queueNumber="500")], "imports": []}),
        encoding="utf-8",
    )
    with pytest.raises(DatasetError, match="queueNumber"):
        store.load()


def test_missing_record_field_fails_loudly(store):
    broken = _legacy_test()
    del broken["email"]
    store.data_path.write_text(json.dumps({"version": 1, "tests": [broken]}), encoding="utf-8")
    with pytest.raises(DatasetError, match="email"):
        store.load()


def test_legacy_dates_are_normalized_on_migration(store):
    store.data_path.write_text(
        json.dumps(
            [
                _legacy_test(testingDate="01/15/2026", queueNumber=100),
                _legacy_test(testingDate="12/01/2025", queueNumber=900),
            ]
        ),
        encoding="utf-8",
    )
    result = store.load()

    assert result.migrated
    assert [t.testing_date for t in result.dataset.tests] == ["2026-01-15", "2025-12-01"]


def test_legacy_unreadable_date_fails_loudly():
    with pytest.raises(DatasetError, match="testingDate"):
        migrate_payload([_legacy_test(testingDate="someday")])


def test_versioned_payload_dates_are_left_alone():
    payload = {"version": 1, "tests": [_legacy_test(testingDate="2026-01-15")], "imports": []}
    assert migrate_payload(payload)[0] is payload


def test_undecodable_file_recovers_from_backup(store, record_factory):
    store.save(Dataset(tests=[record_factory(queue_number=1)]))
    store.save(Dataset(tests=[record_factory(queue_number=2)]))
    store.data_path.write_bytes(b"\xff\xfe\x00\x81garbage")

    result = store.load()
    assert result.recovered
    assert result.dataset.tests[0].queue_number == 1


def test_undecodable_file_and_backup_resets_to_empty(store):
    store.data_path.write_bytes(b"\xff\xfe\x00\x81garbage")
    store.backup_path.write_bytes(b"\x81\x82")

    result = store.load()
    assert result.corrupted
    assert result.dataset == Dataset()
