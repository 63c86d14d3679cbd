from unittest.mock import MagicMock

import pytest
from pymongo.errors import PyMongoError

from namaste_mapper.core.config import Settings, StorageSettings
from namaste_mapper.core.storage import (
    FileBlobStorage,
    MongoBlobStorage,
    StorageReadError,
    StorageWriteError,
    create_storage,
)


def test_file_storage_round_trip(tmp_path):
    storage = FileBlobStorage(tmp_path / "nested" / "store")

    assert storage.get_item("healthcare_patients") is None
    storage.set_item("healthcare_patients", "[]")
    storage.set_item("healthcare_patients", '[{"id": "PAT-1"}]')

    assert storage.get_item("healthcare_patients") == '[{"id": "PAT-1"}]'
    assert sorted(p.name for p in (tmp_path / "nested" / "store").iterdir()) == ["healthcare_patients.json"]


def test_file_storage_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    storage = FileBlobStorage(blocker)

    with pytest.raises(StorageWriteError):
        storage.set_item("healthcare_patients", "[]")


def test_mongo_storage_reads_and_upserts():
    collection = MagicMock()
    collection.find_one.side_effect = [None, {"_id": "healthcare_patients", "value": "[]"}]
    storage = MongoBlobStorage(collection)

    assert storage.get_item("healthcare_patients") is None
    storage.set_item("healthcare_patients", "[]")
    assert storage.get_item("healthcare_patients") == "[]"

    collection.update_one.assert_called_once_with(
        {"_id": "healthcare_patients"}, {"$set": {"value": "[]"}}, upsert=True
    )


def test_mongo_storage_wraps_driver_errors():
    collection = MagicMock()
    collection.find_one.side_effect = PyMongoError("no primary")
    collection.update_one.side_effect = PyMongoError("no primary")
    storage = MongoBlobStorage(collection)

    with pytest.raises(StorageReadError):
        storage.get_item("healthcare_patients")
    with pytest.raises(StorageWriteError):
        storage.set_item("healthcare_patients", "[]")


def test_mongo_storage_closes_client():
    client = MagicMock()
    storage = MongoBlobStorage(MagicMock(), client)

    storage.close()
    storage.close()

    client.close.assert_called_once()


def test_create_storage_defaults_to_files(tmp_path):
    settings = Settings(storage=StorageSettings(directory=str(tmp_path)))
    assert isinstance(create_storage(settings), FileBlobStorage)


def test_mongo_backend_requires_uri():
    settings = Settings(storage=StorageSettings(backend="mongo", mongo_uri=None))
    with pytest.raises(ValueError):
        create_storage(settings)
