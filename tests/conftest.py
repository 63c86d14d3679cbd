from pathlib import Path

import pytest

from namaste_mapper.core.config import RecordSettings, Settings, StorageSettings
from namaste_mapper.core.storage import FileBlobStorage
from namaste_mapper.services.catalog_source import StaticCatalogSource
from namaste_mapper.services.record_store import MappingRecordStore

CSV_CONTENT = (
    "\ufeffNAMC_ID,NAMC_CODE,NAMC_term,Short_definition\n"
    "1,AAA-1,vAtasañcayaH,Accumulation of vata\n"
    "2,AAA-2,vAtavRuddhiH,Increase of vata\n"
    "3,AAA-3,vAtaprakopaH,Aggravation of vata\n"
)


@pytest.fixture
def records_csv(tmp_path) -> Path:
    path = tmp_path / "morbidity.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path, records_csv):
    return Settings(
        ENV="test",
        EXPORT_DIR=str(tmp_path / "exports"),
        storage=StorageSettings(backend="file", directory=str(tmp_path / "store")),
        records=RecordSettings(path=str(records_csv)),
    )


@pytest.fixture
def storage(tmp_path):
    return FileBlobStorage(tmp_path / "store")


@pytest.fixture
def store(storage):
    return MappingRecordStore(storage, StaticCatalogSource())
