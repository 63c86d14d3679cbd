import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from namaste_mapper.core.storage import FileBlobStorage, StorageReadError, StorageWriteError
from namaste_mapper.data.catalogs import ICD_CODES, NAMASTE_CODES
from namaste_mapper.models.codes import ICDCode, MatchType, NAMASTECode
from namaste_mapper.models.records import GenderEnum
from namaste_mapper.services.catalog_source import CatalogUnavailableError, StaticCatalogSource
from namaste_mapper.services.record_store import MAPPING_RECORDS_KEY, PATIENTS_KEY, MappingRecordStore


def _add_jvara(store, patient_id="PAT-1"):
    return store.add_mapping_record(
        patient_id=patient_id,
        namaste_code="NAM-AYU-103",
        namaste_name="Jvara",
        icd_code="1D44",
        icd_name="Fever of unknown origin",
        mapping_type="exact",
    )


def test_add_patient_generates_unique_ids(store):
    patients = [store.add_patient(f"Patient {i}", 30 + i, "female", "555-0100") for i in range(25)]

    ids = [p.id for p in patients]
    assert len(set(ids)) == len(ids)
    assert all(p.id.startswith("PAT-") for p in patients)
    assert [p.id for p in store.patients] == ids


def test_add_patient_stamps_creation_time_and_keeps_input(store):
    patient = store.add_patient("", -4, GenderEnum.other, "not a phone number")

    assert patient.name == ""
    assert patient.age == -4
    assert patient.gender == GenderEnum.other
    assert patient.created_at.endswith("Z")
    assert store.get_patient(patient.id) == patient


def test_patients_survive_reload(storage, store):
    patient = store.add_patient("Asha", 42, "female", "9876543210")

    reloaded = MappingRecordStore(storage, StaticCatalogSource())
    assert reloaded.patients == [patient]

    stored = json.loads(storage.get_item(PATIENTS_KEY))
    assert stored[0]["createdAt"] == patient.created_at
    assert stored[0]["gender"] == "female"


def test_mapping_record_builds_fhir_condition(store):
    record = _add_jvara(store)

    fhir = record.fhir_data
    assert fhir.resourceType == "Condition"
    assert fhir.subject.reference == "Patient/PAT-1"
    assert [c.model_dump() for c in fhir.code.coding] == [
        {"system": "NAMASTE", "code": "NAM-AYU-103", "display": "Jvara"},
        {"system": "ICD-11", "code": "1D44", "display": "Fever of unknown origin"},
    ]
    assert fhir.meta.profile == ["http://hl7.org/fhir/StructureDefinition/Condition"]
    assert record.mapping_type == MatchType.exact
    assert record.id.startswith("MAP-")


def test_mapping_record_accepts_unknown_patient_and_codes(store):
    record = store.add_mapping_record("nobody", "NOT-A-CODE", "???", "ZZZZ", "", "partial")

    assert record.patient_id == "nobody"
    assert record.namaste_code == "NOT-A-CODE"
    assert store.mapping_records == [record]


def test_mapping_records_persisted_with_camel_case_keys(storage, store):
    record = _add_jvara(store)

    stored = json.loads(storage.get_item(MAPPING_RECORDS_KEY))
    assert stored[0]["patientId"] == "PAT-1"
    assert stored[0]["mappingType"] == "exact"
    assert stored[0]["fhirData"]["code"]["coding"][0]["system"] == "NAMASTE"

    reloaded = MappingRecordStore(storage, StaticCatalogSource())
    assert reloaded.mapping_records == [record]


def test_write_failure_rolls_back_and_raises():
    storage = MagicMock()
    storage.get_item.return_value = None
    storage.set_item.side_effect = StorageWriteError("disk full")
    store = MappingRecordStore(storage, StaticCatalogSource())

    with pytest.raises(StorageWriteError):
        store.add_patient("Ravi", 50, "male", "")
    with pytest.raises(StorageWriteError):
        _add_jvara(store)

    assert store.patients == []
    assert store.mapping_records == []


def test_malformed_blob_refuses_to_load(tmp_path):
    storage = FileBlobStorage(tmp_path)
    storage.set_item(PATIENTS_KEY, "{not json")

    with pytest.raises(StorageReadError):
        MappingRecordStore(storage, StaticCatalogSource())


def test_clear_removes_everything(storage, store):
    store.add_patient("Asha", 42, "female", "")
    _add_jvara(store)

    store.clear()

    assert store.patients == []
    assert store.mapping_records == []
    assert json.loads(storage.get_item(PATIENTS_KEY)) == []
    assert json.loads(storage.get_item(MAPPING_RECORDS_KEY)) == []


def test_export_empty_store_writes_empty_bundle(store, tmp_path):
    path = store.export_fhir_data(tmp_path)

    assert path.name == f"fhir-export-{datetime.now(timezone.utc).date().isoformat()}.json"
    bundle = json.loads(path.read_text(encoding="utf-8"))
    assert bundle["resourceType"] == "Bundle"
    assert bundle["type"] == "collection"
    assert bundle["id"].startswith("export-")
    assert bundle["entry"] == []


def test_export_keeps_store_order(store):
    first = _add_jvara(store, "PAT-1")
    second = _add_jvara(store, "PAT-2")

    bundle = store.build_export_bundle()
    assert [e["resource"]["id"] for e in bundle["entry"]] == [first.fhir_data.id, second.fhir_data.id]
    assert bundle["entry"][1]["resource"]["subject"]["reference"] == "Patient/PAT-2"


@pytest.mark.asyncio
async def test_refresh_replaces_both_catalogs(storage):
    source = MagicMock()
    fresh_namaste = [NAMASTECode(code="NAM-UNN-401", name="Humma", description="Fever in Unani medicine", system="Unani")]
    fresh_icd = [ICDCode(code="SA00", name="Fever disorder (TM1)", category="TM2", chapter="26")]
    source.fetch_namaste_codes = AsyncMock(return_value=fresh_namaste)
    source.fetch_icd_codes = AsyncMock(return_value=fresh_icd)
    store = MappingRecordStore(storage, source)

    result = await store.refresh_data()

    assert result.ok
    assert store.namaste_data == fresh_namaste
    assert store.icd_data == fresh_icd


@pytest.mark.asyncio
async def test_refresh_failure_keeps_previous_catalogs(storage):
    source = MagicMock()
    source.fetch_namaste_codes = AsyncMock(return_value=[])
    source.fetch_icd_codes = AsyncMock(side_effect=CatalogUnavailableError("WHO API down"))
    store = MappingRecordStore(storage, source)

    result = await store.refresh_data()

    assert not result.ok
    assert "WHO API down" in result.error
    assert store.namaste_data == NAMASTE_CODES
    assert store.icd_data == ICD_CODES
