import json
import threading
from pathlib import Path

import pytest

from namaste_mapper.services.record_service import RecordNotFoundError, RecordService


@pytest.fixture
def service(records_csv):
    service = RecordService()
    service.load(records_csv)
    return service


def test_load_csv_strips_bom_and_keeps_all_columns(service):
    rows = service.list_records()

    assert len(rows) == 3
    assert rows[0] == {
        "NAMC_ID": "1",
        "NAMC_CODE": "AAA-1",
        "NAMC_term": "vAtasañcayaH",
        "Short_definition": "Accumulation of vata",
    }


def test_load_json_array_and_ndjson(tmp_path):
    json_path = tmp_path / "records.json"
    json_path.write_text(json.dumps([{"NAMC_ID": "7", "score": 1.5}]), encoding="utf-8")
    ndjson_path = tmp_path / "records.ndjson"
    ndjson_path.write_text('{"NAMC_ID": "8"}\n\n{"NAMC_ID": "9"}\n', encoding="utf-8")

    service = RecordService()
    assert service.load(json_path) == 1
    assert service.get_record("7")["score"] == 1.5
    assert service.load(ndjson_path) == 2
    assert [r["NAMC_ID"] for r in service.list_records()] == ["8", "9"]


def test_load_missing_file():
    with pytest.raises(FileNotFoundError):
        RecordService().load(Path("nonexistent.csv"))


def test_get_record_by_id(service):
    assert service.get_record("2")["NAMC_CODE"] == "AAA-2"
    with pytest.raises(RecordNotFoundError):
        service.get_record("42")


def test_create_appends_row_verbatim(service):
    row = {"NAMC_ID": "4", "anything": ["goes"]}

    assert service.create_record(row) == row
    assert service.list_records()[-1] == row
    assert len(service) == 4


def test_update_merges_without_dropping_fields(service):
    updated = service.update_record("1", {"NAMC_term": "changed", "extra": "new"})

    assert updated["NAMC_term"] == "changed"
    assert updated["extra"] == "new"
    assert updated["NAMC_CODE"] == "AAA-1"
    assert updated["Short_definition"] == "Accumulation of vata"
    assert service.get_record("1") == updated


def test_update_unknown_id(service):
    with pytest.raises(RecordNotFoundError):
        service.update_record("42", {"NAMC_term": "x"})


def test_delete_returns_removed_row(service):
    removed = service.delete_record("2")

    assert removed["NAMC_CODE"] == "AAA-2"
    assert [r["NAMC_ID"] for r in service.list_records()] == ["1", "3"]


def test_delete_unknown_id_leaves_dataset_unchanged(service):
    with pytest.raises(RecordNotFoundError):
        service.delete_record("42")
    assert len(service) == 3


def test_first_match_wins_for_duplicate_ids(service):
    service.create_record({"NAMC_ID": "1", "NAMC_CODE": "DUP"})

    service.delete_record("1")

    assert service.get_record("1")["NAMC_CODE"] == "DUP"


def test_reads_wait_for_running_mutation(service):
    results = []

    with service._lock:
        reader = threading.Thread(target=lambda: results.append(service.get_record("2")))
        reader.start()
        reader.join(timeout=0.2)
        assert reader.is_alive()
        service._rows.pop(0)

    reader.join(timeout=5)
    assert results[0]["NAMC_ID"] == "2"
