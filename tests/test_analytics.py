import pytest

from namaste_mapper.data.encounters import SAMPLE_ENCOUNTERS
from namaste_mapper.services.analytics import (
    encounter_type_counts,
    filter_records,
    mapping_statistics,
    patient_encounters,
    problem_list,
)


@pytest.fixture
def populated(store):
    asha = store.add_patient("Asha Verma", 42, "female", "")
    ravi = store.add_patient("Ravi Kumar", 50, "male", "")
    store.add_mapping_record(asha.id, "NAM-AYU-103", "Jvara", "1D44", "Fever of unknown origin", "exact")
    store.add_mapping_record(asha.id, "NAM-SID-301", "Vatha Noi", "FA20", "Rheumatoid Arthritis", "approximate")
    store.add_mapping_record(ravi.id, "NAM-AYU-103", "Jvara", "1D44", "Fever of unknown origin", "exact")
    store.add_mapping_record("PAT-gone", "NAM-HOM-501", "Arsenicum Album", "XM123456", "Homeopathy", "partial")
    return store, asha, ravi


def test_statistics_on_empty_store():
    stats = mapping_statistics([])

    assert stats["total_mappings"] == 0
    assert stats["exact_percentage"] == 0
    assert stats["system_counts"] == {}
    assert stats["top_conditions"] == []


def test_statistics_counts_types_systems_and_conditions(populated):
    store, _, _ = populated

    stats = mapping_statistics(store.mapping_records)

    assert stats["total_mappings"] == 4
    assert (stats["exact_mappings"], stats["approximate_mappings"], stats["partial_mappings"]) == (2, 1, 1)
    assert stats["exact_percentage"] == 50.0
    assert stats["partial_percentage"] == 25.0
    assert stats["system_counts"] == {"AYU": 2, "SID": 1, "HOM": 1}
    assert stats["top_conditions"][0] == ("Jvara", 2)


def test_filter_by_type_and_text(populated):
    store, _, _ = populated
    records, patients = store.mapping_records, store.patients

    assert len(filter_records(records, patients)) == 4
    assert len(filter_records(records, patients, mapping_type="exact")) == 2
    assert [r.icd_code for r in filter_records(records, patients, "rheumatoid")] == ["FA20"]
    assert len(filter_records(records, patients, "JVARA", "exact")) == 2
    assert filter_records(records, patients, "jvara", "partial") == []


def test_filter_matches_patient_name(populated):
    store, _, ravi = populated

    by_name = filter_records(store.mapping_records, store.patients, "ravi")
    assert [r.patient_id for r in by_name] == [ravi.id]

    unknown = filter_records(store.mapping_records, store.patients, "unknown patient")
    assert [r.patient_id for r in unknown] == ["PAT-gone"]


def test_problem_list_for_patient(populated):
    store, asha, _ = populated

    problems = problem_list(store.mapping_records, asha.id)

    assert [p.namaste_code for p in problems] == ["NAM-AYU-103", "NAM-SID-301"]
    assert problem_list(store.mapping_records, "nobody") == []


def test_patient_encounters_and_type_counts():
    encounters = patient_encounters(SAMPLE_ENCOUNTERS, "PAT-123")

    assert [e.id for e in encounters] == ["1", "2"]
    assert encounter_type_counts(encounters) == {
        "consultation": 1,
        "follow-up": 1,
        "emergency": 0,
        "procedure": 0,
    }
    assert patient_encounters(SAMPLE_ENCOUNTERS, "PAT-other") == []
