"""
Analytics

Read-only views over the session store's mapping records:
- mapping_statistics: counts and shares per match type, per NAMASTE system, top conditions
- filter_records: free-text and match-type filtering used by the records listing
- problem_list: mapping records of a single patient
- patient_encounters / encounter_type_counts: encounter history of a patient
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Sequence

from ..models.codes import MatchType
from ..models.records import Encounter, EncounterType, MappingRecord, Patient

UNKNOWN_PATIENT = "Unknown Patient"
TOP_CONDITIONS = 5


def _system_of(namaste_code: str) -> str:
    # NAM-AYU-103 -> AYU
    parts = namaste_code.split("-")
    return parts[1] if len(parts) > 1 else namaste_code


def mapping_statistics(records: Sequence[MappingRecord]) -> Dict[str, Any]:
    total = len(records)
    by_type = Counter(r.mapping_type for r in records)

    def share(match_type: MatchType) -> float:
        return (by_type[match_type] / total) * 100 if total else 0.0

    conditions = Counter(r.namaste_name for r in records)
    return {
        "total_mappings": total,
        "exact_mappings": by_type[MatchType.exact],
        "approximate_mappings": by_type[MatchType.approximate],
        "partial_mappings": by_type[MatchType.partial],
        "exact_percentage": share(MatchType.exact),
        "approximate_percentage": share(MatchType.approximate),
        "partial_percentage": share(MatchType.partial),
        "system_counts": dict(Counter(_system_of(r.namaste_code) for r in records)),
        "top_conditions": conditions.most_common(TOP_CONDITIONS),
    }


def filter_records(
    records: Sequence[MappingRecord],
    patients: Sequence[Patient],
    search_term: str = "",
    mapping_type: str = "all",
) -> List[MappingRecord]:
    term = search_term.lower()
    names = {p.id: p.name for p in patients}
    results = []
    for record in records:
        if mapping_type != "all" and record.mapping_type.value != mapping_type:
            continue
        if term:
            fields = (
                record.namaste_code,
                record.namaste_name,
                record.icd_code,
                record.icd_name,
                names.get(record.patient_id, UNKNOWN_PATIENT),
            )
            if not any(term in f.lower() for f in fields):
                continue
        results.append(record)
    return results


def problem_list(records: Sequence[MappingRecord], patient_id: str) -> List[MappingRecord]:
    return [r for r in records if r.patient_id == patient_id]


def patient_encounters(encounters: Sequence[Encounter], patient_id: str) -> List[Encounter]:
    return [e for e in encounters if e.patient_id == patient_id]


def encounter_type_counts(encounters: Sequence[Encounter]) -> Dict[str, int]:
    """Count encounters per type; every type is present, zero when unused."""
    counts = Counter(e.type for e in encounters)
    return {t.value: counts[t] for t in EncounterType}
