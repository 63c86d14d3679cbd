"""Sample encounter history served by the encounters view."""
from __future__ import annotations

from typing import List

from ..models.records import Encounter, EncounterType, VitalSigns

SAMPLE_ENCOUNTERS: List[Encounter] = [
    Encounter(
        id="1",
        patient_id="PAT-123",
        date="2024-01-15",
        type=EncounterType.consultation,
        provider="Dr. Sharma",
        notes="Initial consultation for fever symptoms. Prescribed Ayurvedic medicines.",
        vital_signs=VitalSigns(blood_pressure="120/80", heart_rate=72, temperature=98.6, weight=70),
    ),
    Encounter(
        id="2",
        patient_id="PAT-123",
        date="2024-01-20",
        type=EncounterType.follow_up,
        provider="Dr. Sharma",
        notes="Follow-up visit. Patient reports improvement in symptoms.",
        vital_signs=VitalSigns(blood_pressure="118/78", heart_rate=70, temperature=98.2, weight=70.5),
    ),
]
