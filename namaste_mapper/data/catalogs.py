"""Canonical NAMASTE and ICD-11 catalogs and the mapping suggestion table."""
from __future__ import annotations

from typing import Dict, List

from ..models.codes import ICDCode, MappingSuggestion, MatchType, NAMASTECode

NAMASTE_CODES: List[NAMASTECode] = [
    NAMASTECode(
        code="NAM-AYU-103",
        name="Jvara",
        description="Fever condition in Ayurveda, characterized by elevated body temperature",
        system="Ayurveda",
    ),
    NAMASTECode(
        code="NAM-AYU-201",
        name="Prameha",
        description="Metabolic disorder similar to diabetes in Ayurveda",
        system="Ayurveda",
    ),
    NAMASTECode(
        code="NAM-SID-301",
        name="Vatha Noi",
        description="Joint pain and arthritis-like condition in Siddha medicine",
        system="Siddha",
    ),
    NAMASTECode(
        code="NAM-HOM-501",
        name="Arsenicum Album",
        description="Homeopathy remedy for digestive and anxiety conditions",
        system="Homeopathy",
    ),
    NAMASTECode(
        code="NAM-AYU-104",
        name="Kasa",
        description="Cough and respiratory conditions in Ayurveda",
        system="Ayurveda",
    ),
    NAMASTECode(
        code="NAM-AYU-202",
        name="Shotha",
        description="Inflammatory swelling conditions in Ayurveda",
        system="Ayurveda",
    ),
    NAMASTECode(
        code="NAM-SID-302",
        name="Mega Noi",
        description="Brain and neurological disorders in Siddha",
        system="Siddha",
    ),
    NAMASTECode(
        code="NAM-HOM-502",
        name="Belladonna",
        description="Homeopathy remedy for acute inflammatory conditions",
        system="Homeopathy",
    ),
    NAMASTECode(
        code="NAM-UNN-401",
        name="Humma",
        description="Fever in Unani medicine",
        system="Unani",
    ),
]

ICD_CODES: List[ICDCode] = [
    ICDCode(code="1D44", name="Fever of unknown origin", category="Symptoms, signs and abnormal clinical findings"),
    ICDCode(code="5A11", name="Type 2 Diabetes Mellitus", category="Endocrine, nutritional and metabolic diseases"),
    ICDCode(code="FA20", name="Rheumatoid Arthritis", category="Diseases of the musculoskeletal system"),
    ICDCode(code="XM123456", name="Homeopathy – remedy related condition", category="Traditional medicine codes"),
    ICDCode(code="CA40", name="Cough", category="Symptoms, signs and abnormal clinical findings"),
    ICDCode(code="ME84", name="Localised swelling, mass or lump", category="Symptoms, signs and abnormal clinical findings"),
    ICDCode(code="8E4Z", name="Neurological disorder, unspecified", category="Diseases of the nervous system"),
    ICDCode(code="1A00", name="Acute inflammatory disorders", category="Certain infectious or parasitic diseases"),
]


def _suggest(icd_code: str, match_type: MatchType, confidence: int) -> MappingSuggestion:
    return MappingSuggestion(icd_code=icd_code, match_type=match_type, confidence=confidence)


# Keyed by NAMASTE code; codes without an entry have no suggestions
MAPPING_SUGGESTIONS: Dict[str, List[MappingSuggestion]] = {
    "NAM-AYU-103": [_suggest("1D44", MatchType.exact, 95)],
    "NAM-AYU-201": [_suggest("5A11", MatchType.approximate, 85)],
    "NAM-SID-301": [_suggest("FA20", MatchType.approximate, 80)],
    "NAM-HOM-501": [_suggest("XM123456", MatchType.partial, 75)],
    "NAM-AYU-104": [_suggest("CA40", MatchType.exact, 90)],
    "NAM-AYU-202": [_suggest("ME84", MatchType.approximate, 82)],
    "NAM-SID-302": [_suggest("8E4Z", MatchType.approximate, 78)],
    "NAM-HOM-502": [_suggest("1A00", MatchType.approximate, 85)],
}
