"""
Record Models

Pydantic models for the session store and its FHIR representation:
- Patient: registered patient
- MappingRecord: NAMASTE -> ICD-11 association for a patient, with its FHIR Condition
- Encounter: a recorded visit of a patient, with optional vital signs
- FHIRCondition / FHIRBundle: the FHIR documents built from mapping records

Stored and exported JSON uses camelCase keys; attributes are snake_case.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .codes import MatchType

CONDITION_PROFILE = "http://hl7.org/fhir/StructureDefinition/Condition"
NAMASTE_SYSTEM = "NAMASTE"
ICD11_SYSTEM = "ICD-11"


class GenderEnum(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Patient(_CamelModel):
    id: str
    name: str
    age: int
    gender: GenderEnum
    contact: str
    created_at: str


class EncounterType(str, Enum):
    consultation = "consultation"
    follow_up = "follow-up"
    emergency = "emergency"
    procedure = "procedure"


class VitalSigns(_CamelModel):
    blood_pressure: Optional[str] = None
    heart_rate: Optional[int] = None
    temperature: Optional[float] = None
    weight: Optional[float] = None


class Encounter(_CamelModel):
    id: str
    patient_id: str
    date: str
    type: EncounterType
    provider: str
    notes: str
    vital_signs: Optional[VitalSigns] = None


class FHIRCoding(BaseModel):
    system: str
    code: str
    display: str


class FHIRCodeableConcept(BaseModel):
    coding: List[FHIRCoding]


class FHIRReference(BaseModel):
    reference: str


class FHIRMeta(BaseModel):
    profile: List[str] = Field(default_factory=lambda: [CONDITION_PROFILE])


class FHIRCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    resourceType: str = "Condition"
    id: str
    subject: FHIRReference
    code: FHIRCodeableConcept
    meta: FHIRMeta = Field(default_factory=FHIRMeta)


class MappingRecord(_CamelModel):
    id: str
    patient_id: str
    namaste_code: str
    namaste_name: str
    icd_code: str
    icd_name: str
    mapping_type: MatchType
    created_at: str
    fhir_data: FHIRCondition


class FHIRBundle(BaseModel):
    resourceType: str = "Bundle"
    id: str
    type: str = "collection"
    entry: List[Dict[str, Any]] = Field(default_factory=list)
