"""
API Models

Pydantic models for API requests and responses:
- PatientCreateRequest / MappingCreateRequest: session store writes
- SuggestionResponse: suggestion joined with its ICD-11 catalog entry
- RefreshResponse / ImportResponse: catalog refresh and bundle import outcomes
- AnalyticsResponse: mapping statistics
- EncounterHistoryResponse: encounters of one patient with per-type counts
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .codes import ICDCode, MatchType
from .records import Encounter, GenderEnum


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PatientCreateRequest(_CamelRequest):
    """Request model for registering a patient. Values are stored as given."""

    name: str
    age: int
    gender: GenderEnum
    contact: str = ""


class MappingCreateRequest(_CamelRequest):
    """Request model for creating a mapping record from snapshot fields."""

    patient_id: str
    namaste_code: str
    namaste_name: str
    icd_code: str
    icd_name: str
    mapping_type: MatchType


class SuggestionResponse(_CamelRequest):
    icd_code: str
    match_type: MatchType
    confidence: int
    icd: ICDCode


class RefreshResponse(BaseModel):
    ok: bool = Field(..., description="True when both catalogs were replaced")
    namaste_count: int
    icd_count: int
    error: Optional[str] = None


class ImportResponse(BaseModel):
    success: bool
    id: Optional[str] = Field(None, description="Upload id returned for an accepted bundle")
    errors: List[str] = Field(default_factory=list)


class AnalyticsResponse(BaseModel):
    total_mappings: int
    exact_mappings: int
    approximate_mappings: int
    partial_mappings: int
    exact_percentage: float
    approximate_percentage: float
    partial_percentage: float
    system_counts: Dict[str, int]
    top_conditions: List[Tuple[str, int]]


class EncounterHistoryResponse(_CamelRequest):
    patient_id: str
    encounters: List[Encounter]
    type_counts: Dict[str, int]
