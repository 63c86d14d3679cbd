"""
Catalog Models

Immutable catalog entries:
- NAMASTECode: traditional-medicine condition code
- ICDCode: ICD-11 code with category and optional chapter
- MappingSuggestion: statically configured NAMASTE -> ICD-11 candidate
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MatchType(str, Enum):
    exact = "exact"
    approximate = "approximate"
    partial = "partial"


class NAMASTECode(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    description: str
    system: str = Field(..., description="Originating system: Ayurveda, Siddha, Homeopathy, Unani, ...")


class ICDCode(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    category: str
    chapter: Optional[str] = None


class MappingSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    icd_code: str
    match_type: MatchType
    confidence: int = Field(..., ge=0, le=100, description="Confidence as an integer percentage")
