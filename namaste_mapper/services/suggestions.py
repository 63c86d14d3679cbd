"""
Suggestion Lookup

Static NAMASTE -> ICD-11 candidates read from the canonical suggestion table.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from ..data.catalogs import MAPPING_SUGGESTIONS
from ..models.codes import ICDCode, MappingSuggestion


def suggestions_for(namaste_code: str) -> List[MappingSuggestion]:
    """Return the configured suggestions for a NAMASTE code, or an empty list."""
    return list(MAPPING_SUGGESTIONS.get(namaste_code, []))


def resolve_suggestions(
    namaste_code: str, icd_catalog: Sequence[ICDCode]
) -> List[Tuple[MappingSuggestion, ICDCode]]:
    """Pair each suggestion with its ICD-11 catalog entry.

    Suggestions pointing at a code missing from the catalog are dropped.
    """
    by_code = {icd.code: icd for icd in icd_catalog}
    return [(s, by_code[s.icd_code]) for s in suggestions_for(namaste_code) if s.icd_code in by_code]
