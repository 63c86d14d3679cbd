"""Case-insensitive substring search over the NAMASTE and ICD-11 catalogs.

An empty query returns the whole catalog. Results keep catalog order; there is
no ranking.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence

from ..models.codes import ICDCode, NAMASTECode


def _matches(query: str, fields: Iterable[str]) -> bool:
    return any(query in field.lower() for field in fields)


def search_namaste_codes(catalog: Sequence[NAMASTECode], query: str) -> List[NAMASTECode]:
    if not query:
        return list(catalog)
    term = query.lower()
    return [c for c in catalog if _matches(term, (c.code, c.name, c.description))]


def search_icd_codes(catalog: Sequence[ICDCode], query: str) -> List[ICDCode]:
    if not query:
        return list(catalog)
    term = query.lower()
    return [c for c in catalog if _matches(term, (c.code, c.name, c.category))]
