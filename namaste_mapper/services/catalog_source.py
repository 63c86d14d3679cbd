"""
Catalog Sources

The record store reads its NAMASTE and ICD-11 catalogs from a CatalogSource:
- StaticCatalogSource: the canonical tables in ``namaste_mapper.data.catalogs``
- RemoteCatalogSource: WHO ICD-11 search API (TM2 chapter and biomedicine
  chapters) plus a configurable NAMASTE catalog endpoint

Sources raise CatalogUnavailableError on failure. ``refresh_catalogs`` fetches
both catalogs concurrently and returns an explicit CatalogRefresh result; it is
all-or-nothing, a failure of either fetch fails the whole refresh.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Protocol

import httpx
from pydantic import ValidationError

from ..core.config import Settings
from ..data.catalogs import ICD_CODES, NAMASTE_CODES
from ..models.codes import ICDCode, NAMASTECode

logger = logging.getLogger(__name__)

# WHO search results highlight matches with <em class='found'>...</em>
_TAG_RE = re.compile(r"<[^>]+>")

TM2_CHAPTER = "26"
BIOMEDICINE_CHAPTERS = "01;02;03;04;05;06;07;08;09;10;11;12;13;14;15;16;17;18;19;20;21;22;23;24;25"


class CatalogUnavailableError(Exception):
    """Raised when a catalog cannot be fetched or parsed."""


class CatalogSource(Protocol):
    async def fetch_namaste_codes(self) -> List[NAMASTECode]:
        ...

    async def fetch_icd_codes(self) -> List[ICDCode]:
        ...

    async def close(self) -> None:
        ...


async def gather_or_cancel(*aws: Awaitable[Any]) -> List[Any]:
    """Like ``asyncio.gather`` but cancels and awaits the remaining tasks when one fails."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


@dataclass(frozen=True)
class CatalogRefresh:
    ok: bool
    namaste_codes: List[NAMASTECode] = field(default_factory=list)
    icd_codes: List[ICDCode] = field(default_factory=list)
    error: Optional[str] = None


class StaticCatalogSource:
    """Serves the canonical static catalogs."""

    async def fetch_namaste_codes(self) -> List[NAMASTECode]:
        return list(NAMASTE_CODES)

    async def fetch_icd_codes(self) -> List[ICDCode]:
        return list(ICD_CODES)

    async def close(self) -> None:
        pass


class RemoteCatalogSource:
    """Fetches ICD-11 codes from the WHO search API and NAMASTE codes from a JSON endpoint."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.search_url = settings.catalog.who_search_url
        self.namaste_url = settings.catalog.namaste_url
        self.api_key = settings.catalog.who_api_key
        self.client = client or httpx.AsyncClient(timeout=settings.catalog.timeout_seconds)

    async def close(self) -> None:
        await self.client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json", "Accept-Language": "en", "API-Version": "v2"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            resp = await self.client.get(url, params=params, headers=self._headers())
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogUnavailableError(f"GET {url} failed: {e}") from e

    async def _search_chapter(self, chapters: str, category: str) -> List[ICDCode]:
        params = {"q": "", "chapterFilter": chapters, "useFlexisearch": "true", "flatResults": "true"}
        payload = await self._get_json(self.search_url, params)
        return self._transform_results(payload, category)

    async def fetch_icd_codes(self) -> List[ICDCode]:
        tm2, biomedicine = await gather_or_cancel(
            self._search_chapter(TM2_CHAPTER, "TM2"),
            self._search_chapter(BIOMEDICINE_CHAPTERS, "Biomedicine"),
        )
        return tm2 + biomedicine

    async def fetch_namaste_codes(self) -> List[NAMASTECode]:
        if not self.namaste_url:
            raise CatalogUnavailableError("NAMASTE catalog URL not configured")
        payload = await self._get_json(self.namaste_url)
        if not isinstance(payload, list):
            raise CatalogUnavailableError("NAMASTE catalog response is not a list")
        try:
            return [NAMASTECode(**item) for item in payload]
        except (TypeError, ValidationError) as e:
            raise CatalogUnavailableError(f"Malformed NAMASTE catalog entry: {e}") from e

    @staticmethod
    def _text(value: Any) -> str:
        # WHO fields are either plain strings or {"@language": ..., "@value": ...}
        if isinstance(value, dict):
            value = value.get("@value")
        return _TAG_RE.sub("", str(value or ""))

    def _transform_results(self, payload: Any, category: str) -> List[ICDCode]:
        if not isinstance(payload, dict):
            raise CatalogUnavailableError("ICD-11 search response is not an object")
        entities = payload.get("destinationEntities") or []
        if not isinstance(entities, list):
            raise CatalogUnavailableError("ICD-11 search destinationEntities is not a list")
        items: List[ICDCode] = []
        try:
            for entity in entities:
                if not isinstance(entity, dict):
                    raise CatalogUnavailableError(f"Malformed ICD-11 search entity: {entity!r}")
                code = entity.get("theCode") or entity.get("code")
                if not code:
                    continue
                chapter = entity.get("chapter")
                items.append(
                    ICDCode(
                        code=str(code),
                        name=self._text(entity.get("title")),
                        category=category,
                        chapter=str(chapter) if chapter is not None else None,
                    )
                )
        except (AttributeError, TypeError, ValidationError) as e:
            raise CatalogUnavailableError(f"Malformed ICD-11 search entity: {e}") from e
        return items


def create_catalog_source(settings: Settings) -> CatalogSource:
    if settings.catalog.source == "remote":
        return RemoteCatalogSource(settings)
    return StaticCatalogSource()


async def refresh_catalogs(source: CatalogSource) -> CatalogRefresh:
    """Fetch both catalogs concurrently; any failure fails the refresh as a whole."""
    try:
        namaste_codes, icd_codes = await gather_or_cancel(
            source.fetch_namaste_codes(),
            source.fetch_icd_codes(),
        )
    except CatalogUnavailableError as e:
        logger.warning("catalog_refresh_failed", extra={"error": str(e)})
        return CatalogRefresh(ok=False, error=str(e))
    return CatalogRefresh(ok=True, namaste_codes=namaste_codes, icd_codes=icd_codes)
