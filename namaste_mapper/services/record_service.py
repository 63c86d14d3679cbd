"""
Record Service

Backing store for the ``/records`` REST surface:
- Reader: streams the dataset once at startup (CSV decoded as UTF-8, JSON array or NDJSON)
- CRUD over a single in-memory list of rows, keyed by a configurable id field (NAMC_ID)

Rows are stored verbatim; there is no schema. Mutations are serialized with a lock.
This record set is unrelated to the session store's patients and mapping records.
"""
from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterator, List

import ijson

from ..core.config import Settings

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    def __init__(self, record_id: str):
        super().__init__(record_id)
        self.record_id = record_id


class RecordService:
    """In-memory rows loaded from a dataset file."""

    def __init__(self, id_field: str = "NAMC_ID", default_format: str = "csv"):
        self.id_field = id_field
        self.default_format = default_format
        self._rows: List[Dict[str, Any]] = []
        self._lock = Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecordService":
        return cls(id_field=settings.records.id_field, default_format=settings.records.default_format)

    # ---------------------- Loading ----------------------
    def load(self, file_path: str | Path) -> int:
        """Replace the dataset with the rows of ``file_path``. Returns the row count."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Data file not found: {file_path}")
        if file_path.is_dir():
            raise ValueError(f"Expected a file path but got a directory: {file_path}")

        rows = list(self._read_records(file_path))
        with self._lock:
            self._rows = rows
        logger.info("records_loaded", extra={"file_path": str(file_path), "rows": len(rows)})
        return len(rows)

    def _read_records(self, file_path: Path) -> Iterator[Dict[str, Any]]:
        file_format = self._detect_format(file_path)
        if file_format == "csv":
            return self._read_csv(file_path)
        if file_format == "ndjson":
            return self._read_ndjson(file_path)
        if file_format == "json":
            return self._read_json_array(file_path)
        raise ValueError(f"Unsupported file format: {file_format}")

    def _detect_format(self, file_path: Path) -> str:
        suffix = file_path.suffix.lower()
        if suffix == ".csv":
            return "csv"
        if suffix in (".ndjson", ".jsonl"):
            return "ndjson"
        if suffix == ".json":
            return "json"
        return self.default_format

    def _read_csv(self, file_path: Path) -> Iterator[Dict[str, Any]]:
        # utf-8-sig drops a leading BOM so the first header is not mangled
        with open(file_path, "r", encoding="utf-8-sig", newline="") as f:
            yield from csv.DictReader(f)

    def _read_ndjson(self, file_path: Path) -> Iterator[Dict[str, Any]]:
        with open(file_path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    yield json.loads(line)

    def _read_json_array(self, file_path: Path) -> Iterator[Dict[str, Any]]:
        with open(file_path, "rb") as f:
            yield from ijson.items(f, "item", use_float=True)

    # ---------------------- CRUD ----------------------
    def __len__(self) -> int:
        return len(self._rows)

    def _index_of(self, record_id: str) -> int:
        for i, row in enumerate(self._rows):
            if row.get(self.id_field) == record_id:
                return i
        raise RecordNotFoundError(record_id)

    def list_records(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._rows)

    def get_record(self, record_id: str) -> Dict[str, Any]:
        with self._lock:
            return self._rows[self._index_of(record_id)]

    def create_record(self, row: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._rows.append(row)
        logger.info("record_created", extra={"record_id": row.get(self.id_field)})
        return row

    def update_record(self, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge ``changes`` onto the first row with a matching id."""
        with self._lock:
            index = self._index_of(record_id)
            merged = {**self._rows[index], **changes}
            self._rows[index] = merged
        logger.info("record_updated", extra={"record_id": record_id, "fields": sorted(changes)})
        return merged

    def delete_record(self, record_id: str) -> Dict[str, Any]:
        with self._lock:
            removed = self._rows.pop(self._index_of(record_id))
        logger.info("record_deleted", extra={"record_id": record_id})
        return removed
