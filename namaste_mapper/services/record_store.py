"""
Mapping Record Store

Single source of truth for patients and NAMASTE -> ICD-11 mapping records:
- Generates identifiers and creation timestamps
- Derives the FHIR Condition of each mapping record once, at creation
- Persists each collection as a JSON array blob after every mutation
- Holds the current NAMASTE/ICD-11 catalogs and refreshes them from a CatalogSource
- Exports all mapping records as a FHIR Bundle

The store is constructed explicitly and passed to whoever needs it; the
application lifespan owns it.
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.ids import generate_id, utc_now_iso
from ..core.logging import hash_identifier
from ..core.storage import BlobStorage, StorageReadError, StorageWriteError
from ..data.catalogs import ICD_CODES, NAMASTE_CODES
from ..data.encounters import SAMPLE_ENCOUNTERS
from ..models.codes import ICDCode, MatchType, NAMASTECode
from ..models.records import Encounter, GenderEnum, MappingRecord, Patient
from .catalog_source import CatalogRefresh, CatalogSource, refresh_catalogs
from .fhir import build_bundle, build_condition, export_filename, write_bundle
from .search import search_icd_codes, search_namaste_codes

logger = logging.getLogger(__name__)

PATIENTS_KEY = "healthcare_patients"
MAPPING_RECORDS_KEY = "healthcare_mapping_records"

ModelT = TypeVar("ModelT", bound=BaseModel)


class MappingRecordStore:
    """Patients and mapping records backed by durable blob storage."""

    def __init__(
        self,
        storage: BlobStorage,
        catalog_source: CatalogSource,
        namaste_data: Optional[Sequence[NAMASTECode]] = None,
        icd_data: Optional[Sequence[ICDCode]] = None,
        encounters: Optional[Sequence[Encounter]] = None,
    ):
        self.storage = storage
        self.catalog_source = catalog_source
        self._lock = threading.Lock()
        self._namaste_data: List[NAMASTECode] = list(namaste_data if namaste_data is not None else NAMASTE_CODES)
        self._icd_data: List[ICDCode] = list(icd_data if icd_data is not None else ICD_CODES)
        self._encounters: List[Encounter] = list(encounters if encounters is not None else SAMPLE_ENCOUNTERS)
        self._patients: List[Patient] = self._load(PATIENTS_KEY, Patient)
        self._records: List[MappingRecord] = self._load(MAPPING_RECORDS_KEY, MappingRecord)
        logger.info(
            "record_store_loaded",
            extra={"patients": len(self._patients), "mapping_records": len(self._records)},
        )

    # ---------------------- Views ----------------------
    @property
    def patients(self) -> List[Patient]:
        return list(self._patients)

    @property
    def mapping_records(self) -> List[MappingRecord]:
        return list(self._records)

    @property
    def namaste_data(self) -> List[NAMASTECode]:
        return list(self._namaste_data)

    @property
    def icd_data(self) -> List[ICDCode]:
        return list(self._icd_data)

    @property
    def encounters(self) -> List[Encounter]:
        return list(self._encounters)

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        return next((p for p in self._patients if p.id == patient_id), None)

    # ---------------------- Persistence ----------------------
    def _load(self, key: str, model: Type[ModelT]) -> List[ModelT]:
        raw = self.storage.get_item(key)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a JSON array, got {type(items).__name__}")
            return [model.model_validate(item) for item in items]
        except (ValueError, ValidationError) as e:
            # Refuse to start rather than overwrite a blob we could not read
            raise StorageReadError(f"Stored blob {key} is malformed: {e}") from e

    def _persist(self, key: str, items: Sequence[BaseModel]) -> None:
        payload: List[Dict[str, Any]] = [item.model_dump(mode="json", by_alias=True) for item in items]
        self.storage.set_item(key, json.dumps(payload, ensure_ascii=False))

    def _append(self, key: str, collection: List[Any], item: BaseModel) -> None:
        collection.append(item)
        try:
            self._persist(key, collection)
        except StorageWriteError:
            # Keep memory in step with what is durably stored
            collection.pop()
            logger.error("store_write_failed", extra={"blob": key, "item_id": getattr(item, "id", None)})
            raise

    # ---------------------- Mutations ----------------------
    def add_patient(self, name: str, age: int, gender: GenderEnum | str, contact: str) -> Patient:
        patient = Patient(
            id=generate_id("PAT"),
            name=name,
            age=age,
            gender=gender,
            contact=contact,
            created_at=utc_now_iso(),
        )
        with self._lock:
            self._append(PATIENTS_KEY, self._patients, patient)
        logger.info("patient_added", extra={"patient_hash": hash_identifier(patient.id)})
        return patient

    def add_mapping_record(
        self,
        patient_id: str,
        namaste_code: str,
        namaste_name: str,
        icd_code: str,
        icd_name: str,
        mapping_type: MatchType | str,
    ) -> MappingRecord:
        """Create a mapping record from caller-supplied snapshot fields.

        Neither the patient nor the codes are checked against the store or the
        catalogs; values are stored verbatim.
        """
        record = MappingRecord(
            id=generate_id("MAP"),
            patient_id=patient_id,
            namaste_code=namaste_code,
            namaste_name=namaste_name,
            icd_code=icd_code,
            icd_name=icd_name,
            mapping_type=mapping_type,
            created_at=utc_now_iso(),
            fhir_data=build_condition(patient_id, namaste_code, namaste_name, icd_code, icd_name),
        )
        with self._lock:
            self._append(MAPPING_RECORDS_KEY, self._records, record)
        logger.info(
            "mapping_record_added",
            extra={
                "record_id": record.id,
                "patient_hash": hash_identifier(patient_id),
                "namaste_code": namaste_code,
                "icd_code": icd_code,
                "mapping_type": record.mapping_type.value,
            },
        )
        return record

    def clear(self) -> None:
        """Remove every patient and mapping record."""
        with self._lock:
            patients, records = self._patients, self._records
            self._patients, self._records = [], []
            try:
                self._persist(PATIENTS_KEY, self._patients)
                self._persist(MAPPING_RECORDS_KEY, self._records)
            except StorageWriteError:
                self._patients, self._records = patients, records
                logger.error("store_clear_failed")
                raise
        logger.info("record_store_cleared", extra={"patients": len(patients), "mapping_records": len(records)})

    # ---------------------- Search ----------------------
    def search_namaste_codes(self, query: str) -> List[NAMASTECode]:
        return search_namaste_codes(self._namaste_data, query)

    def search_icd_codes(self, query: str) -> List[ICDCode]:
        return search_icd_codes(self._icd_data, query)

    # ---------------------- Catalogs ----------------------
    async def refresh_data(self) -> CatalogRefresh:
        """Replace both catalogs with fresh ones; on failure keep the current ones."""
        result = await refresh_catalogs(self.catalog_source)
        if result.ok:
            with self._lock:
                self._namaste_data = list(result.namaste_codes)
                self._icd_data = list(result.icd_codes)
            logger.info(
                "catalogs_refreshed",
                extra={"namaste_codes": len(result.namaste_codes), "icd_codes": len(result.icd_codes)},
            )
        return result

    # ---------------------- FHIR export ----------------------
    def build_export_bundle(self) -> Dict[str, Any]:
        return build_bundle(r.fhir_data for r in self.mapping_records)

    def export_fhir_data(self, directory: str | Path) -> Path:
        """Write every mapping record's Condition, in store order, to ``fhir-export-<date>.json``."""
        bundle = self.build_export_bundle()
        path = write_bundle(bundle, Path(directory) / export_filename())
        logger.info("fhir_exported", extra={"path": str(path), "entries": len(bundle["entry"])})
        return path
