"""
Session API

FastAPI router over the mapping record store:
- /patients: register and list patients, per-patient problem list and encounters
- /mappings: create and list NAMASTE -> ICD-11 mapping records
- /codes, /suggestions: catalog search and static mapping suggestions
- /catalogs/refresh: replace catalogs from the configured catalog source
- /fhir: bundle export, template download and bundle import
- /analytics: mapping statistics
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile, status
from fastapi.responses import JSONResponse

from ..auth.auth import get_current_user
from ..models.api_models import (
    AnalyticsResponse,
    EncounterHistoryResponse,
    ImportResponse,
    MappingCreateRequest,
    PatientCreateRequest,
    RefreshResponse,
    SuggestionResponse,
)
from ..models.codes import ICDCode, NAMASTECode
from ..models.records import MappingRecord, Patient
from ..services.analytics import (
    encounter_type_counts,
    filter_records,
    mapping_statistics,
    patient_encounters,
    problem_list,
)
from ..services.fhir import TEMPLATE_FILENAME, BundleUploader, bundle_template, export_filename, import_bundle
from ..services.record_store import MappingRecordStore
from ..services.suggestions import resolve_suggestions

router = APIRouter()
logger = logging.getLogger(__name__)


def get_record_store(request: Request) -> MappingRecordStore:
    """Dependency to get the record store from app state."""
    return request.app.state.record_store


def get_bundle_uploader(request: Request) -> BundleUploader:
    return request.app.state.bundle_uploader


def _attachment(content: Dict[str, Any], filename: str) -> JSONResponse:
    return JSONResponse(content=content, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


# ---------------------- Patients ----------------------
@router.get("/patients", response_model=List[Patient])
def list_patients(store: MappingRecordStore = Depends(get_record_store)) -> List[Patient]:
    return store.patients


@router.post(
    "/patients", response_model=Patient, status_code=status.HTTP_201_CREATED, dependencies=[Depends(get_current_user)]
)
def create_patient(body: PatientCreateRequest, store: MappingRecordStore = Depends(get_record_store)) -> Patient:
    return store.add_patient(body.name, body.age, body.gender, body.contact)


@router.get("/patients/{patient_id}", response_model=Patient)
def get_patient(patient_id: str, store: MappingRecordStore = Depends(get_record_store)) -> Patient:
    patient = store.get_patient(patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


@router.get("/patients/{patient_id}/problems", response_model=List[MappingRecord])
def get_problem_list(patient_id: str, store: MappingRecordStore = Depends(get_record_store)) -> List[MappingRecord]:
    return problem_list(store.mapping_records, patient_id)


@router.get("/patients/{patient_id}/encounters", response_model=EncounterHistoryResponse)
def get_encounters(patient_id: str, store: MappingRecordStore = Depends(get_record_store)) -> EncounterHistoryResponse:
    encounters = patient_encounters(store.encounters, patient_id)
    return EncounterHistoryResponse(
        patient_id=patient_id, encounters=encounters, type_counts=encounter_type_counts(encounters)
    )


# ---------------------- Mapping records ----------------------
@router.get("/mappings", response_model=List[MappingRecord])
def list_mappings(
    q: str = Query("", description="Matches NAMASTE/ICD-11 code or name and patient name"),
    mapping_type: Literal["all", "exact", "approximate", "partial"] = Query("all"),
    store: MappingRecordStore = Depends(get_record_store),
) -> List[MappingRecord]:
    return filter_records(store.mapping_records, store.patients, q, mapping_type)


@router.post(
    "/mappings",
    response_model=MappingRecord,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_mapping(body: MappingCreateRequest, store: MappingRecordStore = Depends(get_record_store)) -> MappingRecord:
    return store.add_mapping_record(
        body.patient_id,
        body.namaste_code,
        body.namaste_name,
        body.icd_code,
        body.icd_name,
        body.mapping_type,
    )


# ---------------------- Catalogs ----------------------
@router.get("/codes/namaste", response_model=List[NAMASTECode])
def search_namaste(q: str = "", store: MappingRecordStore = Depends(get_record_store)) -> List[NAMASTECode]:
    return store.search_namaste_codes(q)


@router.get("/codes/icd", response_model=List[ICDCode])
def search_icd(q: str = "", store: MappingRecordStore = Depends(get_record_store)) -> List[ICDCode]:
    return store.search_icd_codes(q)


@router.get("/suggestions/{namaste_code}", response_model=List[SuggestionResponse])
def get_suggestions(namaste_code: str, store: MappingRecordStore = Depends(get_record_store)) -> List[SuggestionResponse]:
    return [
        SuggestionResponse(
            icd_code=suggestion.icd_code,
            match_type=suggestion.match_type,
            confidence=suggestion.confidence,
            icd=icd,
        )
        for suggestion, icd in resolve_suggestions(namaste_code, store.icd_data)
    ]


@router.post("/catalogs/refresh", response_model=RefreshResponse, dependencies=[Depends(get_current_user)])
async def refresh_catalogs(req: Request, store: MappingRecordStore = Depends(get_record_store)) -> RefreshResponse:
    result = await store.refresh_data()
    if not result.ok:
        logger.warning(
            "catalog_refresh_kept_previous", extra={"request_id": req.state.request_id, "error": result.error}
        )
    return RefreshResponse(
        ok=result.ok,
        namaste_count=len(store.namaste_data),
        icd_count=len(store.icd_data),
        error=result.error,
    )


# ---------------------- FHIR ----------------------
@router.get("/fhir/export")
def download_export(store: MappingRecordStore = Depends(get_record_store)) -> JSONResponse:
    return _attachment(store.build_export_bundle(), export_filename())


@router.post("/fhir/export", dependencies=[Depends(get_current_user)])
def export_to_disk(req: Request, store: MappingRecordStore = Depends(get_record_store)) -> Dict[str, str]:
    path = store.export_fhir_data(Path(req.app.state.settings.EXPORT_DIR))
    return {"path": str(path)}


@router.get("/fhir/template")
def download_template() -> JSONResponse:
    return _attachment(bundle_template(), TEMPLATE_FILENAME)


@router.post("/fhir/import", response_model=ImportResponse, dependencies=[Depends(get_current_user)])
async def upload_bundle(file: UploadFile = File(...), uploader: BundleUploader = Depends(get_bundle_uploader)) -> Any:
    result = import_bundle(await file.read(), uploader)
    if not result.success:
        body = ImportResponse(success=False, errors=result.errors)
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body.model_dump())
    return ImportResponse(success=True, id=result.upload["id"])


# ---------------------- Analytics & maintenance ----------------------
@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(store: MappingRecordStore = Depends(get_record_store)) -> AnalyticsResponse:
    return AnalyticsResponse(**mapping_statistics(store.mapping_records))


@router.delete("/store", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(get_current_user)])
def clear_store(store: MappingRecordStore = Depends(get_record_store)) -> Response:
    store.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
