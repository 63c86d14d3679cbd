"""
Records API

FastAPI router for the dataset loaded at startup, keyed by NAMC_ID:
- GET /records, GET /records/{id}
- POST /records
- PUT /records/{id} (shallow merge)
- DELETE /records/{id}

Unknown ids raise RecordNotFoundError, answered with 404 {"message": "Not found"}.
"""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Request, status

from ..services.record_service import RecordService

router = APIRouter(prefix="/records")


def get_record_service(request: Request) -> RecordService:
    return request.app.state.record_service


@router.get("")
def list_records(service: RecordService = Depends(get_record_service)) -> List[Dict[str, Any]]:
    return service.list_records()


@router.get("/{record_id}")
def get_record(record_id: str, service: RecordService = Depends(get_record_service)) -> Dict[str, Any]:
    return service.get_record(record_id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_record(
    row: Dict[str, Any] = Body(...), service: RecordService = Depends(get_record_service)
) -> Dict[str, Any]:
    return {"message": "Record added", "record": service.create_record(row)}


@router.put("/{record_id}")
def update_record(
    record_id: str, changes: Dict[str, Any] = Body(...), service: RecordService = Depends(get_record_service)
) -> Dict[str, Any]:
    return {"message": "Record updated", "record": service.update_record(record_id, changes)}


@router.delete("/{record_id}")
def delete_record(record_id: str, service: RecordService = Depends(get_record_service)) -> Dict[str, Any]:
    return {"message": "Record deleted", "record": service.delete_record(record_id)}
