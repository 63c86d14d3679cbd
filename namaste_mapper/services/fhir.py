"""
FHIR Service

Builds and checks the FHIR documents exchanged by the mapping service:
- build_condition: Condition resource derived from a mapping record (dual NAMASTE + ICD-11 coding)
- build_bundle: collection Bundle wrapping Condition resources
- bundle_template: downloadable example bundle
- validate_bundle: field-presence checks on an uploaded bundle, all violations collected
- import_bundle: parse, validate and forward an uploaded bundle to the BundleUploader
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..core.ids import epoch_ms, random_suffix, utc_now_iso
from ..models.records import (
    ICD11_SYSTEM,
    NAMASTE_SYSTEM,
    FHIRBundle,
    FHIRCodeableConcept,
    FHIRCoding,
    FHIRCondition,
    FHIRReference,
)

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = "fhir-bundle-template.json"
WHO_MMS_SYSTEM = "http://id.who.int/icd/release/11/2023-01/mms"
PARSE_ERROR = "Failed to parse JSON file or upload bundle"


def export_filename(day: Optional[date] = None) -> str:
    day = day or datetime.now(timezone.utc).date()
    return f"fhir-export-{day.isoformat()}.json"


def build_condition(
    patient_id: str, namaste_code: str, namaste_name: str, icd_code: str, icd_name: str
) -> FHIRCondition:
    return FHIRCondition(
        id=f"cond-{epoch_ms()}-{random_suffix(4)}",
        subject=FHIRReference(reference=f"Patient/{patient_id}"),
        code=FHIRCodeableConcept(
            coding=[
                FHIRCoding(system=NAMASTE_SYSTEM, code=namaste_code, display=namaste_name),
                FHIRCoding(system=ICD11_SYSTEM, code=icd_code, display=icd_name),
            ]
        ),
    )


def build_bundle(conditions: Iterable[FHIRCondition]) -> Dict[str, Any]:
    bundle = FHIRBundle(
        id=f"export-{epoch_ms()}",
        entry=[{"resource": c.model_dump(mode="json")} for c in conditions],
    )
    return bundle.model_dump(mode="json")


def write_bundle(bundle: Dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(bundle, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def bundle_template() -> Dict[str, Any]:
    return {
        "resourceType": "Bundle",
        "id": "namaste-icd11-template",
        "type": "collection",
        "timestamp": utc_now_iso(),
        "entry": [
            {
                "resource": {
                    "resourceType": "Condition",
                    "id": "condition-example",
                    "subject": {"reference": "Patient/example-patient"},
                    "code": {
                        "coding": [
                            {"system": NAMASTE_SYSTEM, "code": "NAM-AYU-103", "display": "Jvara"},
                            {"system": WHO_MMS_SYSTEM, "code": "1D44", "display": "Fever of unknown origin"},
                        ]
                    },
                    "meta": {"profile": ["http://hl7.org/fhir/StructureDefinition/Condition"]},
                }
            }
        ],
    }


def _coding_systems(entries: List[Any]) -> Iterable[str]:
    """Yield every string ``resource.code.coding[].system`` found in the entries."""
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        resource = entry.get("resource")
        if not isinstance(resource, dict):
            continue
        code = resource.get("code")
        if not isinstance(code, dict):
            continue
        coding = code.get("coding")
        if not isinstance(coding, list):
            continue
        for c in coding:
            if isinstance(c, dict) and isinstance(c.get("system"), str):
                yield c["system"]


def validate_bundle(document: Any) -> List[str]:
    """Return every violation found in a purported FHIR Bundle; empty means valid.

    The ICD-11 check is a literal substring test on the coding system, so WHO
    URIs such as ``http://id.who.int/icd/release/11/...`` do not satisfy it.
    """
    bundle = document if isinstance(document, dict) else {}
    errors: List[str] = []

    if bundle.get("resourceType") != "Bundle":
        errors.append("Invalid FHIR Bundle: Missing or incorrect resourceType")

    if not bundle.get("type"):
        errors.append("Invalid FHIR Bundle: Missing type")

    entries = bundle.get("entry")
    if not isinstance(entries, list):
        errors.append("Invalid FHIR Bundle: Missing or invalid entry array")
        entries = []

    systems = list(_coding_systems(entries))
    if not any(s == NAMASTE_SYSTEM for s in systems):
        errors.append("Bundle should contain NAMASTE coding system")
    if not any(ICD11_SYSTEM in s for s in systems):
        errors.append("Bundle should contain ICD-11 coding system")

    return errors


class BundleUploader:
    """Accepts validated bundles. Uploaded bundles are not persisted; a synthetic id is returned."""

    def upload(self, bundle: Dict[str, Any]) -> Dict[str, Any]:
        upload_id = f"bundle_{epoch_ms()}"
        logger.info(
            "fhir_bundle_uploaded",
            extra={"upload_id": upload_id, "entries": len(bundle.get("entry") or [])},
        )
        return {"success": True, "id": upload_id}


@dataclass
class ImportResult:
    success: bool
    errors: List[str] = field(default_factory=list)
    upload: Optional[Dict[str, Any]] = None


def import_bundle(raw: bytes | str, uploader: BundleUploader) -> ImportResult:
    """Parse, validate and upload a bundle file. Nothing is uploaded when any check fails."""
    try:
        document = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("fhir_bundle_parse_error", extra={"error": str(e)})
        return ImportResult(success=False, errors=[PARSE_ERROR])

    errors = validate_bundle(document)
    if errors:
        logger.info("fhir_bundle_rejected", extra={"violations": errors})
        return ImportResult(success=False, errors=errors)

    return ImportResult(success=True, upload=uploader.upload(document))
