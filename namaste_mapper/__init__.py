"""
NAMASTE Mapper Package

This package contains the components of the NAMASTE to ICD-11 mapping service:
- core: Configuration, logging, and durable blob storage
- data: Canonical NAMASTE/ICD-11 catalogs and the suggestion table
- models: Pydantic models for codes, patients, mapping records and FHIR documents
- services: Record store, search, suggestions, FHIR export/import, record service, analytics
- api: FastAPI routers for the session store and the CSV record service
- auth: Demo login issuing bearer tokens
"""

__version__ = "1.0.0"
__all__ = ["core", "data", "models", "services", "api", "auth"]
