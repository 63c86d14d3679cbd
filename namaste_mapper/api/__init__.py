"""
API Package

Contains FastAPI routers for:
- session_api: patients, mapping records, catalog search, FHIR export/import, analytics
- records_api: /records CRUD over the dataset loaded at startup
"""

__all__ = ["session_api", "records_api"]
