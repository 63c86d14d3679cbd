"""
Services Package

Contains business logic services:
- search: case-insensitive substring search over the code catalogs
- suggestions: static NAMASTE -> ICD-11 suggestion lookup
- catalog_source: static and network (WHO ICD-11) catalog sources
- fhir: FHIR Condition/Bundle construction, bundle validation and import
- record_store: patients and mapping records with durable storage
- record_service: CSV-backed record set served over REST
- analytics: mapping statistics, record filtering and problem lists
"""
__all__ = ["search", "suggestions", "catalog_source", "fhir", "record_store", "record_service", "analytics"]
