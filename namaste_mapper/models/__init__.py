"""
Models Package

Contains Pydantic data models for:
- codes: NAMASTE and ICD-11 catalog entries and mapping suggestions
- records: Patients, mapping records and the FHIR documents derived from them
- api_models: API request/response models
"""

__all__ = ["codes", "records", "api_models"]
