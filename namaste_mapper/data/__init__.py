"""
Data Package

Canonical static data read by the record store and the static catalog source:
- catalogs: NAMASTE codes, ICD-11 codes and the NAMASTE -> ICD-11 suggestion table
"""

__all__ = ["catalogs"]
