"""
Application configuration using Pydantic Settings.

This module defines the Settings object used across the service to configure:
- App metadata and environment
- CORS configuration
- Durable storage backend for patients and mapping records (file or MongoDB)
- The CSV-backed record service dataset
- Catalog source (static tables or WHO ICD-11 API) and request timeouts
- Token signing for the demo login

Values are read from environment variables with sensible defaults for development.
Use a .env file in development; in production, set environment variables via the platform's secret management.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_config(prefix: str) -> SettingsConfigDict:
    return SettingsConfigDict(env_prefix=prefix, env_file=".env", env_file_encoding="utf-8", extra="ignore")


class StorageSettings(BaseSettings):
    model_config = _env_config("STORAGE_")

    backend: Literal["file", "mongo"] = "file"
    directory: str = "data/store"
    mongo_uri: str | None = None
    mongo_database: str = "namaste_mapper"
    mongo_collection: str = "blobs"


class RecordSettings(BaseSettings):
    model_config = _env_config("RECORDS_")

    path: str = "NATIONAL AYURVEDA MORBIDITY CODES.csv"
    id_field: str = "NAMC_ID"
    default_format: Literal["csv", "ndjson", "json"] = "csv"


class CatalogSettings(BaseSettings):
    model_config = _env_config("CATALOG_")

    source: Literal["static", "remote"] = "static"
    who_search_url: str = "https://id.who.int/icd/release/11/2023-01/mms/search"
    who_api_key: str | None = None
    namaste_url: str | None = None
    timeout_seconds: float = 8.0


class AuthSettings(BaseSettings):
    model_config = _env_config("AUTH_")

    secret_key: str = "supersecretkey_change_me"
    algorithm: str = "HS256"
    expire_minutes: int = 60


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App metadata
    APP_NAME: str = Field("namaste-mapper")
    ENV: Literal["dev", "test", "staging", "prod"] = Field("dev")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field("INFO")

    # CORS
    ALLOW_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("ALLOW_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # Where exported FHIR bundles are written
    EXPORT_DIR: str = Field("exports")

    storage: StorageSettings = Field(default_factory=StorageSettings)
    records: RecordSettings = Field(default_factory=RecordSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance.

    Use lru_cache to avoid re-parsing environment variables. Tests may clear the cache if needed.
    """
    return Settings()  # type: ignore[arg-type]
