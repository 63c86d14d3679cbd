"""
NAMASTE Mapper - FastAPI Application Entrypoint

This is the main entrypoint for the NAMASTE to ICD-11 mapping service. It sets up:
- FastAPI application with CORS middleware
- Structured JSON logging with contextual fields
- Durable blob storage (file or MongoDB) for patients and mapping records
- Service dependencies (MappingRecordStore, CatalogSource, RecordService, BundleUploader)
- API routers for the session store, the CSV record service and login
- Request ID middleware for tracing
- Health check endpoint

Every service is constructed in the lifespan, attached to app.state and torn down on shutdown.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from namaste_mapper import __version__
from namaste_mapper.api.records_api import router as records_router
from namaste_mapper.api.session_api import router as session_router
from namaste_mapper.auth.auth import router as auth_router
from namaste_mapper.core.config import Settings, get_settings
from namaste_mapper.core.logging import bind_context, configure_logging
from namaste_mapper.core.storage import StorageError, create_storage
from namaste_mapper.services.catalog_source import create_catalog_source
from namaste_mapper.services.fhir import BundleUploader
from namaste_mapper.services.record_service import RecordNotFoundError, RecordService
from namaste_mapper.services.record_store import MappingRecordStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan context manager for startup and shutdown."""
        configure_logging(settings.LOG_LEVEL)

        with bind_context(logger, service="namaste-mapper", env=settings.ENV) as log:
            log.info(f"service_startup app_name={settings.APP_NAME}")

        storage = create_storage(settings)
        catalog_source = create_catalog_source(settings)
        record_store = MappingRecordStore(storage, catalog_source)

        record_service = RecordService.from_settings(settings)
        records_path = Path(settings.records.path)
        if records_path.is_file():
            record_service.load(records_path)
        else:
            logger.warning("records_file_not_found", extra={"path": str(records_path)})

        app.state.settings = settings
        app.state.record_store = record_store
        app.state.record_service = record_service
        app.state.bundle_uploader = BundleUploader()

        logger.info("startup_complete")

        yield

        # Shutdown
        logger.info("service_shutdown")
        await catalog_source.close()
        storage.close()

    app = FastAPI(
        title="NAMASTE Mapper",
        description="Maps NAMASTE traditional-medicine codes to ICD-11 and exports them as FHIR",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Middleware to add request ID and timing to all requests."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            with bind_context(logger, request_id=request_id, path=request.url.path, method=request.method, duration_ms=round(duration_ms, 2)) as log:
                log.exception("unhandled_exception", exc_info=exc)
            return JSONResponse(status_code=500, content={"detail": "Internal Server Error", "request_id": request_id})

        duration_ms = (time.perf_counter() - start_time) * 1000
        with bind_context(logger, request_id=request_id, path=request.url.path, method=request.method, status_code=response.status_code, duration_ms=round(duration_ms, 2)) as log:
            log.info("request_complete")

        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(RecordNotFoundError)
    async def record_not_found_handler(_: Request, __: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"message": "Not found"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("storage_error", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable, change was not saved"})

    app.include_router(session_router, prefix="/api/v1", tags=["mapping"])
    app.include_router(records_router, tags=["records"])
    app.include_router(auth_router, tags=["auth"])

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint."""
        return {"message": "Welcome to NAMASTE Mapper", "docs": "/docs"}

    @app.get("/health", tags=["health"])
    async def health_check():
        """Simple health check endpoint."""
        return {"status": "healthy", "service": "namaste-mapper"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_dev,
        log_level=settings.LOG_LEVEL.lower(),
    )
