"""FastAPI application factory.

Main entry point for the EyeLevel Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eyelevel.core.records import (
    DataCorruptionError,
    DuplicateEntryError,
    EntryValidationError,
    UnknownCategoryError,
)
from eyelevel.db.kv_store import KeyValueStore, StorageUnavailableError
from eyelevel.ocr.client import OcrClient
from eyelevel.web.routes import (
    analyze_router,
    entries_router,
    health_router,
    students_router,
)
from eyelevel.web.services import configure_services, reset_services

logger = structlog.get_logger(__name__)

# User-facing notices; details go to the log only
STORAGE_FAILED_NOTICE = "Operation failed, please retry later"
CORRUPTED_NOTICE = "Stored data is corrupted"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    logger.info("api_startup")
    yield
    reset_services()


async def _validation_error_handler(request: Request, exc: EntryValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


async def _unknown_category_handler(request: Request, exc: UnknownCategoryError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


async def _duplicate_entry_handler(request: Request, exc: DuplicateEntryError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"error": "Entry already exists"})


async def _storage_error_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:
    logger.error("storage_unavailable", path=request.url.path, operation=exc.operation, key=exc.key)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": STORAGE_FAILED_NOTICE},
    )


async def _corruption_handler(request: Request, exc: DataCorruptionError) -> JSONResponse:
    logger.error("data_corrupted", path=request.url.path, key=exc.key, reason=exc.reason)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": CORRUPTED_NOTICE},
    )


def create_app(
    kv_store: KeyValueStore | None = None,
    ocr_client: OcrClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        kv_store: Key/value store to use (SQLite from config if not provided)
        ocr_client: OCR client to use (created from config on first use)

    Returns:
        Configured FastAPI app instance
    """
    configure_services(kv_store=kv_store, ocr_client=ocr_client)

    app = FastAPI(
        title="EyeLevel Tracker API",
        description="Workbook photo analysis and progress records",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for the mobile/web client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(EntryValidationError, _validation_error_handler)
    app.add_exception_handler(UnknownCategoryError, _unknown_category_handler)
    app.add_exception_handler(DuplicateEntryError, _duplicate_entry_handler)
    app.add_exception_handler(StorageUnavailableError, _storage_error_handler)
    app.add_exception_handler(DataCorruptionError, _corruption_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(analyze_router)
    app.include_router(students_router)
    app.include_router(entries_router)

    return app
