"""
API Routes
==========

Endpoint definitions for the SQL CSV Download API.

  POST /export/csv - Run a query and download its result as CSV

This module wires the exporter to HTTP without adding business logic.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from .schemas import (
    ExportRequest,
    HealthResponse,
    VersionResponse,
)

from src.export import Exporter

# Import config and utilities
from src.app import config as app_config
from src.app import exceptions as app_exceptions


# =============================================================================
# ROUTER
# =============================================================================

router = APIRouter()


# =============================================================================
# DEPENDENCIES
# =============================================================================

@lru_cache(maxsize=1)
def get_exporter() -> Exporter:
    """Exporter built from process configuration, created on first use."""
    return Exporter(
        app_config.get_database_config(),
        app_config.get_export_settings(),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/export/csv", response_class=StreamingResponse)
def export_csv(
    request: ExportRequest,
    exporter: Exporter = Depends(get_exporter)
) -> StreamingResponse:
    """
    Run the query and stream its result as a CSV attachment.

    Buffered mode finishes the query before responding, so failures still
    map to an error status. Streaming mode commits 200 immediately; later
    failures can only truncate the body.
    """
    try:
        prepared = exporter.prepare(request.query, request.filename, request.mode)
    except Exception as e:
        raise app_exceptions.get_http_exception(e)

    return StreamingResponse(
        prepared.body,
        headers=prepared.headers,
        background=BackgroundTask(prepared.cleanup),
    )


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok")


@router.get("/version", response_model=VersionResponse)
def get_version() -> VersionResponse:
    """Get API version."""
    return VersionResponse(version=app_config.VERSION, name=app_config.APP_NAME)
