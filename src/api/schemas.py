"""
API Request/Response Schemas
============================

Pydantic models for API request and response validation.
"""

from typing import Optional
from pydantic import BaseModel, Field

from src.export.settings import ExportMode


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ExportRequest(BaseModel):
    """Request body for POST /export/csv endpoint."""

    query: str = Field(
        ...,
        description="SQL query whose result is downloaded as CSV"
    )
    filename: str = Field(
        ...,
        description="Name the client saves the download under"
    )
    mode: Optional[ExportMode] = Field(
        default=None,
        description="buffered (sends Content-length) or streaming; server default if omitted"
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    status: str = "ok"


class VersionResponse(BaseModel):
    """Response for GET /version endpoint."""

    version: str
    name: str = "SQL CSV Download"


class ErrorResponse(BaseModel):
    """Standard error response."""

    status: str = "error"
    message: str
    detail: Optional[str] = None
