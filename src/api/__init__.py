"""
API Module
==========

API routes and schemas.
"""

from .schemas import (
    ExportRequest,
    HealthResponse,
    VersionResponse,
    ErrorResponse,
)

__all__ = [
    "ExportRequest",
    "HealthResponse",
    "VersionResponse",
    "ErrorResponse",
]
