"""
Application Exceptions
======================

Maps internal exceptions to HTTP status codes.
Only errors raised before response headers are committed reach here.
"""

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from src.export.errors import ExportError


logger = structlog.get_logger(__name__)


# =============================================================================
# EXCEPTION MAPPING
# =============================================================================

# Maps export exception class names to (status_code, user_message)
EXCEPTION_MAP = {
    "ValidationError": (400, "Query and filename must not be empty."),
    "MissingOutputError": (502, "The query produced no output file."),
    "PipelineTimeoutError": (504, "The query did not finish in time."),
    "TransferIOError": (500, "Failed to transfer CSV output."),
}


def get_http_exception(exc: Exception) -> HTTPException:
    """
    Convert an internal exception to an HTTPException.

    Args:
        exc: The caught exception.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    exc_name = type(exc).__name__

    if isinstance(exc, ExportError) and exc_name in EXCEPTION_MAP:
        status_code, user_message = EXCEPTION_MAP[exc_name]
        return HTTPException(
            status_code=status_code,
            detail={
                "status": "error",
                "message": user_message,
                "detail": str(exc)
            }
        )

    # Fallback for unknown exceptions
    return HTTPException(
        status_code=500,
        detail={
            "status": "error",
            "message": "Internal system error.",
            "detail": str(exc)
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for FastAPI.

    Catches all unhandled exceptions and returns structured error response.
    """
    exc_name = type(exc).__name__

    if isinstance(exc, ExportError) and exc_name in EXCEPTION_MAP:
        status_code, user_message = EXCEPTION_MAP[exc_name]
    else:
        status_code = 500
        user_message = "Internal system error."

    logger.error("unhandled_exception", path=request.url.path, error=exc_name)

    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "message": user_message,
            "detail": str(exc)
        }
    )
