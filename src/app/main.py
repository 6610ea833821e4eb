"""
FastAPI Application Entry Point
================================

Main application initialization and wiring.
Run with: uvicorn src.app.main:app --reload
"""

# Load environment variables FIRST, before any other imports
from dotenv import load_dotenv
load_dotenv()

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import router
from src.app.config import VERSION, APP_NAME
from src.app.exceptions import global_exception_handler
from src.app.logging_config import configure_logging, set_request_id


configure_logging()


# =============================================================================
# APP INITIALIZATION
# =============================================================================

app = FastAPI(
    title=APP_NAME,
    description="Memory-safe CSV downloads of SQL query results",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "Content-length"],
)


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Tag every log event of a request with the same id."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

app.add_exception_handler(Exception, global_exception_handler)


# =============================================================================
# ROUTES
# =============================================================================

app.include_router(router, tags=["Export"])


# =============================================================================
# ROOT
# =============================================================================

@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "export": "POST /export/csv"
        }
    }
