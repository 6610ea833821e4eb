"""
App Module
==========

FastAPI application initialization.
"""

from .config import (
    VERSION,
    APP_NAME,
    get_database_config,
    get_export_settings,
)
from .exceptions import get_http_exception, global_exception_handler
from .logging_config import configure_logging, set_request_id

__all__ = [
    "VERSION",
    "APP_NAME",
    "get_database_config",
    "get_export_settings",
    "get_http_exception",
    "global_exception_handler",
    "configure_logging",
    "set_request_id",
]
