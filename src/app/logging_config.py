"""
Logging Configuration
=====================

structlog setup shared by the API and the export pipeline.
Events are rendered as JSON on stdout, tagged with the current request id.
"""

import logging
import os
import sys
from contextvars import ContextVar
from typing import Any

import structlog


_CONFIGURED = False
_REQUEST_ID: ContextVar[str] = ContextVar("request_id", default="-")


# =============================================================================
# REQUEST CONTEXT
# =============================================================================

def set_request_id(request_id: str) -> None:
    """Bind a request id for log events emitted in the current context."""
    _REQUEST_ID.set(request_id)


def _add_request_id(_: logging.Logger, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("request_id", _REQUEST_ID.get())
    return event_dict


# =============================================================================
# SETUP
# =============================================================================

def _get_log_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging() -> None:
    """Configure structlog and stdlib logging once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = _get_log_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(sort_keys=True)
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_request_id,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
