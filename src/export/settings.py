"""
Export Settings
===============

Configuration structs injected into the exporter.
"""

import tempfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# =============================================================================
# DELIVERY MODE
# =============================================================================

class ExportMode(str, Enum):
    """How CSV bytes reach the client."""

    # Materialize to a temp file first, then send with a Content-length.
    BUFFERED = "buffered"

    # Pipe client output straight to the response, size unknown up front.
    STREAMING = "streaming"


# =============================================================================
# CONFIGURATION STRUCTS
# =============================================================================

@dataclass(frozen=True)
class DatabaseConfig:
    """Connection parameters handed to the database client."""
    host: str
    user: str
    password: str = field(repr=False)
    database: str
    port: Optional[int] = None


@dataclass(frozen=True)
class ExportSettings:
    """Tunables for the export pipeline."""
    client_binary: str = "mysql"
    temp_dir: str = field(default_factory=tempfile.gettempdir)
    chunk_size: int = 8192
    timeout: Optional[float] = 300.0
    unlink: bool = True
    default_mode: ExportMode = ExportMode.BUFFERED
