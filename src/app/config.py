"""
Application Configuration
=========================

Central configuration for the API.
Values come from the environment (a .env file is loaded by main.py).
"""

import os
import tempfile
from typing import Optional

from src.export.settings import DatabaseConfig, ExportMode, ExportSettings


# =============================================================================
# VERSION
# =============================================================================

VERSION = "1.0.0"
APP_NAME = "SQL CSV Download"


# =============================================================================
# HELPERS
# =============================================================================

def _env_int(key: str) -> Optional[int]:
    value = os.environ.get(key, "").strip()
    return int(value) if value else None


def _env_bool(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# DATABASE
# =============================================================================

def get_database_config() -> DatabaseConfig:
    """
    Read database connection parameters from the environment.

    Returns:
        DatabaseConfig for the database client.
    """
    return DatabaseConfig(
        host=os.environ.get("CSV_DB_HOST", "127.0.0.1"),
        user=os.environ.get("CSV_DB_USER", "root"),
        password=os.environ.get("CSV_DB_PASSWORD", ""),
        database=os.environ.get("CSV_DB_NAME", ""),
        port=_env_int("CSV_DB_PORT"),
    )


# =============================================================================
# EXPORT PIPELINE
# =============================================================================

def get_export_settings() -> ExportSettings:
    """Read export pipeline tunables from the environment."""
    # 0 disables the deadline
    timeout = float(os.environ.get("EXPORT_TIMEOUT_SECONDS", "300"))

    return ExportSettings(
        client_binary=os.environ.get("CSV_CLIENT_BINARY", "mysql"),
        temp_dir=os.environ.get("CSV_TEMP_DIR") or tempfile.gettempdir(),
        chunk_size=int(os.environ.get("CSV_CHUNK_SIZE", "8192")),
        timeout=timeout or None,
        unlink=_env_bool("CSV_UNLINK", True),
        default_mode=ExportMode(os.environ.get("CSV_DEFAULT_MODE", ExportMode.BUFFERED.value)),
    )
