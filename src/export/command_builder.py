"""
Command Builder
===============

Builds the export pipeline for a query: database client, CSV quoting,
and, in buffered mode, a reserved temp file for the output.

The client is always invoked with an argument vector. The query text and
each connection flag travel as single argv elements, so no shell ever sees
them. The password goes through the client environment instead.
"""

import os
import shlex
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import structlog

from .csv_transform import tsv_line_to_csv
from .errors import ValidationError
from .settings import DatabaseConfig, ExportMode, ExportSettings


logger = structlog.get_logger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

TEMP_PREFIX = "CSV"
TEMP_SUFFIX = ".csv"
PASSWORD_ENV = "MYSQL_PWD"


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class PipelineStage:
    """
    One step of the export pipeline.

    External stages carry an argv, plus extra environment for secrets, and
    run as a subprocess. Native stages carry a per-line byte transform
    applied in-process.
    """
    name: str
    argv: Optional[tuple[str, ...]] = None
    env: Optional[dict[str, str]] = field(default=None, repr=False, compare=False)
    transform: Optional[Callable[[bytes], bytes]] = None

    @property
    def is_external(self) -> bool:
        return self.argv is not None


@dataclass
class PipelineSpec:
    """Ordered stages plus where their combined output goes."""
    mode: ExportMode
    stages: list[PipelineStage] = field(default_factory=list)
    output_path: Optional[Path] = None
    merge_stderr: bool = False

    @property
    def command(self) -> PipelineStage:
        """The external stage that produces the rows."""
        return self.stages[0]

    @property
    def transforms(self) -> list[Callable[[bytes], bytes]]:
        return [stage.transform for stage in self.stages[1:] if stage.transform]

    def redacted(self) -> str:
        """Shell-quoted rendering of the client command, safe for logs."""
        return shlex.join(self.command.argv or ())


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def validate_query(query: str) -> None:
    """Reject empty queries before anything touches the system."""
    if not query:
        raise ValidationError("empty query")


def build_client_argv(
    query: str,
    db_config: DatabaseConfig,
    client_binary: str = "mysql"
) -> tuple[str, ...]:
    """
    Build the database client's argument vector.

    Args:
        query: SQL to execute, passed verbatim as one argument.
        db_config: Connection parameters.
        client_binary: Executable name or path of the client.

    Returns:
        The argv tuple, one element per flag.
    """
    argv = [
        client_binary,
        f"--host={db_config.host}",
        f"--user={db_config.user}",
        f"--database={db_config.database}",
    ]
    if db_config.port is not None:
        argv.append(f"--port={db_config.port}")
    argv.append(f"--execute={query}")
    return tuple(argv)


def build_client_env(db_config: DatabaseConfig) -> dict[str, str]:
    """Environment carrying the password, kept off argv and the process list."""
    return {PASSWORD_ENV: db_config.password}


def build_pipeline(
    query: str,
    mode: ExportMode,
    db_config: DatabaseConfig,
    settings: ExportSettings
) -> PipelineSpec:
    """
    Build the pipeline that turns a query into CSV bytes.

    In buffered mode this reserves a unique temp file and records it as
    the output target. In streaming mode client stderr is folded into the
    delivered stream so failures stay visible to the caller.

    Raises:
        ValidationError: If the query is empty. Nothing is created.
    """
    validate_query(query)
    mode = ExportMode(mode)

    spec = PipelineSpec(
        mode=mode,
        stages=[
            PipelineStage(
                name="query",
                argv=build_client_argv(query, db_config, settings.client_binary),
                env=build_client_env(db_config),
            ),
            PipelineStage(name="csv_quote", transform=tsv_line_to_csv),
        ],
    )

    if mode is ExportMode.BUFFERED:
        spec.output_path = reserve_temp_file(settings.temp_dir)
    else:
        spec.merge_stderr = True

    logger.debug(
        "pipeline_built",
        mode=mode.value,
        command=spec.redacted(),
        output_path=str(spec.output_path) if spec.output_path else None,
    )
    return spec


def reserve_temp_file(temp_dir: Optional[str] = None) -> Path:
    """Create an empty, uniquely named temp file and return its path."""
    fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=temp_dir)
    os.close(fd)
    return Path(path)
