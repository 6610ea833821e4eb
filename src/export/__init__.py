"""
Export Module
=============

Query-to-CSV download pipeline.

The database client runs as a subprocess, its rows are CSV-quoted
in-process, and the bytes are streamed to the response either from a
temp file (buffered) or straight from the client (streaming).
"""

from .settings import (
    ExportMode,
    DatabaseConfig,
    ExportSettings,
)

from .errors import (
    ExportError,
    ValidationError,
    MissingOutputError,
    PipelineTimeoutError,
    TransferIOError,
    CleanupWarning,
)

from .csv_transform import (
    tsv_line_to_csv,
    transform_lines,
)

from .command_builder import (
    build_pipeline,
    build_client_argv,
    PipelineSpec,
    PipelineStage,
)

from .headers import build_headers

from .pipeline_runner import (
    run_buffered,
    open_stream,
)

from .stream_transfer import (
    ResponseSink,
    copy_to_sink,
    temp_resource,
)

from .exporter import (
    Exporter,
    PreparedExport,
)

__all__ = [
    # Primary API
    "Exporter",
    "PreparedExport",
    "ExportMode",

    # Configuration
    "DatabaseConfig",
    "ExportSettings",

    # Pipeline pieces
    "tsv_line_to_csv",
    "transform_lines",
    "build_pipeline",
    "build_client_argv",
    "PipelineSpec",
    "PipelineStage",
    "build_headers",
    "run_buffered",
    "open_stream",
    "ResponseSink",
    "copy_to_sink",
    "temp_resource",

    # Exceptions
    "ExportError",
    "ValidationError",
    "MissingOutputError",
    "PipelineTimeoutError",
    "TransferIOError",
    "CleanupWarning",
]
