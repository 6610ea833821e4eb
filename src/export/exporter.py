"""
CSV Exporter
============

Runs a SQL query through the database client and delivers the result as
a CSV download without holding the result set in memory.

Flow per request:
  validate -> build pipeline -> headers -> run -> transfer -> clean up

Buffered mode runs the client to completion into a temp file first, so
the body size is known and sent as Content-length. Streaming mode sends
headers straight away and relays client output as it is produced.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

import structlog

from .command_builder import build_pipeline, validate_query
from .headers import build_headers, validate_filename
from .pipeline_runner import open_stream, run_buffered
from .settings import DatabaseConfig, ExportMode, ExportSettings
from .stream_transfer import (
    ResponseSink,
    copy_to_sink,
    ensure_output,
    iter_buffered_body,
    remove_temp_file,
)


logger = structlog.get_logger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass
class PreparedExport:
    """Headers and a single-pass body, ready to hand to a response."""
    mode: ExportMode
    headers: dict[str, str]
    body: Iterator[bytes]
    temp_path: Optional[Path] = None
    unlink: bool = True

    def cleanup(self) -> None:
        """Release the body and its temp file. Safe to call repeatedly."""
        close = getattr(self.body, "close", None)
        if close is not None:
            close()
        if self.unlink:
            remove_temp_file(self.temp_path)


# =============================================================================
# EXPORTER
# =============================================================================

class Exporter:
    """
    Exports query results as CSV.

    Args:
        db_config: Connection parameters for the database client.
        settings: Pipeline tunables. Defaults to ExportSettings().
        unlink: Delete the buffered temp file after transfer. Overrides
            settings.unlink when given.
    """

    def __init__(
        self,
        db_config: DatabaseConfig,
        settings: Optional[ExportSettings] = None,
        unlink: Optional[bool] = None
    ):
        self.db_config = db_config
        self.settings = settings or ExportSettings()
        self.unlink = self.settings.unlink if unlink is None else unlink

    def prepare(
        self,
        query: str,
        filename: str,
        mode: Union[ExportMode, str, None] = None
    ) -> PreparedExport:
        """
        Validate, build and (in buffered mode) run the pipeline.

        Everything that can still fail with a clean error happens here,
        before any header is committed.

        Raises:
            ValidationError: Empty query or filename. No side effects.
            PipelineTimeoutError: Buffered client exceeded the deadline.
            MissingOutputError: Buffered output file is absent.
        """
        mode = ExportMode(mode or self.settings.default_mode)
        validate_query(query)
        validate_filename(filename)

        log = logger.bind(mode=mode.value, filename=filename)
        spec = build_pipeline(query, mode, self.db_config, self.settings)

        if mode is ExportMode.STREAMING:
            log.info("export_streaming_started")
            return PreparedExport(
                mode=mode,
                headers=build_headers(filename, mode),
                body=open_stream(spec, self.settings.timeout, self.settings.chunk_size),
            )

        try:
            run_buffered(spec, timeout=self.settings.timeout)
            size = ensure_output(spec.output_path)
        except Exception:
            if self.unlink:
                remove_temp_file(spec.output_path)
            raise

        log.info("export_buffered_ready", size=size)
        return PreparedExport(
            mode=mode,
            headers=build_headers(filename, mode, content_length=size),
            body=iter_buffered_body(spec.output_path, self.settings.chunk_size, self.unlink),
            temp_path=spec.output_path,
            unlink=self.unlink,
        )

    def export(
        self,
        query: str,
        filename: str,
        mode: Union[ExportMode, str, None],
        sink: ResponseSink
    ) -> None:
        """
        Deliver the query result to sink as a CSV download.

        Headers go out exactly once, before the first body byte. Errors
        after that point leave a truncated body.

        Raises:
            ValidationError: Empty query or filename.
            MissingOutputError: Buffered output file is absent.
            PipelineTimeoutError: Buffered client exceeded the deadline.
            TransferIOError: Source or sink failed mid-copy.
        """
        prepared = self.prepare(query, filename, mode)
        try:
            sink.send_headers(prepared.headers)
            written = copy_to_sink(prepared.body, sink)
        finally:
            prepared.cleanup()

        logger.info("export_complete", mode=prepared.mode.value, bytes_written=written)
