"""
Stream Transfer
===============

Moves CSV bytes from their source (temp file or live pipeline output) to
the response sink in bounded chunks, and owns the temp file's lifetime.

Nothing here reads a whole result set into memory.
"""

import os
import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol

import structlog

from .errors import CleanupWarning, MissingOutputError, TransferIOError


logger = structlog.get_logger(__name__)


# =============================================================================
# SINK PROTOCOL
# =============================================================================

class ResponseSink(Protocol):
    """Anything that accepts headers once, then an ordered body."""

    def send_headers(self, headers: dict[str, str]) -> None:
        ...

    def write(self, chunk: bytes) -> None:
        ...


# =============================================================================
# TEMP RESOURCE
# =============================================================================

def remove_temp_file(path: Optional[Path]) -> bool:
    """
    Delete a temp file, tolerating its absence.

    A failed delete is reported as a CleanupWarning and never raised.

    Returns:
        True if the file is gone afterwards.
    """
    if path is None:
        return True
    try:
        os.unlink(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("temp_cleanup_failed", path=str(path), error=str(e))
        warnings.warn(f"Unable to delete temp file {path}: {e}", CleanupWarning, stacklevel=2)
        return False
    logger.debug("temp_removed", path=str(path))
    return True


@contextmanager
def temp_resource(path: Optional[Path], unlink: bool = True) -> Iterator[Optional[Path]]:
    """Scope a temp file so it is removed on every exit path."""
    try:
        yield path
    finally:
        if unlink:
            remove_temp_file(path)


# =============================================================================
# SOURCES
# =============================================================================

def ensure_output(path: Optional[Path]) -> int:
    """
    Check the buffered output exists and return its size in bytes.

    Raises:
        MissingOutputError: If the file is not there.
    """
    if path is None or not Path(path).is_file():
        raise MissingOutputError(f"Invalid file location : {path}")
    return Path(path).stat().st_size


def iter_file(path: Path, chunk_size: int = 8192) -> Iterator[bytes]:
    """
    Read a file sequentially in chunks.

    Raises:
        MissingOutputError: If the file does not exist.
        TransferIOError: If reading fails part-way.
    """
    try:
        handle = open(path, "rb")
    except FileNotFoundError as e:
        raise MissingOutputError(f"Invalid file location : {path}") from e

    with handle:
        while True:
            try:
                chunk = handle.read(chunk_size)
            except OSError as e:
                raise TransferIOError(f"Failed reading {path}: {e}") from e
            if not chunk:
                return
            yield chunk


def iter_buffered_body(
    path: Path,
    chunk_size: int = 8192,
    unlink: bool = True
) -> Iterator[bytes]:
    """Yield the temp file's bytes, then delete it however iteration ends."""
    with temp_resource(path, unlink=unlink):
        yield from iter_file(path, chunk_size)


# =============================================================================
# TRANSFER
# =============================================================================

def copy_to_sink(source: Iterator[bytes], sink: ResponseSink) -> int:
    """
    Copy every chunk from source to sink.

    The source is closed on every exit path, which runs its cleanup.

    Returns:
        Number of bytes written.

    Raises:
        TransferIOError: If the sink rejects a write.
    """
    written = 0
    try:
        for chunk in source:
            try:
                sink.write(chunk)
            except OSError as e:
                logger.warning("transfer_aborted", bytes_written=written, error=str(e))
                raise TransferIOError(f"Response sink failed after {written} bytes: {e}") from e
            written += len(chunk)
    finally:
        close = getattr(source, "close", None)
        if close is not None:
            close()
    return written
