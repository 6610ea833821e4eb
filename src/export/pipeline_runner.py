"""
Pipeline Runner
===============

Executes a PipelineSpec: spawns the database client, pushes its stdout
through the native stages and either fills the temp file (buffered) or
hands the bytes out as they arrive (streaming).

The client's exit status is not turned into an exception. A failed or
missing client shows up as empty output here, or inline in the stream
when stderr is merged.
"""

import os
import subprocess
import tempfile
import threading
from contextlib import suppress
from typing import Callable, Iterator, Optional

import structlog

from .command_builder import PipelineSpec
from .errors import PipelineTimeoutError


logger = structlog.get_logger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_CHUNK_SIZE = 8192


# =============================================================================
# WATCHDOG
# =============================================================================

class _Watchdog:
    """
    Kills the client process once it has kept us waiting past the deadline.

    The clock only runs while armed. Streaming disarms it while a batch is
    with the consumer, so a slow reader never counts against the client.
    """

    def __init__(self, process: subprocess.Popen, timeout: Optional[float]):
        self.expired = False
        self._process = process
        self._timeout = timeout
        self._timer = None

    def arm(self) -> None:
        self.cancel()
        if self._timeout:
            self._timer = threading.Timer(self._timeout, self._expire)
            self._timer.daemon = True
            self._timer.start()

    def _expire(self) -> None:
        self.expired = True
        with suppress(OSError):
            self._process.kill()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def run_buffered(spec: PipelineSpec, timeout: Optional[float] = None) -> None:
    """
    Run the pipeline to completion, writing CSV into spec.output_path.

    Blocks until the client exits. Client stderr is kept out of the CSV
    and logged instead.

    Raises:
        PipelineTimeoutError: If the client was killed at the deadline.
    """
    if spec.output_path is None:
        raise ValueError("buffered pipeline has no output path")

    with tempfile.TemporaryFile() as stderr_sink:
        process = _spawn(spec, stderr=stderr_sink)
        if process is None:
            return

        watchdog = _Watchdog(process, timeout)
        watchdog.arm()
        try:
            with process.stdout, open(spec.output_path, "wb") as out:
                for line in process.stdout:
                    out.write(_apply(spec.transforms, line))
            returncode = process.wait()
        finally:
            watchdog.cancel()
            _reap(process)

        stderr_sink.seek(0)
        stderr_text = stderr_sink.read().decode("utf-8", errors="replace").strip()

    if watchdog.expired:
        logger.error("client_timeout", timeout=timeout, output_path=str(spec.output_path))
        raise PipelineTimeoutError(f"Database client exceeded {timeout}s and was killed.")

    if returncode != 0 or stderr_text:
        logger.warning(
            "client_reported_errors",
            returncode=returncode,
            stderr=stderr_text,
        )


def open_stream(
    spec: PipelineSpec,
    timeout: Optional[float] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[bytes]:
    """
    Start the pipeline and yield its CSV output as it is produced.

    The client starts on the first pull. Output is handed out in batches
    of at most roughly chunk_size bytes. The iterator is single-pass;
    closing it early kills a client that is still running.

    timeout bounds each wait on the client for its next batch. Time a batch
    spends with the consumer is not counted.
    """
    process = _spawn(
        spec,
        stderr=subprocess.STDOUT if spec.merge_stderr else subprocess.DEVNULL,
    )
    if process is None:
        return

    watchdog = _Watchdog(process, timeout)
    watchdog.arm()
    try:
        buffer = bytearray()
        for line in process.stdout:
            buffer += _apply(spec.transforms, line)
            if len(buffer) >= chunk_size:
                watchdog.cancel()
                yield bytes(buffer)
                buffer.clear()
                watchdog.arm()
        watchdog.cancel()
        if buffer:
            yield bytes(buffer)

        returncode = process.wait()
        if returncode != 0:
            logger.warning("client_exit_nonzero", returncode=returncode)
    finally:
        watchdog.cancel()
        _reap(process)
        process.stdout.close()
        if watchdog.expired:
            logger.error("client_timeout", timeout=timeout, mode=spec.mode.value)


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _spawn(spec: PipelineSpec, stderr) -> Optional[subprocess.Popen]:
    """Start the external stage; log and give up if it cannot start."""
    argv = list(spec.command.argv or ())
    env = {**os.environ, **spec.command.env} if spec.command.env else None
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=stderr,
            env=env,
        )
    except OSError as e:
        logger.error("client_spawn_failed", binary=argv[0] if argv else None, error=str(e))
        return None


def _apply(transforms: list[Callable[[bytes], bytes]], line: bytes) -> bytes:
    for transform in transforms:
        line = transform(line)
    return line


def _reap(process: subprocess.Popen) -> None:
    """Make sure the client is gone before returning."""
    if process.poll() is None:
        with suppress(OSError):
            process.kill()
    process.wait()
