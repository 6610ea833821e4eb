"""
Export Errors
=============

Exception taxonomy for the CSV export pipeline.

Errors raised before response headers are committed can still be turned
into an error response. Anything raised afterwards can only show up as a
truncated body.
"""


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ExportError(Exception):
    """Base class for all export failures."""
    pass


class ValidationError(ExportError):
    """Raised when the query or target filename is empty."""
    pass


class MissingOutputError(ExportError):
    """Raised when the buffered output file is absent at transfer time."""
    pass


class PipelineTimeoutError(ExportError):
    """Raised when the database client exceeds the configured deadline."""
    pass


class TransferIOError(ExportError):
    """Raised when the source or the sink fails mid-copy."""
    pass


# =============================================================================
# WARNINGS
# =============================================================================

class CleanupWarning(UserWarning):
    """Emitted when a temporary output file could not be deleted."""
    pass
