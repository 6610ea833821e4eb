"""
Header Emitter
==============

Response headers for a CSV download. Buffered mode advertises the exact
byte size; streaming mode cannot know it up front and omits it.
"""

from typing import Optional

from .errors import ValidationError
from .settings import ExportMode


# =============================================================================
# CONSTANTS
# =============================================================================

CONTENT_TYPE = "text/csv"


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def validate_filename(filename: str) -> None:
    """Reject an empty download filename."""
    if not filename:
        raise ValidationError("empty CSV filename")


def build_headers(
    filename: str,
    mode: ExportMode,
    content_length: Optional[int] = None
) -> dict[str, str]:
    """
    Build the headers sent ahead of the CSV body.

    The filename is inserted as given; callers own its safety.

    Args:
        filename: Name the client saves the download under.
        mode: Delivery mode of this export.
        content_length: Byte size of the body. Required in buffered mode,
            ignored in streaming mode.

    Returns:
        Header name -> value, in emission order.

    Raises:
        ValidationError: If the filename is empty.
        ValueError: If buffered mode is missing its content length.
    """
    validate_filename(filename)

    headers = {
        "Content-type": CONTENT_TYPE,
        "Content-Disposition": f"attachment; filename={filename}",
        "Pragma": "no-cache",
        "Expires": "0",
    }

    if ExportMode(mode) is ExportMode.BUFFERED:
        if content_length is None:
            raise ValueError("buffered export requires a content length")
        headers["Content-length"] = str(content_length)

    return headers
