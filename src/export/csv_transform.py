"""
CSV Transform
=============

Converts tab-separated client output into double-quoted CSV rows.

The rule is applied to each line, in order:
  1. double every literal quote character
  2. replace every tab with ","
  3. prefix the line with a quote
  4. suffix the line with a quote

Line terminators are kept as they were. Field values containing raw
newlines are split across rows; the client is trusted not to emit them.
"""

from typing import Iterable, Iterator


# =============================================================================
# CONSTANTS
# =============================================================================

QUOTE = b'"'
ESCAPED_QUOTE = b'""'
TAB = b"\t"
SEPARATOR = b'","'


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def tsv_line_to_csv(line: bytes) -> bytes:
    """
    Quote a single tab-separated line as a CSV row.

    Args:
        line: One line of client output, with or without its terminator.

    Returns:
        The quoted row, terminated the same way as the input.
    """
    body, ending = _split_ending(line)
    body = body.replace(QUOTE, ESCAPED_QUOTE).replace(TAB, SEPARATOR)
    return QUOTE + body + QUOTE + ending


def transform_lines(lines: Iterable[bytes]) -> Iterator[bytes]:
    """Apply tsv_line_to_csv lazily to every line of a stream."""
    for line in lines:
        yield tsv_line_to_csv(line)


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _split_ending(line: bytes) -> tuple[bytes, bytes]:
    """Separate the line terminator so quoting wraps only the content."""
    if line.endswith(b"\r\n"):
        return line[:-2], b"\r\n"
    if line.endswith(b"\n"):
        return line[:-1], b"\n"
    return line, b""
