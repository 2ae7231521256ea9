"""
Replace the ohmycert-managed region of the proxy TLS config.

The region is bounded by two marker lines, usually inside YAML comments:

    tls:
      certificates:
    #>>>>>ohmycert-start<<<<<<
        - certFile: /etc/traefik/ssl/example.crt # example
          keyFile: /etc/traefik/ssl/example.key
    #>>>>>ohmycert-end<<<<<<

Only the lines strictly between the marker lines are rewritten.
"""

import logging

from ..common.errors import PatchStructureFailure, WriteFailure
from ..common.file_utils import atomic_write

logger = logging.getLogger(__name__)

START_MARKER = '>>>>>ohmycert-start<<<<<<'
END_MARKER = '>>>>>ohmycert-end<<<<<<'


def find_region(text):
    """Return (start, end) offsets of the text between the marker lines"""
    start_count = text.count(START_MARKER)
    end_count = text.count(END_MARKER)
    if start_count != 1 or end_count != 1:
        raise PatchStructureFailure(
            f"Expected exactly one start and one end marker, "
            f"found {start_count} start and {end_count} end"
        )

    start_idx = text.index(START_MARKER)
    end_idx = text.index(END_MARKER)
    if end_idx < start_idx:
        raise PatchStructureFailure("End marker appears before start marker")

    newline_idx = text.find('\n', start_idx)
    if newline_idx == -1 or newline_idx > end_idx:
        raise PatchStructureFailure("Start and end markers must be on separate lines")

    interior_start = newline_idx + 1
    interior_end = text.rfind('\n', 0, end_idx) + 1
    return interior_start, interior_end


def replace_region(text, fragment):
    """Return text with the marker region's interior replaced by fragment"""
    start, end = find_region(text)
    if fragment and not fragment.endswith('\n'):
        fragment += '\n'
    # Follow the line ending of the start marker line
    if text[start - 2:start] == '\r\n':
        fragment = fragment.replace('\r\n', '\n').replace('\n', '\r\n')
    return text[:start] + fragment + text[end:]


def patch(path, fragment):
    """Rewrite the marker region of the file at path.

    Returns True if the file was written, False if it already held fragment.
    Raises PatchStructureFailure (file untouched) for a missing file or a
    missing/duplicate/misordered marker pair.
    """
    try:
        # newline='' keeps \r\n intact
        with open(path, 'r', encoding='utf-8', newline='') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PatchStructureFailure(f"Could not read TLS config {path}: {e}")

    try:
        updated = replace_region(content, fragment)
    except PatchStructureFailure as e:
        raise PatchStructureFailure(f"{path}: {e}")

    if updated == content:
        logger.debug(f"{path} already has the current certificate list")
        return False

    try:
        atomic_write(path, updated.encode('utf-8'))
    except OSError as e:
        raise WriteFailure(f"Could not write TLS config {path}: {e}")
    return True
