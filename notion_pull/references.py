"""
Module for turning user-supplied Notion references into canonical UUIDs.

Accepted formats:
    - raw 32-char hex:            ``abc123def456...``
    - dashed UUID:                ``abc123de-f456-...``
    - Notion page URL:            ``https://www.notion.so/workspace/Page-Title-abc123...``
    - Notion database view URL:   ``https://www.notion.so/workspace/abc123...?v=...``
"""

import re
from urllib.parse import urlparse
from .exceptions import InvalidReferenceError

UUID_BARE = re.compile(r"^[0-9a-f]{32}$", re.IGNORECASE)
UUID_DASHED = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
TRAILING_BARE = re.compile(r"([0-9a-f]{32})$", re.IGNORECASE)
TRAILING_DASHED = re.compile(
    r"([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$", re.IGNORECASE
)


def to_dashed_uuid(hex_id: str) -> str:
    """Insert dashes into a bare 32-char hex string (8-4-4-4-12)."""
    hex_id = hex_id.lower()
    return "-".join(
        (hex_id[0:8], hex_id[8:12], hex_id[12:16], hex_id[16:20], hex_id[20:32])
    )


def extract_id_from_path(path: str):
    """Return the trailing 32-hex ID of the last path segment, or None."""
    clean = path.split("?")[0].split("#")[0]
    segments = [segment for segment in clean.split("/") if segment]
    if not segments:
        return None

    last = segments[-1]
    match = TRAILING_BARE.search(last)
    if match:
        return match.group(1)

    match = TRAILING_DASHED.search(last)
    if match:
        return match.group(1).replace("-", "")
    return None


def normalize_reference(value: str) -> str:
    """
    Parse any supported Notion reference into a dashed, lower-case UUID.

    Args:
        value: bare ID, dashed UUID, or Notion URL

    Returns:
        str: canonical 36-char UUID

    Raises:
        InvalidReferenceError: If the input matches none of the accepted shapes
    """
    if not isinstance(value, str):
        raise InvalidReferenceError(value)
    trimmed = value.strip()

    if UUID_BARE.match(trimmed):
        return to_dashed_uuid(trimmed)

    if UUID_DASHED.match(trimmed):
        return trimmed.lower()

    if trimmed.startswith(("http://", "https://")):
        try:
            url = urlparse(trimmed)
            hostname = url.hostname or ""
        except ValueError as e:
            raise InvalidReferenceError(trimmed, "Invalid URL") from e

        if "notion" not in hostname:
            raise InvalidReferenceError(trimmed, "Not a Notion URL")

        hex_id = extract_id_from_path(url.path)
        if not hex_id:
            raise InvalidReferenceError(trimmed, "Could not extract a Notion ID from URL")
        return to_dashed_uuid(hex_id)

    raise InvalidReferenceError(trimmed)
