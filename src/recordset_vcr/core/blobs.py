"""Content blob storage for response bodies.

Bodies are written next to the manifest as ``<md5>.<ext>``. Identical bodies
with the same content type map to the same file, so a recordset holding many
copies of one asset stores it once.
"""

from __future__ import annotations

import hashlib
import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

UNKNOWN_EXTENSION = "unknown"

# Content types the standard table does not know about.
MANUAL_EXTENSIONS: dict[str, str] = {
    "application/x-font-ttf": "ttf",
}


def resolve_extension(content_type: Optional[str]) -> str:
    """Map a Content-Type value to a file extension (without the dot).

    Parameters such as ``charset`` are ignored. Unmapped types resolve to
    ``"unknown"``.

    Args:
        content_type: Content-Type header value, may be None

    Returns:
        File extension
    """
    if not content_type:
        return UNKNOWN_EXTENSION

    mime_type = content_type.split(";", 1)[0].strip().lower()
    if not mime_type:
        return UNKNOWN_EXTENSION

    ext = mimetypes.guess_extension(mime_type)
    if ext:
        return ext.lstrip(".")

    return MANUAL_EXTENSIONS.get(mime_type, UNKNOWN_EXTENSION)


def _as_bytes(body: Any) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    raise TypeError(f"Cannot store body of type {type(body).__name__}")


class BlobStore:
    """Deduplicated storage of body payloads inside recordset folders."""

    @staticmethod
    def content_stem(body: Any, ordinal: int) -> str:
        """Compute the filename stem for a body.

        Text is hashed as its UTF-8 encoding. Falls back to the exchange
        position when the body has no byte representation.

        Args:
            body: Body payload
            ordinal: Position of the exchange in its recordset

        Returns:
            Hex MD5 digest of the body, or the ordinal as a string
        """
        try:
            return hashlib.md5(_as_bytes(body)).hexdigest()
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot hash body of exchange {ordinal} ({e}), using positional name")
            return str(ordinal)

    def store(
        self,
        folder: Path,
        body: Any,
        content_type: Optional[str],
        ordinal: int,
    ) -> str:
        """Persist a body as a blob and return its filename.

        Filenames are derived from the content, so an existing file already
        holds these bytes and is not written again.

        Args:
            folder: Recordset folder
            body: Body payload (bytes, or text written as UTF-8)
            content_type: Content-Type of the response, used for the extension
            ordinal: Position of the exchange in its recordset

        Returns:
            Blob filename relative to ``folder``

        Raises:
            OSError: If the blob cannot be written
            TypeError: If the body has no byte representation
        """
        data = _as_bytes(body)
        filename = f"{self.content_stem(data, ordinal)}.{resolve_extension(content_type)}"
        path = Path(folder) / filename
        if path.exists():
            logger.debug(f"Blob {filename} already stored")
            return filename

        path.write_bytes(data)
        logger.debug(f"Stored blob {filename}")
        return filename

    def load(self, folder: Path, filename: str) -> bytes:
        """Read a blob.

        Raises:
            OSError: If the blob is missing or unreadable
        """
        return (Path(folder) / filename).read_bytes()


__all__ = ["BlobStore", "resolve_extension", "MANUAL_EXTENSIONS", "UNKNOWN_EXTENSION"]
