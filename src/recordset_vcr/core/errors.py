"""Exceptions raised by the recordset persistence layer."""

from __future__ import annotations

from typing import Optional


class RecordsetError(Exception):
    """Base class for all recordset errors."""


class RecordsetNotFoundError(RecordsetError, FileNotFoundError):
    """No manifest exists on storage for the requested recordset."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Recordset '{name}' not found")


class MalformedManifestError(RecordsetError, ValueError):
    """A manifest exists but cannot be decoded."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid manifest for recordset '{name}': {reason}")


class LoadAllError(RecordsetError):
    """Loading every recordset under the storage root was aborted.

    Attributes:
        failed: Name of the recordset whose load failed (None when the
            storage root itself could not be scanned)
        loaded: Names successfully loaded before the failure. They stay cached.
    """

    def __init__(
        self,
        failed: Optional[str],
        loaded: list[str],
        cause: BaseException,
    ) -> None:
        self.failed = failed
        self.loaded = loaded
        self.cause = cause
        where = f"recordset '{failed}'" if failed else "storage root"
        super().__init__(f"Failed to load all recordsets ({where}): {cause}")


__all__ = [
    "RecordsetError",
    "RecordsetNotFoundError",
    "MalformedManifestError",
    "LoadAllError",
]
