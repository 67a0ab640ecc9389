"""Manifest codec: reads and writes ``config.json`` for a recordset."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from recordset_vcr.core.errors import MalformedManifestError
from recordset_vcr.core.format import Exchange, Recordset

MANIFEST_NAME = "config.json"


def _text(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    return value.decode("utf-8", errors="replace")


class RecordsetCodec:
    """Convert recordsets to and from their JSON manifest.

    Raw request bodies and inline response bodies are stored as text.
    Fields that are unset (no overlay, no blob reference, no inline body) are
    left out of the manifest.
    """

    def __init__(self, indent: Optional[int] = 2) -> None:
        self.indent = indent

    def encode_exchange(self, exchange: Exchange) -> dict[str, Any]:
        """Build the manifest entry for one exchange."""
        data = exchange.model_dump(by_alias=True)

        req = data["req"]
        if req.get("rawBody"):
            req["rawBody"] = _text(req["rawBody"])
        else:
            req.pop("rawBody", None)

        res = data["res"]
        for key in ("file", "body"):
            if res.get(key) is None:
                res.pop(key, None)
        if "body" in res:
            res["body"] = _text(res["body"])

        if not data.get("general"):
            data.pop("general", None)
        return data

    def encode(self, recordset: Recordset) -> dict[str, Any]:
        """Build the manifest for a recordset.

        Args:
            recordset: Recordset to encode (exchanges are not modified)

        Returns:
            JSON-serializable manifest dict
        """
        return {
            "general": recordset.model_dump(by_alias=True, include={"defaults"})["general"],
            "requests": [self.encode_exchange(e) for e in recordset.exchanges],
        }

    def decode(self, name: str, data: Any) -> Recordset:
        """Build a recordset from a manifest dict.

        Args:
            name: Recordset name
            data: Parsed manifest

        Returns:
            Recordset instance

        Raises:
            MalformedManifestError: If the manifest does not match the format
        """
        if not isinstance(data, dict):
            raise MalformedManifestError(name, "manifest must be a JSON object")
        try:
            return Recordset.model_validate(
                {
                    "name": name,
                    "general": data.get("general") or {},
                    "requests": data.get("requests") or [],
                }
            )
        except ValidationError as e:
            raise MalformedManifestError(name, str(e)) from e

    def dumps(self, recordset: Recordset) -> str:
        """Serialize a recordset to a JSON string."""
        return json.dumps(self.encode(recordset), indent=self.indent, default=str)

    def loads(self, name: str, json_str: str) -> Recordset:
        """Parse a recordset from a JSON string.

        Raises:
            MalformedManifestError: If the JSON is invalid or doesn't match the format
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise MalformedManifestError(name, f"invalid JSON: {e}") from e
        return self.decode(name, data)

    def read(self, name: str, path: Path) -> Recordset:
        """Load a recordset from its manifest file.

        Raises:
            OSError: If the file cannot be read
            MalformedManifestError: If the file contains invalid data
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise MalformedManifestError(name, f"not valid UTF-8: {e}") from e
        return self.loads(name, content)

    def write(self, recordset: Recordset, path: Path) -> None:
        """Write a recordset manifest.

        The manifest goes to a temporary file first and is then renamed over
        the target, so readers never see a partial manifest.

        Raises:
            OSError: If the file cannot be written
        """
        path = Path(path)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(self.dumps(recordset), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


__all__ = ["RecordsetCodec", "MANIFEST_NAME"]
