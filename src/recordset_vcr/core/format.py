"""Recordset format: Pydantic models for recordset manifests.

A recordset folder holds a ``config.json`` manifest with:
- Recordset-wide plugin configuration (``general``)
- The captured request/response exchanges in replay order (``requests``)
- Per-exchange plugin configuration that differs from the defaults

Response bodies are usually stored out-of-line as content blobs next to the
manifest and referenced through ``res.file``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_body(value: Any) -> Any:
    """Turn the on-disk representations of a body into bytes.

    Accepts plain text, a list of byte values and the ``{"type": "Buffer",
    "data": [...]}`` object older manifests contain. Anything else is
    returned unchanged for pydantic to validate.

    Raises:
        ValueError: If a byte list holds anything but integers in 0-255
    """
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, dict) and value.get("type") == "Buffer":
        value = value.get("data", [])
        if not isinstance(value, list):
            raise ValueError("Buffer data must be a list of byte values")
    if isinstance(value, list):
        try:
            return bytes(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid byte values: {e}") from e
    return value


class RecordedRequest(BaseModel):
    """Request side of a captured exchange."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    method: str = "GET"
    url: str = "/"
    headers: Dict[str, Any] = Field(default_factory=dict)
    raw_body: Optional[bytes] = Field(None, alias="rawBody")

    @field_validator("raw_body", mode="before")
    @classmethod
    def validate_raw_body(cls, v: Any) -> Any:
        return coerce_body(v)


class RecordedResponse(BaseModel):
    """Response side of a captured exchange.

    ``body`` holds the bytes in memory. ``file`` names the content blob the
    body was persisted to; a response with neither is an empty body.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: int = 200
    headers: Dict[str, Any] = Field(default_factory=dict)
    body: Optional[bytes] = None
    file: Optional[str] = None

    @field_validator("body", mode="before")
    @classmethod
    def validate_body(cls, v: Any) -> Any:
        return coerce_body(v)

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type header value, looked up case-insensitively."""
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                if isinstance(value, list):
                    return value[0] if value else None
                return value
        return None


class Exchange(BaseModel):
    """One captured request/response pair of a recordset."""

    model_config = ConfigDict(populate_by_name=True)

    request: RecordedRequest = Field(alias="req", description="Captured request")
    response: RecordedResponse = Field(alias="res", description="Captured response")
    overrides: Optional[Dict[str, Any]] = Field(
        None,
        alias="general",
        description="Plugin configuration for this exchange that differs from the defaults",
    )


class Recordset(BaseModel):
    """A named, ordered collection of exchanges plus default plugin configuration."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(exclude=True, description="Recordset name (its storage folder name)")
    defaults: Dict[str, Any] = Field(
        default_factory=dict,
        alias="general",
        description="Recordset-wide plugin configuration",
    )
    exchanges: List[Exchange] = Field(
        default_factory=list,
        alias="requests",
        description="Exchanges in replay order",
    )

    @property
    def exchange_count(self) -> int:
        """Get the number of exchanges in the recordset.

        Returns:
            Number of exchanges
        """
        return len(self.exchanges)


__all__ = [
    "RecordedRequest",
    "RecordedResponse",
    "Exchange",
    "Recordset",
    "coerce_body",
]
