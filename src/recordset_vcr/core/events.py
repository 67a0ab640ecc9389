"""Notifications published by the recordset store."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from recordset_vcr.core.format import Exchange


class NewRecordsetEvent(BaseModel):
    """A recordset was loaded from storage and is ready for replay."""

    name: str = Field(description="Recordset name")
    exchanges: List[Exchange] = Field(description="Expanded exchanges in replay order")


@runtime_checkable
class RecordsetListener(Protocol):
    """Receives store notifications."""

    def on_new_recordset(self, event: NewRecordsetEvent) -> None:
        ...


__all__ = ["NewRecordsetEvent", "RecordsetListener"]
