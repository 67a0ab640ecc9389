"""Recordset VCR: persist, load and replay recordsets of captured HTTP exchanges."""

__version__ = "0.1.0"

from recordset_vcr.core.format import Exchange, RecordedRequest, RecordedResponse, Recordset
from recordset_vcr.core.context import RecordsetContext, StoreConfig
from recordset_vcr.store import RecordsetStore, SaveReport
from recordset_vcr.recorder import InMemoryRecorder
from recordset_vcr.controller import Command, ModeController

__all__ = [
    "Exchange",
    "RecordedRequest",
    "RecordedResponse",
    "Recordset",
    "RecordsetContext",
    "StoreConfig",
    "RecordsetStore",
    "SaveReport",
    "InMemoryRecorder",
    "Command",
    "ModeController",
]
