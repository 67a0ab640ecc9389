"""Capture collaborator used by the mode controller.

The real traffic capture and request matching engine lives outside this
package. :class:`CaptureBackend` is the interface the controller and the store
need from it; :class:`InMemoryRecorder` is a small implementation that keeps
exchanges per recordset in memory, used by the HTTP surface, the pytest plugin
and the tests.

Usage:
    recorder = InMemoryRecorder()
    store = RecordsetStore(context, recorder)
    store.subscribe(recorder)

    recorder.start("session1")
    recorder.capture(exchange)
    recorder.stop("session1")
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from recordset_vcr.core.format import Exchange
from recordset_vcr.core.events import NewRecordsetEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class CaptureBackend(Protocol):
    """What the controller and store need from the capture engine."""

    def start(self, name: str) -> None:
        """Begin recording traffic into ``name``."""

    def stop(self, name: str) -> None:
        """Stop recording or replaying ``name``."""

    def replay(self, name: str) -> None:
        """Answer traffic from the exchanges of ``name``."""

    def get_exchanges(self, name: str) -> list[Exchange]:
        """Exchanges currently held for ``name``, in capture order."""


class InMemoryRecorder:
    """Keeps captured exchanges per recordset in memory.

    Also subscribes to the store so loaded recordsets are indexed for replay.

    Attributes:
        active: Recordset currently recording or replaying, if any
        recording: True while capturing into ``active``
    """

    def __init__(self) -> None:
        self._exchanges: dict[str, list[Exchange]] = {}
        self.active: Optional[str] = None
        self.recording = False

    def start(self, name: str) -> None:
        self._exchanges[name] = []
        self.active = name
        self.recording = True
        logger.info(f"Recording into recordset '{name}'")

    def stop(self, name: str) -> None:
        if self.active == name:
            self.active = None
            self.recording = False
        logger.info(f"Stopped recordset '{name}'")

    def replay(self, name: str) -> None:
        self.active = name
        self.recording = False
        logger.info(f"Replaying recordset '{name}'")

    def get_exchanges(self, name: str) -> list[Exchange]:
        return list(self._exchanges.get(name, []))

    def set_exchanges(self, name: str, exchanges: list[Exchange]) -> None:
        """Replace the exchanges indexed for ``name``."""
        self._exchanges[name] = list(exchanges)

    def capture(self, exchange: Exchange) -> None:
        """Append an exchange to the recordset being recorded.

        Raises:
            RuntimeError: If not currently recording
        """
        if not self.recording or self.active is None:
            raise RuntimeError("Not recording. Call start() first.")
        self._exchanges[self.active].append(exchange)

    def on_new_recordset(self, event: NewRecordsetEvent) -> None:
        """Index the exchanges of a freshly loaded recordset."""
        self.set_exchanges(event.name, event.exchanges)
        logger.debug(f"Indexed {len(event.exchanges)} exchanges of '{event.name}'")


__all__ = ["CaptureBackend", "InMemoryRecorder"]
