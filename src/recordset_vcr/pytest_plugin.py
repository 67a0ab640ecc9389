"""Pytest plugin for Recordset VCR - replay or record a recordset per test.

Enable it from a ``conftest.py``:

    pytest_plugins = ["recordset_vcr.pytest_plugin"]

Usage:
    @pytest.mark.recordset("checkout-flow")
    def test_checkout(recordset_controller, recordset_recorder):
        assert recordset_controller.is_replaying
        exchanges = recordset_recorder.get_exchanges("checkout-flow")

With ``--recordset-record`` a missing recordset is recorded instead, and saved
when the test finishes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generator

import pytest

from recordset_vcr.controller import Command, ModeController
from recordset_vcr.core.context import RecordsetContext, StoreConfig
from recordset_vcr.recorder import InMemoryRecorder
from recordset_vcr.store import RecordsetStore


class RecordsetPluginConfig:
    """Configuration for the recordset pytest plugin."""

    def __init__(self, record: bool, folder: str):
        """Initialize plugin configuration.

        Args:
            record: Whether missing recordsets are recorded instead of failing.
            folder: Storage root for recordsets.
        """
        self.record = record
        self.folder = Path(folder)


def pytest_addoption(parser: Any) -> None:
    """Add pytest command-line options for recordsets.

    Options:
        --recordset-record: Record recordsets that do not exist yet
        --recordset-dir: Storage root for recordsets (default: recordsets/)
    """
    group = parser.getgroup("recordset")
    group.addoption(
        "--recordset-record",
        action="store_true",
        default=False,
        help="Record recordsets that do not exist yet instead of failing",
    )
    group.addoption(
        "--recordset-dir",
        default="recordsets",
        help="Storage root for recordsets (default: recordsets/)",
    )


def pytest_configure(config: Any) -> None:
    """Register the ``recordset`` marker and store the plugin config."""
    config.addinivalue_line(
        "markers",
        "recordset(name): Replay (or record) the named recordset for this test",
    )
    config.recordset_config = RecordsetPluginConfig(
        record=config.getoption("--recordset-record"),
        folder=config.getoption("--recordset-dir"),
    )


@pytest.fixture
def recordset_dir(request: Any) -> Path:
    """Storage root used by the recordset fixtures. Override to relocate it."""
    return request.config.recordset_config.folder


@pytest.fixture
def recordset_context(recordset_dir: Path) -> RecordsetContext:
    """Fresh context (empty cache) for the test."""
    return RecordsetContext(StoreConfig(storage_root=recordset_dir))


@pytest.fixture
def recordset_recorder() -> InMemoryRecorder:
    """In-memory capture collaborator."""
    return InMemoryRecorder()


@pytest.fixture
def recordset_store(
    recordset_context: RecordsetContext, recordset_recorder: InMemoryRecorder
) -> RecordsetStore:
    """Store wired to the recorder, which receives new recordset notifications."""
    store = RecordsetStore(recordset_context, recordset_recorder)
    store.subscribe(recordset_recorder)
    return store


@pytest.fixture
def recordset_controller(
    request: Any,
    recordset_store: RecordsetStore,
    recordset_recorder: InMemoryRecorder,
) -> Generator[ModeController, None, None]:
    """Mode controller, already replaying the recordset of the ``recordset`` marker.

    Without a marker the controller starts idle. A recording still running at
    teardown is saved.

    Raises:
        RecordsetNotFoundError: If the marked recordset is missing and
            ``--recordset-record`` is not set.
    """
    controller = ModeController(recordset_store, recordset_recorder)

    marker = request.node.get_closest_marker("recordset")
    if marker:
        name = marker.args[0] if marker.args else request.node.name
        command = (
            Command.REPLAY_FILE_OR_RECORD
            if request.config.recordset_config.record
            else Command.REPLAY_FILE
        )
        controller.dispatch(command, name)

    yield controller

    if controller.is_recording:
        controller.dispatch(Command.RECORD_END)
