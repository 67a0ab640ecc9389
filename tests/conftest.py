"""Shared fixtures and test utilities for Recordset VCR tests."""

from pathlib import Path
from typing import Any, Dict

import pytest

from recordset_vcr.controller import ModeController
from recordset_vcr.core.context import RecordsetContext
from recordset_vcr.core.format import Exchange, RecordedRequest, RecordedResponse
from recordset_vcr.recorder import InMemoryRecorder
from recordset_vcr.store import RecordsetStore

pytest_plugins = ["recordset_vcr.pytest_plugin"]


# ===== Helpers =====


def make_exchange(
    url: str = "/api/items",
    body: bytes | None = b'{"items": []}',
    content_type: str = "application/json",
    method: str = "GET",
    status: int = 200,
    overrides: Dict[str, Any] | None = None,
    raw_body: bytes | None = None,
) -> Exchange:
    """Build an exchange with a JSON response by default."""
    return Exchange(
        request=RecordedRequest(
            method=method,
            url=url,
            headers={"accept": "*/*"},
            raw_body=raw_body,
        ),
        response=RecordedResponse(
            status=status,
            headers={"Content-Type": content_type},
            body=body,
        ),
        overrides=overrides,
    )


# ===== Exchange Fixtures =====


@pytest.fixture
def json_exchange() -> Exchange:
    """GET returning a JSON list."""
    return make_exchange()


@pytest.fixture
def html_exchange() -> Exchange:
    """GET returning an HTML page with a tuned speed plugin."""
    return make_exchange(
        url="/index.html",
        body=b"<html><body>hello</body></html>",
        content_type="text/html; charset=utf-8",
        overrides={"speed": {"delay": 250}},
    )


@pytest.fixture
def post_exchange() -> Exchange:
    """POST with a raw request body."""
    return make_exchange(
        url="/api/items",
        method="POST",
        status=201,
        body=b'{"id": 1}',
        raw_body=b'{"name": "widget"}',
    )


# ===== Store Fixtures =====


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Empty storage root."""
    root = tmp_path / "recordsets"
    root.mkdir()
    return root


@pytest.fixture
def context(storage_root: Path) -> RecordsetContext:
    """Context over the temporary storage root."""
    return RecordsetContext.for_folder(storage_root)


@pytest.fixture
def recorder() -> InMemoryRecorder:
    """In-memory capture collaborator."""
    return InMemoryRecorder()


@pytest.fixture
def store(context: RecordsetContext, recorder: InMemoryRecorder) -> RecordsetStore:
    """Store with the recorder subscribed to new recordsets."""
    store = RecordsetStore(context, recorder)
    store.subscribe(recorder)
    return store


@pytest.fixture
def controller(store: RecordsetStore, recorder: InMemoryRecorder) -> ModeController:
    """Idle mode controller."""
    return ModeController(store, recorder)
