"""Tests for InMemoryRecorder."""

import pytest

from recordset_vcr.core.events import NewRecordsetEvent, RecordsetListener
from recordset_vcr.recorder import CaptureBackend, InMemoryRecorder

from conftest import make_exchange


class TestInMemoryRecorder:
    """Tests for the in-memory capture collaborator."""

    def test_satisfies_protocols(self):
        recorder = InMemoryRecorder()
        assert isinstance(recorder, CaptureBackend)
        assert isinstance(recorder, RecordsetListener)

    def test_capture_requires_recording(self):
        with pytest.raises(RuntimeError, match="Not recording"):
            InMemoryRecorder().capture(make_exchange())

    def test_capture_in_order(self):
        recorder = InMemoryRecorder()
        recorder.start("s1")
        recorder.capture(make_exchange(url="/a"))
        recorder.capture(make_exchange(url="/b"))

        assert [e.request.url for e in recorder.get_exchanges("s1")] == ["/a", "/b"]

    def test_start_resets_exchanges(self):
        recorder = InMemoryRecorder()
        recorder.start("s1")
        recorder.capture(make_exchange())
        recorder.start("s1")

        assert recorder.get_exchanges("s1") == []

    def test_get_exchanges_returns_copy(self):
        recorder = InMemoryRecorder()
        recorder.start("s1")
        recorder.get_exchanges("s1").append(make_exchange())

        assert recorder.get_exchanges("s1") == []

    def test_unknown_recordset_is_empty(self):
        assert InMemoryRecorder().get_exchanges("nope") == []

    def test_stop_only_affects_active(self):
        recorder = InMemoryRecorder()
        recorder.start("s1")
        recorder.stop("other")
        assert recorder.recording

        recorder.stop("s1")
        assert recorder.active is None
        assert not recorder.recording

    def test_replay_stops_capture(self):
        recorder = InMemoryRecorder()
        recorder.start("s1")
        recorder.replay("s2")

        assert recorder.active == "s2"
        assert not recorder.recording

    def test_indexes_new_recordsets(self):
        recorder = InMemoryRecorder()
        exchanges = [make_exchange(url="/a")]
        recorder.on_new_recordset(NewRecordsetEvent(name="s1", exchanges=exchanges))

        assert [e.request.url for e in recorder.get_exchanges("s1")] == ["/a"]
