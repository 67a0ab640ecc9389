"""Mode controller: switches between idle, recording and replaying.

Host commands arrive as a :class:`Command` plus a value (usually a recordset
name). The controller drives the capture collaborator and the recordset store
and returns a :class:`CommandResult` with a human-readable message.

Usage:
    controller = ModeController(store, recorder)
    result = controller.dispatch(Command.REPLAY_FILE_OR_RECORD, "session1")
    print(result.message)  # Beginning recording of recordset 'session1'
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from recordset_vcr.core.errors import RecordsetNotFoundError
from recordset_vcr.recorder import CaptureBackend
from recordset_vcr.store import RecordsetStore

logger = logging.getLogger(__name__)


Mode = Literal["idle", "recording", "replaying"]


class Command(str, Enum):
    """Commands accepted from the host dispatcher."""

    RECORD = "RECORD"
    REPLAY_FILE = "REPLAY-FILE"
    REPLAY_FILE_OR_RECORD = "REPLAY-FILE-OR-RECORD"
    RECORD_END = "RECORD-END"
    LOAD_ALL = "LOAD-ALL"
    RECORD_SET = "RECORD-SET"


class ModeState(BaseModel):
    """Current mode and the recordset bound to it.

    ``replaying`` with no recordset means every loaded recordset is replayed.
    """

    model_config = ConfigDict(frozen=True)

    mode: Mode = "idle"
    recordset: Optional[str] = None


IDLE = ModeState()


class CommandResult(BaseModel):
    """Outcome of a command, reported back to the host."""

    command: Command
    message: Optional[str] = None
    state: ModeState = Field(default_factory=ModeState)


class RequestContext(BaseModel):
    """Per-request data the controller annotates with a target recordset."""

    model_config = ConfigDict(extra="allow")

    recordset: Optional[str] = None


Handler = Callable[[Any, Optional[RequestContext]], Optional[str]]


class ModeController:
    """State machine over the recordset store and the capture collaborator.

    Exactly one mode is active at a time. Starting a recording or a replay
    while recording persists the running recording first.
    """

    def __init__(self, store: RecordsetStore, recorder: CaptureBackend) -> None:
        self.store = store
        self.recorder = recorder
        self._state: ModeState = IDLE

        self._handlers: Dict[Command, Handler] = {
            Command.RECORD: lambda value, _req: self.start_record(value),
            Command.REPLAY_FILE: lambda value, _req: self.load_or_record(value, False),
            Command.REPLAY_FILE_OR_RECORD: lambda value, _req: self.load_or_record(value, True),
            Command.RECORD_END: lambda _value, _req: self.stop_current(),
            Command.LOAD_ALL: lambda _value, _req: self.load_all(),
            Command.RECORD_SET: self._handle_record_set,
        }

    @property
    def state(self) -> ModeState:
        """Current mode state."""
        return self._state

    @property
    def mode(self) -> Mode:
        return self._state.mode

    @property
    def current_recordset(self) -> Optional[str]:
        return self._state.recordset

    @property
    def is_recording(self) -> bool:
        return self._state.mode == "recording"

    @property
    def is_replaying(self) -> bool:
        return self._state.mode == "replaying"

    # ===== Dispatch =====

    def dispatch(
        self,
        command: Command | str,
        value: Any = None,
        request: Optional[RequestContext] = None,
    ) -> CommandResult:
        """Run a host command.

        Args:
            command: Command or its wire name (e.g. ``"REPLAY-FILE"``)
            value: Command value, usually a recordset name
            request: Request context, used by ``RECORD-SET``

        Returns:
            CommandResult with the message and the resulting state

        Raises:
            ValueError: If the command is unknown
            RecordsetNotFoundError: If ``REPLAY-FILE`` targets a missing recordset
            MalformedManifestError: If a manifest cannot be decoded
            LoadAllError: If ``LOAD-ALL`` fails
        """
        try:
            command = Command(command)
        except ValueError as e:
            raise ValueError(f"Unknown command: {command}") from e

        logger.debug(f"Dispatching {command.value} (value={value!r})")
        message = self._handlers[command](value, request)
        return CommandResult(command=command, message=message, state=self._state)

    # ===== Transitions =====

    def _finish_recording(self) -> Optional[int]:
        """Stop and persist a running recording.

        Returns:
            Number of saved exchanges, or None if nothing was recording
        """
        if self._state.mode != "recording" or self._state.recordset is None:
            return None

        name = self._state.recordset
        self.recorder.stop(name)
        report = self.store.save(name)
        for warning in report.warnings:
            logger.warning(f"Recordset '{name}' exchange {warning.index}: {warning.message}")
        self._state = IDLE
        return report.exchange_count

    def _begin_recording(self, name: str) -> None:
        self.store.create(name)
        self.recorder.start(name)
        self._state = ModeState(mode="recording", recordset=name)

    def start_record(self, name: str) -> Optional[str]:
        """Start recording into ``name``."""
        self._finish_recording()
        self._begin_recording(name)
        logger.info(f"Recording recordset '{name}'")
        return None

    def load_or_record(self, name: str, allow_record_fallback: bool) -> str:
        """Replay ``name``, optionally recording it when it does not exist.

        Raises:
            RecordsetNotFoundError: If missing and no fallback is allowed
        """
        self._finish_recording()

        try:
            count = self.store.load(name)
        except RecordsetNotFoundError:
            if allow_record_fallback:
                self._begin_recording(name)
                return f"Beginning recording of recordset '{name}'"
            self._state = IDLE
            raise
        except Exception:
            self._state = IDLE
            raise

        self.recorder.replay(name)
        self._state = ModeState(mode="replaying", recordset=name)
        return f"Loaded {count} requests of recordset '{name}'"

    def stop_current(self) -> Optional[str]:
        """Stop recording (and save) or stop replaying."""
        if self._state.mode == "recording":
            count = self._finish_recording()
            return f"Saving {count} requests"

        if self._state.mode == "replaying" and self._state.recordset is not None:
            self.recorder.stop(self._state.recordset)
        self._state = IDLE
        return None

    def load_all(self) -> str:
        """Load every recordset on storage and replay them all.

        Raises:
            LoadAllError: If a recordset cannot be loaded (mode is unchanged)
        """
        self._finish_recording()
        result = self.store.load_all()
        self._state = ModeState(mode="replaying", recordset=None)
        return (
            f"Loaded {result.recordset_count} recordsets for a total of "
            f"{result.exchange_count} requests"
        )

    # ===== Request binding =====

    def bind_request(self, request: RequestContext, name: Optional[str]) -> RequestContext:
        """Point a request at a recordset without changing the mode."""
        request.recordset = name
        return request

    def resolve_request(self, request: RequestContext) -> RequestContext:
        """Bind an unbound request to the current recordset."""
        if request.recordset is None:
            request.recordset = self._state.recordset
        return request

    def _handle_record_set(self, value: Any, request: Optional[RequestContext]) -> Optional[str]:
        if request is None:
            raise ValueError("RECORD-SET requires a request context")
        self.bind_request(request, value)
        return None


__all__ = [
    "Command",
    "CommandResult",
    "Mode",
    "ModeController",
    "ModeState",
    "RequestContext",
]
