"""RecordsetStore: loads and saves recordsets under the storage root.

Loading reads ``<root>/<name>/config.json``, pulls response bodies back from
their content blobs, expands every exchange against the recordset defaults,
caches the result and notifies subscribers. Saving does the reverse on a copy
of the captured exchanges: bodies go to blobs, overlays are compressed, and the
manifest is written in one atomic step.

Usage:
    context = RecordsetContext.for_folder("recordsets")
    store = RecordsetStore(context, recorder)
    store.subscribe(recorder)

    count = store.load("session1")
    report = store.save("session1")
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, Field

from recordset_vcr.core.blobs import BlobStore
from recordset_vcr.core.codec import RecordsetCodec
from recordset_vcr.core.context import RecordsetContext
from recordset_vcr.core.errors import LoadAllError, RecordsetNotFoundError
from recordset_vcr.core.events import NewRecordsetEvent, RecordsetListener
from recordset_vcr.core.format import Exchange, Recordset
from recordset_vcr.core.overlay import compress, deep_merge, expand

if TYPE_CHECKING:
    from recordset_vcr.recorder import CaptureBackend

logger = logging.getLogger(__name__)


class SaveWarning(BaseModel):
    """A non-fatal problem hit while saving one exchange."""

    index: int = Field(description="Position of the exchange in the recordset")
    message: str = Field(description="What went wrong")


class SaveReport(BaseModel):
    """Outcome of :meth:`RecordsetStore.save`.

    A save stores as much as it can: failures on single exchanges end up in
    ``warnings``, a failure writing the manifest in ``error``.
    """

    name: str
    exchange_count: int = 0
    blob_count: int = 0
    warnings: List[SaveWarning] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when the manifest was written."""
        return self.error is None


class LoadAllResult(BaseModel):
    """Totals of :meth:`RecordsetStore.load_all`."""

    recordset_count: int = 0
    exchange_count: int = 0
    loaded: List[str] = Field(default_factory=list)


class RecordsetStore:
    """Cache-backed loading and saving of recordsets.

    Attributes:
        context: Shared configuration, defaults and cache
        recorder: Capture collaborator, source of the exchanges to save
    """

    def __init__(
        self,
        context: RecordsetContext,
        recorder: Optional[CaptureBackend] = None,
        codec: Optional[RecordsetCodec] = None,
        blobs: Optional[BlobStore] = None,
    ) -> None:
        self.context = context
        self.recorder = recorder
        self.codec = codec or RecordsetCodec()
        self.blobs = blobs or BlobStore()
        self._listeners: list[RecordsetListener] = []
        # Recording sessions not saved yet, kept out of the load cache.
        self._drafts: dict[str, Recordset] = {}

    # ===== Subscribers =====

    def subscribe(self, listener: RecordsetListener) -> None:
        """Register a listener for new recordset notifications."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RecordsetListener) -> None:
        """Remove a listener; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, event: NewRecordsetEvent) -> None:
        for listener in list(self._listeners):
            listener.on_new_recordset(event)

    # ===== Cache =====

    def get(self, name: str) -> Optional[Recordset]:
        """Cached recordset, or None if not loaded."""
        return self.context.cache.get(name)

    def cached_names(self) -> list[str]:
        """Names of all cached recordsets."""
        return list(self.context.cache)

    def evict(self, name: str) -> bool:
        """Drop a recordset from the cache.

        Returns:
            True if the recordset was cached
        """
        return self.context.cache.pop(name, None) is not None

    def clear(self) -> None:
        """Drop every cached recordset."""
        self.context.cache.clear()

    # ===== Load =====

    def exists(self, name: str) -> bool:
        """Whether a manifest for ``name`` exists on storage."""
        return self.context.config.manifest_for(name).is_file()

    def load(self, name: str) -> int:
        """Load a recordset into the cache.

        A cached recordset is not read again.

        Args:
            name: Recordset name

        Returns:
            Number of exchanges in the recordset

        Raises:
            RecordsetNotFoundError: If the recordset has no manifest
            MalformedManifestError: If the manifest cannot be decoded
            OSError: If the manifest cannot be read
        """
        cached = self.context.cache.get(name)
        if cached is not None:
            logger.debug(f"Recordset '{name}' already loaded")
            return cached.exchange_count

        manifest_path = self.context.config.manifest_for(name)
        if not manifest_path.is_file():
            raise RecordsetNotFoundError(name)

        logger.info(f"Manifest found for '{name}', loading recordset")
        recordset = self.codec.read(name, manifest_path)
        recordset.defaults = deep_merge(self.context.defaults, recordset.defaults)

        folder = self.context.config.folder_for(name)
        for index, exchange in enumerate(recordset.exchanges):
            self._resolve_body(folder, exchange, index)
            expand(exchange, recordset.defaults)

        self.context.cache[name] = recordset
        self._publish(NewRecordsetEvent(name=name, exchanges=recordset.exchanges))

        logger.info(f"Loaded {recordset.exchange_count} exchanges of recordset '{name}'")
        return recordset.exchange_count

    def _resolve_body(self, folder: Path, exchange: Exchange, index: int) -> None:
        response = exchange.response
        if response.file:
            try:
                response.body = self.blobs.load(folder, response.file)
            except OSError as e:
                logger.error(f"Cannot read blob {response.file} of exchange {index}: {e}")
                response.body = b""
        elif response.body is None:
            response.body = b""

    def load_all(self) -> LoadAllResult:
        """Load every recordset found under the storage root.

        Folders without a manifest are skipped. The first other failure aborts
        the batch; recordsets loaded before it stay cached.

        Returns:
            Recordset and exchange totals

        Raises:
            LoadAllError: If the root cannot be scanned or a recordset fails to load
        """
        root = self.context.config.storage_root
        logger.info(f"Loading all recordsets from {root}")
        try:
            folders = sorted(p.name for p in root.iterdir() if p.is_dir())
        except OSError as e:
            logger.error(f"Cannot scan {root}: {e}")
            raise LoadAllError(None, [], e) from e

        result = LoadAllResult()
        for name in folders:
            try:
                count = self.load(name)
            except RecordsetNotFoundError:
                logger.debug(f"Skipping '{name}': no manifest")
                continue
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load recordset '{name}': {e}")
                raise LoadAllError(name, list(result.loaded), e) from e
            result.loaded.append(name)
            result.recordset_count += 1
            result.exchange_count += count
        return result

    # ===== Save =====

    def create(self, name: str) -> Recordset:
        """Start a draft recordset for a new recording session.

        The draft holds a copy of the current plugin defaults and no exchanges.
        It becomes cached once saved.
        """
        recordset = Recordset(name=name, defaults=self.context.defaults)
        self._drafts[name] = recordset
        return recordset

    def _defaults_for(self, name: str) -> dict:
        draft = self._drafts.get(name)
        if draft is not None:
            return draft.defaults
        cached = self.context.cache.get(name)
        if cached is not None:
            return cached.defaults
        return self.context.defaults

    def save(self, name: str, exchanges: Optional[list[Exchange]] = None) -> SaveReport:
        """Persist a recordset to storage.

        Never raises for I/O problems: they are logged and reported.

        Args:
            name: Recordset name
            exchanges: Exchanges to save; defaults to what the capture
                collaborator holds for ``name``

        Returns:
            SaveReport describing what was written
        """
        if exchanges is None:
            if self.recorder is None:
                raise RuntimeError("No capture collaborator to read exchanges from")
            exchanges = self.recorder.get_exchanges(name)

        defaults = self._defaults_for(name)
        report = SaveReport(name=name, exchange_count=len(exchanges))

        folder = self.context.config.folder_for(name)
        manifest_path = self.context.config.manifest_for(name)
        logger.debug(f"Saving {len(exchanges)} exchanges to {manifest_path}")

        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create folder {folder}: {e}")
            report.error = str(e)
            return report

        stored: list[Exchange] = []
        for index, exchange in enumerate(exchanges):
            entry = exchange.model_copy(deep=True)
            if entry.response.body is not None:
                try:
                    entry.response.file = self.blobs.store(
                        folder, entry.response.body, entry.response.content_type, index
                    )
                    entry.response.body = None
                    report.blob_count += 1
                except (OSError, TypeError) as e:
                    logger.error(f"Cannot store body of exchange {index}: {e}")
                    report.warnings.append(SaveWarning(index=index, message=str(e)))
            compress(entry, defaults)
            stored.append(entry)

        manifest = Recordset(name=name, defaults=copy.deepcopy(defaults), exchanges=stored)
        try:
            self.codec.write(manifest, manifest_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Cannot write manifest {manifest_path}: {e}")
            report.error = str(e)
            return report

        # The cache holds replay-ready copies, expanded like a fresh load.
        replayable = [expand(e.model_copy(deep=True), defaults) for e in exchanges]
        self._drafts.pop(name, None)
        self.context.cache[name] = Recordset(name=name, defaults=defaults, exchanges=replayable)
        logger.info(f"Saved {len(exchanges)} exchanges of recordset '{name}'")
        return report


__all__ = ["RecordsetStore", "SaveReport", "SaveWarning", "LoadAllResult"]
