"""Shared state threaded through the store and the mode controller.

A single :class:`RecordsetContext` is built at startup. It holds the storage
configuration, the process-wide plugin defaults and the cache of loaded
recordsets, so no module keeps ambient global state.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from recordset_vcr.core.codec import MANIFEST_NAME
from recordset_vcr.core.format import Recordset
from recordset_vcr.core.overlay import deep_merge

logger = logging.getLogger(__name__)


class StoreConfig(BaseModel):
    """Storage configuration for recordsets."""

    storage_root: Path = Field(
        default=Path("recordsets"),
        description="Folder holding one sub-folder per recordset",
    )
    manifest_name: str = Field(
        default=MANIFEST_NAME, description="Manifest filename inside a recordset folder"
    )

    def folder_for(self, name: str) -> Path:
        """Storage folder of a recordset."""
        return self.storage_root / name

    def manifest_for(self, name: str) -> Path:
        """Manifest path of a recordset."""
        return self.folder_for(name) / self.manifest_name


class RecordsetContext:
    """Configuration, plugin defaults and recordset cache.

    Attributes:
        config: Storage configuration
        cache: Loaded or saved recordsets keyed by name. Never evicted
            implicitly; see :meth:`RecordsetStore.evict`.
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.config = config or StoreConfig()
        self._defaults: Dict[str, Any] = copy.deepcopy(defaults) if defaults else {}
        self.cache: Dict[str, Recordset] = {}

    @classmethod
    def for_folder(cls, storage_root: str | Path) -> RecordsetContext:
        """Build a context storing recordsets under ``storage_root``."""
        return cls(StoreConfig(storage_root=Path(storage_root)))

    @property
    def defaults(self) -> Dict[str, Any]:
        """Copy of the registered plugin defaults."""
        return copy.deepcopy(self._defaults)

    def register_plugin_defaults(self, plugin: str, data: Any) -> None:
        """Register the default configuration of a plugin.

        The fragment is deep-merged into the defaults; a later registration
        wins on conflicting keys. Recordsets loaded or created afterwards see
        the new defaults.

        Args:
            plugin: Plugin name
            data: Default configuration value
        """
        self._defaults = deep_merge(self._defaults, {plugin: data})
        logger.debug(f"Registered defaults for plugin {plugin}")


__all__ = ["StoreConfig", "RecordsetContext"]
