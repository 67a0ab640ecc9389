"""Configuration overlay between recordset defaults and per-exchange overrides.

On load every exchange is *expanded*: it receives its own deep copy of each
default plugin configuration it does not override, so plugins can read and
tune a single effective config per exchange. On save the exchange is
*compressed* back: entries structurally equal to the default are dropped and an
empty overlay disappears from the manifest.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from recordset_vcr.core.format import Exchange


def expand(exchange: Exchange, defaults: Mapping[str, Any]) -> Exchange:
    """Fill the exchange overlay with copies of missing defaults.

    Plugins already present in the overlay keep their explicit value.

    Args:
        exchange: Exchange to update in place
        defaults: Recordset-wide plugin configuration

    Returns:
        The same exchange, for chaining
    """
    overrides = exchange.overrides if exchange.overrides is not None else {}
    for plugin, value in defaults.items():
        if plugin not in overrides:
            overrides[plugin] = copy.deepcopy(value)
    exchange.overrides = overrides
    return exchange


def compress(exchange: Exchange, defaults: Mapping[str, Any]) -> Exchange:
    """Drop overlay entries equal to their default.

    Args:
        exchange: Exchange to update in place
        defaults: Recordset-wide plugin configuration

    Returns:
        The same exchange, for chaining
    """
    if exchange.overrides is None:
        return exchange

    overrides = {
        plugin: value
        for plugin, value in exchange.overrides.items()
        if not (plugin in defaults and defaults[plugin] == value)
    }
    exchange.overrides = overrides or None
    return exchange


def deep_merge(base: Mapping[str, Any], fragment: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``fragment`` over ``base`` into a new dict.

    Nested mappings are merged key by key; any other value in ``fragment``
    replaces the one in ``base``. Neither input is modified.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in fragment.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


__all__ = ["expand", "compress", "deep_merge"]
