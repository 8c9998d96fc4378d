"""Library adapters: one per supported translation-library convention."""

from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

from ..config import ConfigError, ScanConfig
from ..logging import get_logger
from .base import LibraryAdapter
from .formatjs import FormatJSAdapter
from .i18next import I18nextAdapter
from .lingui import LinguiAdapter

_LOGGER = get_logger("adapters")

# Declaration order is the auto-detection order.
ADAPTERS: Tuple[Type[LibraryAdapter], ...] = (I18nextAdapter, FormatJSAdapter, LinguiAdapter)

_BY_NAME: Dict[str, Type[LibraryAdapter]] = {adapter.name: adapter for adapter in ADAPTERS}


def get_adapter(name: str) -> LibraryAdapter:
    try:
        return _BY_NAME[name]()
    except KeyError as exc:
        raise ConfigError(
            f"Unknown library '{name}'. Expected one of: {', '.join(_BY_NAME)}"
        ) from exc


def resolve_adapter(config: ScanConfig) -> LibraryAdapter:
    """Return the adapter selected by ``config.library`` or detected from its catalogs."""
    if config.library != "auto":
        adapter = get_adapter(config.library)
        if not adapter.detect(config):
            _LOGGER.warning("Library '%s' selected but catalogs.%s is not configured", adapter.name, adapter.name)
        return adapter

    detected: Optional[LibraryAdapter] = None
    for adapter_cls in ADAPTERS:
        candidate = adapter_cls()
        if candidate.detect(config):
            detected = candidate
            break
    if detected is None:
        raise ConfigError(
            "Could not detect the translation library: configure one of "
            + ", ".join(f"catalogs.{name}" for name in _BY_NAME)
            + " or set 'library'"
        )
    _LOGGER.debug("Detected translation library: %s", detected.name)
    return detected


__all__ = [
    "ADAPTERS",
    "FormatJSAdapter",
    "I18nextAdapter",
    "LibraryAdapter",
    "LinguiAdapter",
    "get_adapter",
    "resolve_adapter",
]
