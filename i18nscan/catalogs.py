"""In-memory catalog store and the catalog file readers adapters build it from."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import polib

from .logging import get_logger

LeafResolver = Callable[[Mapping[str, Any]], Optional[str]]

_LOGGER = get_logger("catalogs")


class CatalogError(RuntimeError):
    """Raised when a catalog file cannot be read or decoded."""


class CatalogStore:
    """``locale -> flattened key -> message`` for one scan.

    Merges are last-write-wins: when two catalog files define the same flattened
    key for a locale, the file merged later supplies the value.
    """

    def __init__(self, locales: Iterable[str] = (), *, available: bool = True) -> None:
        self.available = available
        self._entries: Dict[str, Dict[str, str]] = {}
        self._sources: Dict[str, Dict[str, str]] = {}
        for locale in locales:
            self.ensure_locale(locale)

    @classmethod
    def unavailable(cls, locales: Iterable[str] = ()) -> "CatalogStore":
        """A store signalling that catalogs could not be loaded at all."""
        return cls(locales, available=False)

    @property
    def locales(self) -> List[str]:
        return list(self._entries)

    def ensure_locale(self, locale: str) -> None:
        self._entries.setdefault(locale, {})
        self._sources.setdefault(locale, {})

    def merge(self, locale: str, entries: Mapping[str, str], source: Optional[str] = None) -> None:
        self.ensure_locale(locale)
        target = self._entries[locale]
        sources = self._sources[locale]
        for key, value in entries.items():
            if key in target and target[key] != value:
                _LOGGER.debug(
                    "Catalog key %s for %s redefined by %s (previously %s)",
                    key,
                    locale,
                    source or "<memory>",
                    sources.get(key, "<memory>"),
                )
            target[key] = value
            if source is not None:
                sources[key] = source

    def catalog(self, locale: str) -> Mapping[str, str]:
        return MappingProxyType(self._entries.get(locale, {}))

    def has_key(self, locale: str, key: str) -> bool:
        return key in self._entries.get(locale, {})

    def keys(self, locale: str) -> List[str]:
        return list(self._entries.get(locale, {}))

    def source_of(self, locale: str, key: str) -> Optional[str]:
        return self._sources.get(locale, {}).get(key)

    def size(self, locale: str) -> int:
        return len(self._entries.get(locale, {}))

    def __contains__(self, locale: object) -> bool:
        return locale in self._entries


def flatten_catalog(
    tree: Mapping[str, Any],
    *,
    namespace: Optional[str] = None,
    prefix: str = "",
    leaf: Optional[LeafResolver] = None,
) -> Dict[str, str]:
    """Flatten nested catalog objects into dotted keys, optionally ``namespace:``-prefixed.

    Lists are flattened by index. Non-string scalars are dropped. ``leaf`` lets
    a caller treat structured entries (for example ``{"defaultMessage": ...}``)
    as messages instead of nested groups.
    """
    flattened: Dict[str, str] = {}
    for key, value in _iter_items(tree):
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, str):
            flattened[_qualify(path, namespace)] = value
            continue
        if isinstance(value, dict) and leaf is not None:
            message = leaf(value)
            if message is not None:
                flattened[_qualify(path, namespace)] = message
                continue
        if isinstance(value, (dict, list)):
            flattened.update(flatten_catalog(_as_mapping(value), namespace=namespace, prefix=path, leaf=leaf))
    return flattened


def _iter_items(tree: Mapping[str, Any]) -> Iterable[tuple[str, Any]]:
    return ((str(key), value) for key, value in tree.items())


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, list):
        return {str(index): item for index, item in enumerate(value)}
    return value


def _qualify(path: str, namespace: Optional[str]) -> str:
    return f"{namespace}:{path}" if namespace else path


def read_json_catalog(path: Path) -> Dict[str, Any]:
    """Decode a JSON catalog whose root must be an object."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CatalogError(f"Catalog file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(f"Failed to read catalog {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid JSON in catalog {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise CatalogError(f"Catalog {path} must contain a JSON object at the root")
    return payload


def read_po_catalog(path: Path) -> Dict[str, str]:
    """Read a gettext catalog as ``msgid -> msgstr`` (obsolete entries skipped)."""
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")
    try:
        po = polib.pofile(str(path), encoding="utf-8")
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Invalid PO catalog {path}: {exc}") from exc
    entries: Dict[str, str] = {}
    for entry in po:
        if entry.obsolete or not entry.msgid:
            continue
        entries[entry.msgid] = entry.msgstr
    return entries


__all__ = [
    "CatalogError",
    "CatalogStore",
    "flatten_catalog",
    "read_json_catalog",
    "read_po_catalog",
]
