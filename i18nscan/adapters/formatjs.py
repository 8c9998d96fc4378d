"""Adapter for FormatJS / react-intl message descriptors and flat ICU catalogs."""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Any, List, Mapping, Optional, Sequence

from ..catalogs import CatalogError, CatalogStore, flatten_catalog, read_json_catalog
from ..config import ScanConfig
from ..logging import get_logger
from ..models import TranslationCall
from ..parser import ATTRIBUTE, CALL, ELEMENT, OBJECT, PROPERTY, SyntaxNode
from ..paths import fill_pattern, relative_posix, resolve_glob
from .base import (
    LibraryAdapter,
    attribute_value,
    call_target,
    expression_object,
    literal_node,
    literal_text,
    object_keys,
    object_properties,
    property_name,
    property_value,
    quote,
)

_LOGGER = get_logger("adapters.formatjs")

_FUNCTIONS = frozenset({"formatMessage", "defineMessage"})
_BULK_FUNCTION = "defineMessages"
_COMPONENTS = frozenset({"FormattedMessage"})
_MESSAGE_FIELDS = ("defaultMessage", "message", "string")
_GLOB_CHARS = ("*", "?", "[")


def _descriptor_message(entry: Mapping[str, Any]) -> Optional[str]:
    """Message text of an extracted descriptor such as ``{"defaultMessage": "..."}``."""
    for field_name in _MESSAGE_FIELDS:
        value = entry.get(field_name)
        if isinstance(value, str):
            return value
    return None


class FormatJSAdapter(LibraryAdapter):
    """``formatMessage({id})`` and ``<FormattedMessage id>`` against flat per-locale files."""

    name = "formatjs"
    slug_separator = "."
    hash_prefix = "msg_"
    wrapper_components = _COMPONENTS
    validates_catalog_messages = True

    def detect(self, config: ScanConfig) -> bool:
        return config.catalogs.formatjs is not None

    def load_catalogs(self, config: ScanConfig) -> CatalogStore:
        settings = config.catalogs.formatjs
        if settings is None:
            raise CatalogError("FormatJS catalog configuration is missing")

        store = CatalogStore(config.locales)
        for locale in config.locales:
            for path in self._locale_files(config.root, settings.messages_globs, locale):
                try:
                    tree = read_json_catalog(path)
                except CatalogError as exc:
                    _LOGGER.warning("Failed to load catalog for %s: %s", locale, exc)
                    continue
                store.merge(locale, flatten_catalog(tree, leaf=_descriptor_message), source=str(path))
            if not store.size(locale):
                _LOGGER.debug("No FormatJS messages found for locale %s", locale)
        return store

    @staticmethod
    def _locale_files(root: Path, globs: Sequence[str], locale: str) -> List[Path]:
        files: List[Path] = []
        for pattern in globs:
            if "{locale}" in pattern:
                matches = resolve_glob(root, fill_pattern(pattern, locale=locale))
            else:
                # Locale-agnostic globs select files named after the locale: lang/fr.json
                matches = [path for path in resolve_glob(root, pattern) if path.stem == locale]
            files.extend(path for path in matches if path not in files)
        return files

    def extract_translation_calls(self, node: SyntaxNode) -> List[TranslationCall]:
        if node.kind == CALL and call_target(node)[1] == _BULK_FUNCTION:
            return self._from_define_messages(node)
        return super().extract_translation_calls(node)

    def _from_define_messages(self, node: SyntaxNode) -> List[TranslationCall]:
        """``defineMessages({ greet: { id, defaultMessage } })`` declares one message per property."""
        args = node.children("arguments")
        if not args or args[0].kind != OBJECT:
            return []
        calls: List[TranslationCall] = []
        for prop in args[0].children("properties"):
            value = prop.child("value")
            if value is None or value.kind != OBJECT:
                continue
            call = self._from_descriptor(value, None, _BULK_FUNCTION)
            if call is not None:
                calls.append(call)
        return calls

    def extract_translation_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        if node.kind == CALL:
            return self._from_call(node)
        if node.kind == ELEMENT and node.name in _COMPONENTS:
            return self._from_element(node)
        return None

    def _from_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        _, name = call_target(node)
        if name not in _FUNCTIONS:
            return None
        args = node.children("arguments")
        if not args or args[0].kind != OBJECT:
            return None
        return self._from_descriptor(args[0], args[1] if len(args) > 1 else None, name)

    def _from_descriptor(
        self, node: SyntaxNode, values: Optional[SyntaxNode], component: Optional[str]
    ) -> Optional[TranslationCall]:
        descriptor = object_properties(node)
        key_node = literal_node(property_value(descriptor, "id"))
        if key_node is None or not key_node.value:
            return None

        values = property_value(descriptor, "values") or values
        return TranslationCall(
            key_name=key_node.value,
            key_span=key_node.span,
            default_value=literal_text(property_value(descriptor, "defaultMessage")),
            variables=object_keys(values if values is not None and values.kind == OBJECT else None),
            component=component,
        )

    def _from_element(self, node: SyntaxNode) -> Optional[TranslationCall]:
        key_node = literal_node(attribute_value(node, "id"))
        if key_node is None or not key_node.value:
            return None
        return TranslationCall(
            key_name=key_node.value,
            key_span=key_node.span,
            default_value=literal_text(attribute_value(node, "defaultMessage")),
            variables=object_keys(expression_object(attribute_value(node, "values"))),
            component=node.name,
        )

    def message_template(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.kind == PROPERTY and property_name(node) == "defaultMessage":
            return literal_node(node.child("value"))
        if node.kind == ATTRIBUTE and node.name == "defaultMessage":
            return literal_node(node.child("value"))
        return None

    def call_snippet(self, key: str) -> str:
        return "{formatMessage({ id: " + quote(key) + " })}"

    def catalog_path(self, config: ScanConfig, locale: str, namespace: Optional[str] = None) -> Optional[str]:
        settings = config.catalogs.formatjs
        if settings is None or not settings.messages_globs:
            return None
        existing = self._locale_files(config.root, settings.messages_globs, locale)
        if existing:
            return relative_posix(existing[0], config.root)
        pattern = fill_pattern(settings.messages_globs[0], locale=locale)
        if any(char in pattern for char in _GLOB_CHARS):
            parent = PurePath(pattern).parent
            while any(char in str(parent) for char in _GLOB_CHARS):
                parent = parent.parent
            return (parent / f"{locale}.json").as_posix()
        return pattern
