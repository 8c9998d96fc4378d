"""Adapter for Lingui macros, where the message text itself is the catalog key."""

from __future__ import annotations

import re
from pathlib import Path, PurePath
from typing import Any, List, Mapping, Optional, Tuple

from ..catalogs import CatalogError, CatalogStore, flatten_catalog, read_json_catalog, read_po_catalog
from ..config import ScanConfig
from ..keygen import HASH
from ..logging import get_logger
from ..models import TranslationCall
from ..parser import (
    CALL,
    ELEMENT,
    IDENTIFIER,
    MARKUP_EXPRESSION,
    MARKUP_TEXT,
    OBJECT,
    TAGGED_TEMPLATE,
    SyntaxNode,
)
from ..paths import fill_pattern, resolve_glob
from .base import (
    LibraryAdapter,
    attribute_value,
    call_target,
    expression_object,
    literal_node,
    literal_text,
    object_keys,
    object_properties,
    property_value,
    resolve_path,
    span_between,
)

_LOGGER = get_logger("adapters.lingui")

_MACROS = frozenset({"t", "msg", "defineMessage"})
_I18N_METHODS = frozenset({"_", "t"})
_TAGS = frozenset({"t", "msg"})
_CATALOG_SUFFIXES = (".po", ".json")
_MESSAGE_FIELDS = ("translation", "message")
_WHITESPACE = re.compile(r"\s+")


def _catalog_message(entry: Mapping[str, Any]) -> Optional[str]:
    for field_name in _MESSAGE_FIELDS:
        value = entry.get(field_name)
        if isinstance(value, str):
            return value
    return None


class LinguiAdapter(LibraryAdapter):
    """``t`...` ``, ``msg``, ``i18n._`` and ``<Trans>`` against JSON or gettext catalogs."""

    name = "lingui"
    default_strategy = HASH
    slug_separator = "_"
    hash_prefix = "msg_"
    wrapper_components = frozenset({"Trans", "Plural", "Select", "SelectOrdinal"})

    def detect(self, config: ScanConfig) -> bool:
        return config.catalogs.lingui is not None

    def load_catalogs(self, config: ScanConfig) -> CatalogStore:
        settings = config.catalogs.lingui
        if settings is None:
            raise CatalogError("Lingui catalog configuration is missing")

        store = CatalogStore(config.locales)
        for locale in config.locales:
            paths = self._catalog_files(config.root, fill_pattern(settings.path_pattern, locale=locale))
            if not paths:
                _LOGGER.warning("No Lingui catalog found for %s (%s)", locale, settings.path_pattern)
                continue
            for path in paths:
                try:
                    entries = self._read(path)
                except CatalogError as exc:
                    _LOGGER.warning("Failed to load catalog for %s: %s", locale, exc)
                    continue
                store.merge(locale, entries, source=str(path))
        return store

    @staticmethod
    def _catalog_files(root: Path, pattern: str) -> List[Path]:
        if any(char in pattern for char in "*?["):
            return [path for path in resolve_glob(root, pattern) if path.suffix in _CATALOG_SUFFIXES]
        if PurePath(pattern).suffix in _CATALOG_SUFFIXES:
            return [resolve_path(root, pattern)]
        for suffix in _CATALOG_SUFFIXES:
            candidate = resolve_path(root, pattern + suffix)
            if candidate.exists():
                return [candidate]
        return []

    @staticmethod
    def _read(path: Path) -> Mapping[str, str]:
        if path.suffix == ".po":
            return read_po_catalog(path)
        return flatten_catalog(read_json_catalog(path), leaf=_catalog_message)

    def extract_translation_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        if node.kind == CALL:
            return self._from_call(node)
        if node.kind == TAGGED_TEMPLATE:
            return self._from_tagged_template(node)
        if node.kind == ELEMENT and node.name == "Trans":
            return self._from_trans(node)
        return None

    @staticmethod
    def _is_translator(receiver: Optional[str], name: Optional[str]) -> bool:
        if receiver is None:
            return name in _MACROS
        return receiver.split(".")[-1] == "i18n" and name in _I18N_METHODS

    def _from_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        receiver, name = call_target(node)
        if not self._is_translator(receiver, name):
            return None
        args = node.children("arguments")
        if not args:
            return None

        first = args[0]
        if first.kind == OBJECT:
            return self._from_descriptor(first, name)
        key_node = literal_node(first)
        if key_node is None or not key_node.value:
            return None
        values = args[1] if len(args) > 1 and args[1].kind == OBJECT else None
        return TranslationCall(
            key_name=key_node.value,
            key_span=key_node.span,
            variables=object_keys(values),
            component=name,
        )

    def _from_descriptor(self, descriptor: SyntaxNode, component: Optional[str]) -> Optional[TranslationCall]:
        properties = object_properties(descriptor)
        message = literal_node(property_value(properties, "message"))
        key_node = literal_node(property_value(properties, "id")) or message
        if key_node is None or not key_node.value:
            return None
        return TranslationCall(
            key_name=key_node.value,
            key_span=key_node.span,
            default_value=message.value if message is not None else None,
            variables=object_keys(property_value(properties, "values")),
            component=component,
        )

    def _from_tagged_template(self, node: SyntaxNode) -> Optional[TranslationCall]:
        receiver, name = call_target(node)
        if receiver is not None or name not in _TAGS:
            return None
        quasi = node.child("quasi")
        if quasi is None or not quasi.value:
            return None
        variables = tuple(
            expression.value for expression in quasi.children("expressions") if expression.kind == IDENTIFIER
        )
        return TranslationCall(
            key_name=quasi.value,
            key_span=quasi.span,
            variables=variables,
            component=name,
        )

    def _from_trans(self, node: SyntaxNode) -> Optional[TranslationCall]:
        key_node = literal_node(attribute_value(node, "id"))
        variables = object_keys(expression_object(attribute_value(node, "values")))
        if key_node is not None and key_node.value:
            return TranslationCall(
                key_name=key_node.value,
                key_span=key_node.span,
                default_value=literal_text(attribute_value(node, "message")),
                variables=variables,
                component="Trans",
            )

        children = node.children("children")
        text, names = message_from_children(children)
        if not text:
            return None
        return TranslationCall(
            key_name=text,
            key_span=span_between(children[0], children[-1]),
            variables=variables or names,
            component="Trans",
        )

    def call_snippet(self, key: str) -> str:
        return "{t`" + key.replace("\\", "\\\\").replace("`", "\\`") + "`}"

    def catalog_path(self, config: ScanConfig, locale: str, namespace: Optional[str] = None) -> Optional[str]:
        settings = config.catalogs.lingui
        if settings is None:
            return None
        pattern = fill_pattern(settings.path_pattern, locale=locale)
        if PurePath(pattern).suffix in _CATALOG_SUFFIXES:
            return pattern
        for suffix in _CATALOG_SUFFIXES:
            if resolve_path(config.root, pattern + suffix).exists():
                return pattern + suffix
        return pattern + ".po"


def message_from_children(children: List[SyntaxNode]) -> Tuple[str, Tuple[str, ...]]:
    """Render ``<Trans>`` children the way Lingui extracts them: ``Hi {name}, <0>see</0>``."""
    names: List[str] = []
    counter = [0, 0]  # next element index, next positional placeholder
    text = _render(children, names, counter)
    return _WHITESPACE.sub(" ", text).strip(), tuple(names)


def _render(children: List[SyntaxNode], names: List[str], counter: List[int]) -> str:
    pieces: List[str] = []
    for child in children:
        if child.kind == MARKUP_TEXT:
            pieces.append(child.value or "")
        elif child.kind == MARKUP_EXPRESSION:
            pieces.append(_render_expression(child, names, counter))
        elif child.kind == ELEMENT:
            index = counter[0]
            counter[0] += 1
            if child.self_closing:
                pieces.append(f"<{index}/>")
            else:
                inner = _render(child.children("children"), names, counter)
                pieces.append(f"<{index}>{inner}</{index}>")
    return "".join(pieces)


def _render_expression(node: SyntaxNode, names: List[str], counter: List[int]) -> str:
    inner = node.children("expression")
    if not inner:
        return ""
    literal = literal_text(node)
    if literal is not None:
        return literal
    if len(inner) == 1 and inner[0].kind == IDENTIFIER and inner[0].value:
        names.append(inner[0].value)
        return "{" + inner[0].value + "}"
    position = counter[1]
    counter[1] += 1
    return "{" + str(position) + "}"
