"""Adapter for i18next-style namespaced JSON catalogs."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Optional

from ..catalogs import CatalogError, CatalogStore, flatten_catalog, read_json_catalog
from ..config import I18nextCatalogConfig, ScanConfig
from ..logging import get_logger
from ..models import TranslationCall
from ..parser import CALL, ELEMENT, OBJECT, SyntaxNode
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
    property_value,
    quote,
    resolve_path,
    split_namespace,
)

_LOGGER = get_logger("adapters.i18next")

_RECEIVERS = frozenset({"i18n", "i18next"})
_OPTION_KEYS = frozenset({"defaultValue", "ns"})
_NS_TOKENS = ("{ns}", "{namespace}")


class I18nextAdapter(LibraryAdapter):
    """``t("ns:key")`` calls and ``<Trans i18nKey>`` against ``namespace:dotted.path`` catalogs."""

    name = "i18next"
    slug_separator = "-"
    hash_prefix = "key_"
    wrapper_components = frozenset({"Trans", "Translation"})

    def detect(self, config: ScanConfig) -> bool:
        return config.catalogs.i18next is not None

    def load_catalogs(self, config: ScanConfig) -> CatalogStore:
        settings = config.catalogs.i18next
        if settings is None:
            raise CatalogError("i18next catalog configuration is missing")

        store = CatalogStore(config.locales)
        for locale in config.locales:
            filled = fill_pattern(settings.path_pattern, locale=locale)
            token = next((candidate for candidate in _NS_TOKENS if candidate in filled), None)
            if token is None:
                self._load_file(store, locale, resolve_path(config.root, filled), settings.default_namespace)
                continue
            for namespace in self._namespaces(config.root, settings, filled, token):
                path = resolve_path(config.root, filled.replace(token, namespace))
                self._load_file(store, locale, path, namespace)
        return store

    def _load_file(self, store: CatalogStore, locale: str, path: Path, namespace: Optional[str]) -> None:
        try:
            tree = read_json_catalog(path)
        except CatalogError as exc:
            _LOGGER.warning("Failed to load catalog for %s: %s", locale, exc)
            return
        store.merge(locale, flatten_catalog(tree, namespace=namespace), source=str(path))

    @staticmethod
    def _namespaces(root: Path, settings: I18nextCatalogConfig, filled: str, token: str) -> List[str]:
        """Configured namespaces followed by any discovered on disk for this locale."""
        names = list(settings.namespaces)
        pattern = filled[2:] if filled.startswith("./") else filled
        matcher = re.compile("^" + re.escape(pattern).replace(re.escape(token), "(?P<ns>[^/]+)") + "$")
        for path in resolve_glob(root, pattern.replace(token, "*")):
            candidate = path.as_posix() if os.path.isabs(pattern) else relative_posix(path, root)
            match = matcher.match(candidate)
            if match and match.group("ns") not in names:
                names.append(match.group("ns"))
        return names

    def extract_translation_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        if node.kind == CALL:
            return self._from_call(node)
        if node.kind == ELEMENT and node.name == "Trans":
            return self._from_trans(node)
        return None

    def _from_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        receiver, name = call_target(node)
        if name != "t" or (receiver is not None and receiver not in _RECEIVERS):
            return None
        args = node.children("arguments")
        key_node = literal_node(args[0]) if args else None
        if key_node is None or not key_node.value:
            return None

        default_value = None
        ns_option = None
        variables: List[str] = []
        for extra in args[1:3]:
            if extra.kind == OBJECT:
                options = object_properties(extra)
                default_value = literal_text(property_value(options, "defaultValue")) or default_value
                ns_option = literal_text(property_value(options, "ns")) or ns_option
                variables.extend(object_keys(extra, _OPTION_KEYS))
            elif default_value is None:
                default_value = literal_text(extra)

        namespace, key_name = split_namespace(key_node.value)
        return TranslationCall(
            key_name=key_name,
            key_span=key_node.span,
            namespace=namespace or ns_option,
            default_value=default_value,
            variables=tuple(variables),
            component="t",
        )

    def _from_trans(self, node: SyntaxNode) -> Optional[TranslationCall]:
        key_node = literal_node(attribute_value(node, "i18nKey"))
        if key_node is None or not key_node.value:
            return None
        namespace, key_name = split_namespace(key_node.value)
        values = expression_object(attribute_value(node, "values"))
        return TranslationCall(
            key_name=key_name,
            key_span=key_node.span,
            namespace=namespace or literal_text(attribute_value(node, "ns")),
            default_value=literal_text(attribute_value(node, "defaults")),
            variables=object_keys(values),
            component="Trans",
        )

    def catalog_key(self, call: TranslationCall, config: ScanConfig) -> str:
        settings = config.catalogs.i18next
        if call.namespace is None and settings is not None and settings.default_namespace:
            return f"{settings.default_namespace}:{call.key_name}"
        return call.flattened_key

    def call_snippet(self, key: str) -> str:
        return "{t(" + quote(key) + ")}"

    def catalog_path(self, config: ScanConfig, locale: str, namespace: Optional[str] = None) -> Optional[str]:
        settings = config.catalogs.i18next
        if settings is None:
            return None
        if namespace is None:
            namespace = settings.default_namespace or (settings.namespaces[0] if settings.namespaces else "common")
        return fill_pattern(settings.path_pattern, locale=locale, ns=namespace, namespace=namespace)
