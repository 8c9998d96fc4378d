"""Base class and syntax helpers shared by library adapters."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..catalogs import CatalogStore
from ..config import ScanConfig
from ..keygen import FILE_PATH_SLUG, generate_key
from ..models import Span, TranslationCall
from ..parser import (
    CALL,
    ELEMENT,
    IDENTIFIER,
    MARKUP_EXPRESSION,
    MEMBER,
    OBJECT,
    PROPERTY,
    STRING,
    TEMPLATE,
    SyntaxNode,
)


class LibraryAdapter(ABC):
    """Contract for one translation-library convention.

    The set of adapters is closed (see ``i18nscan.adapters.ADAPTERS``).
    """

    name: str = ""
    default_strategy: str = FILE_PATH_SLUG
    slug_separator: str = "-"
    hash_prefix: str = "key_"
    wrapper_components: FrozenSet[str] = frozenset()
    validates_catalog_messages: bool = False

    @abstractmethod
    def detect(self, config: ScanConfig) -> bool:
        """Return True when this adapter's catalog block is configured."""

    @abstractmethod
    def load_catalogs(self, config: ScanConfig) -> CatalogStore:
        """Read every catalog for every configured locale into a store."""

    @abstractmethod
    def extract_translation_call(self, node: SyntaxNode) -> Optional[TranslationCall]:
        """Recognize this library's invocation idiom at ``node``."""

    def extract_translation_calls(self, node: SyntaxNode) -> List[TranslationCall]:
        """Every call requested at ``node``; one node may declare several messages."""
        call = self.extract_translation_call(node)
        return [call] if call is not None else []

    @abstractmethod
    def call_snippet(self, key: str) -> str:
        """Source snippet requesting ``key``, used by externalize fixes."""

    @abstractmethod
    def catalog_path(self, config: ScanConfig, locale: str, namespace: Optional[str] = None) -> Optional[str]:
        """Catalog file a key for ``locale`` (and ``namespace``) belongs in."""

    def generate_key(self, text: str, file_path: str, config: ScanConfig) -> str:
        strategy = config.keygen.strategy or self.default_strategy
        return generate_key(
            text,
            file_path,
            strategy,
            config.keygen.max_len,
            separator=self.slug_separator,
            hash_prefix=self.hash_prefix,
        )

    def catalog_key(self, call: TranslationCall, config: ScanConfig) -> str:
        """Flattened catalog key requested by ``call``."""
        return call.flattened_key

    def message_template(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        """Literal at ``node`` holding an ICU message template, if any."""
        return None

    def wraps_translatable_text(self, node: SyntaxNode) -> bool:
        return node.kind == ELEMENT and node.name in self.wrapper_components

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def resolve_path(root: Path, pattern: str) -> Path:
    return Path(pattern) if os.path.isabs(pattern) else root / pattern


def callee_parts(node: SyntaxNode) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(receiver, name)`` for a call/tag target: ``i18n.t`` -> ``("i18n", "t")``."""
    if node.kind == IDENTIFIER:
        return None, node.value
    if node.kind == MEMBER:
        obj = node.child("object")
        prop = node.child("property")
        receiver = None
        if obj is not None:
            receiver = obj.value if obj.kind in (IDENTIFIER, MEMBER) else None
        return receiver, prop.value if prop is not None else None
    return None, None


def call_target(node: SyntaxNode) -> Tuple[Optional[str], Optional[str]]:
    callee = node.child("callee") if node.kind == CALL else node.child("tag")
    if callee is None:
        return None, None
    return callee_parts(callee)


def literal_node(node: Optional[SyntaxNode]) -> Optional[SyntaxNode]:
    """The static string literal at ``node``, unwrapping ``{"..."}`` markup expressions."""
    if node is None:
        return None
    if node.kind == STRING:
        return node
    if node.kind == TEMPLATE and not node.children("expressions"):
        return node
    if node.kind == MARKUP_EXPRESSION:
        inner = node.children("expression")
        if len(inner) == 1:
            return literal_node(inner[0])
    return None


def literal_text(node: Optional[SyntaxNode]) -> Optional[str]:
    literal = literal_node(node)
    return literal.value if literal is not None else None


def property_name(node: SyntaxNode) -> Optional[str]:
    if node.kind != PROPERTY:
        return None
    key = node.child("key")
    if key is None or key.kind not in (IDENTIFIER, STRING):
        return None
    return key.value


def object_properties(node: Optional[SyntaxNode]) -> Dict[str, SyntaxNode]:
    """Named properties of an object literal, in source order."""
    if node is None or node.kind != OBJECT:
        return {}
    properties: Dict[str, SyntaxNode] = {}
    for prop in node.children("properties"):
        name = property_name(prop)
        if name is not None:
            properties[name] = prop
    return properties


def property_value(properties: Dict[str, SyntaxNode], name: str) -> Optional[SyntaxNode]:
    prop = properties.get(name)
    return prop.child("value") if prop is not None else None


def attribute_value(element: SyntaxNode, name: str) -> Optional[SyntaxNode]:
    attribute = element.attribute(name)
    return attribute.child("value") if attribute is not None else None


def expression_object(node: Optional[SyntaxNode]) -> Optional[SyntaxNode]:
    """Object literal at ``node`` or inside a ``{...}`` markup expression."""
    if node is None:
        return None
    if node.kind == OBJECT:
        return node
    if node.kind == MARKUP_EXPRESSION:
        inner = node.children("expression")
        if len(inner) == 1 and inner[0].kind == OBJECT:
            return inner[0]
    return None


def object_keys(node: Optional[SyntaxNode], exclude: FrozenSet[str] = frozenset()) -> Tuple[str, ...]:
    return tuple(name for name in object_properties(node) if name not in exclude)


def span_between(first: SyntaxNode, last: SyntaxNode) -> Span:
    return Span(
        start_byte=first.span.start_byte,
        end_byte=last.span.end_byte,
        start_line=first.span.start_line,
        start_column=first.span.start_column,
        end_line=last.span.end_line,
        end_column=last.span.end_column,
    )


def quote(text: str) -> str:
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def split_namespace(key: str) -> Tuple[Optional[str], str]:
    """``"common:hello"`` -> ``("common", "hello")``; keys without a prefix keep no namespace."""
    namespace, sep, rest = key.partition(":")
    if not sep or not namespace:
        return None, key
    return namespace, rest


__all__: List[str] = [
    "LibraryAdapter",
    "attribute_value",
    "call_target",
    "callee_parts",
    "expression_object",
    "literal_node",
    "literal_text",
    "object_keys",
    "object_properties",
    "property_name",
    "property_value",
    "quote",
    "resolve_path",
    "span_between",
    "split_namespace",
]
