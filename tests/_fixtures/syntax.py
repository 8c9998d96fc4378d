"""Syntax-tree helpers shared by parser, adapter and rule tests."""

from __future__ import annotations

from typing import Iterator, List, Optional

from i18nscan.adapters.base import LibraryAdapter
from i18nscan.models import TranslationCall
from i18nscan.parser import SyntaxNode, parse_source


def walk(node: SyntaxNode) -> Iterator[SyntaxNode]:
    """Yield ``node`` and its descendants in pre-order."""
    yield node
    for child in node.iter_children():
        yield from walk(child)


def find_all(source: str, kind: str, path: str = "example.tsx") -> List[SyntaxNode]:
    return [node for node in walk(parse_source(path, source)) if node.kind == kind]


def find_first(source: str, kind: str, path: str = "example.tsx") -> Optional[SyntaxNode]:
    nodes = find_all(source, kind, path)
    return nodes[0] if nodes else None


def extract_calls(adapter: LibraryAdapter, source: str, path: str = "example.tsx") -> List[TranslationCall]:
    """Every translation call ``adapter`` recognizes in ``source``, in traversal order."""
    calls: List[TranslationCall] = []
    for node in walk(parse_source(path, source)):
        calls.extend(adapter.extract_translation_calls(node))
    return calls


__all__ = ["extract_calls", "find_all", "find_first", "walk"]
