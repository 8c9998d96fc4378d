"""Tree-sitter powered parser producing normalized syntax trees.

The tree-sitter concrete syntax tree is converted into a small closed set of
node kinds. Every kind has an explicit, ordered list of child slots in
``VISIT_ORDER``; traversal never inspects node attributes reflectively.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .models import Span

PROGRAM = "Program"
CALL = "Call"
TAGGED_TEMPLATE = "TaggedTemplate"
MEMBER = "Member"
IDENTIFIER = "Identifier"
STRING = "String"
TEMPLATE = "Template"
OBJECT = "Object"
PROPERTY = "Property"
ELEMENT = "Element"
ATTRIBUTE = "Attribute"
MARKUP_TEXT = "MarkupText"
MARKUP_EXPRESSION = "MarkupExpression"
OTHER = "Other"

VISIT_ORDER: Dict[str, Tuple[str, ...]] = {
    PROGRAM: ("body",),
    CALL: ("callee", "arguments"),
    TAGGED_TEMPLATE: ("tag", "quasi"),
    MEMBER: ("object", "property"),
    IDENTIFIER: (),
    STRING: (),
    TEMPLATE: ("expressions",),
    OBJECT: ("properties",),
    PROPERTY: ("key", "value"),
    ELEMENT: ("name", "attributes", "children"),
    ATTRIBUTE: ("name", "value"),
    MARKUP_TEXT: (),
    MARKUP_EXPRESSION: ("expression",),
    OTHER: ("body",),
}

SOURCE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")

_TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
_TSX = Language(tree_sitter_typescript.language_tsx())

_SKIPPED_TYPES = {"comment", "html_comment"}
_MARKUP_TEXT_TYPES = {"jsx_text", "html_character_reference"}
_IDENTIFIER_TYPES = {
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "private_property_identifier",
    "type_identifier",
    "this",
}
_ESCAPE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "\n": "",
    "\r\n": "",
}


class ParseError(RuntimeError):
    """Raised when a source file cannot be parsed into a syntax tree."""

    def __init__(self, path: str, message: str, line: Optional[int] = None) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.line = line


@dataclass(eq=False)
class SyntaxNode:
    """Normalized syntax node: a kind, a span and named child slots."""

    kind: str
    span: Span
    value: Optional[str] = None
    slots: Dict[str, List["SyntaxNode"]] = field(default_factory=dict)
    raw_kind: Optional[str] = None
    self_closing: bool = False

    def child(self, slot: str) -> Optional["SyntaxNode"]:
        nodes = self.slots.get(slot)
        return nodes[0] if nodes else None

    def children(self, slot: str) -> List["SyntaxNode"]:
        return self.slots.get(slot, [])

    def iter_children(self) -> Iterator["SyntaxNode"]:
        for slot in VISIT_ORDER[self.kind]:
            yield from self.slots.get(slot, ())

    @property
    def name(self) -> Optional[str]:
        """Element/attribute name, or the identifier text for identifiers."""
        if self.kind == IDENTIFIER:
            return self.value
        name_node = self.child("name")
        return name_node.value if name_node is not None else None

    def attribute(self, name: str) -> Optional["SyntaxNode"]:
        for attribute in self.children("attributes"):
            if attribute.kind == ATTRIBUTE and attribute.name == name:
                return attribute
        return None


def is_source_file(path: str) -> bool:
    return PurePath(path).suffix.lower() in SOURCE_SUFFIXES


def parse_source(path: str, source: str) -> SyntaxNode:
    """Parse ``source`` (the contents of ``path``) into a normalized tree."""
    suffix = PurePath(path).suffix.lower()
    if suffix not in SOURCE_SUFFIXES:
        raise ParseError(path, f"unsupported file type '{suffix or path}'")
    language = _TYPESCRIPT if suffix == ".ts" else _TSX
    source_bytes = source.encode("utf-8")
    tree = Parser(language).parse(source_bytes)
    root = tree.root_node
    if root.has_error:
        error = _first_error(root)
        line = error.start_point[0] + 1 if error is not None else None
        location = f" near line {line}" if line is not None else ""
        raise ParseError(path, f"syntax error{location}", line)
    return _Converter(source_bytes).convert(root)


def _first_error(node: Node) -> Optional[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


class _Converter:
    """Maps tree-sitter nodes onto ``SyntaxNode`` kinds."""

    def __init__(self, source_bytes: bytes) -> None:
        self._source = source_bytes
        self._handlers: Dict[str, Callable[[Node], SyntaxNode]] = {
            "program": self._program,
            "call_expression": self._call,
            "member_expression": self._member,
            "string": self._string,
            "template_string": self._template,
            "object": self._object,
            "pair": self._pair,
            "shorthand_property_identifier": self._shorthand,
            "jsx_element": self._element,
            "jsx_self_closing_element": self._self_closing_element,
            "jsx_attribute": self._attribute,
            "jsx_expression": self._markup_expression,
        }

    def convert(self, node: Node) -> SyntaxNode:
        handler = self._handlers.get(node.type)
        if handler is not None:
            return handler(node)
        if node.type in _IDENTIFIER_TYPES:
            return self._identifier(node)
        return SyntaxNode(
            kind=OTHER,
            span=self._span(node),
            raw_kind=node.type,
            slots={"body": self._convert_all(node.named_children)},
        )

    # ------------------------------------------------------------------
    # Helpers

    def _text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _column(self, byte_offset: int) -> int:
        line_start = self._source.rfind(b"\n", 0, byte_offset) + 1
        prefix = self._source[line_start:byte_offset].decode("utf-8", errors="replace")
        return len(prefix) + 1

    def _span(self, node: Node) -> Span:
        return self._span_between(node, node)

    def _span_between(self, first: Node, last: Node) -> Span:
        return Span(
            start_byte=first.start_byte,
            end_byte=last.end_byte,
            start_line=first.start_point[0] + 1,
            start_column=self._column(first.start_byte),
            end_line=last.end_point[0] + 1,
            end_column=self._column(last.end_byte),
        )

    def _byte_span(self, start: int, end: int) -> Span:
        return Span(
            start_byte=start,
            end_byte=end,
            start_line=self._source.count(b"\n", 0, start) + 1,
            start_column=self._column(start),
            end_line=self._source.count(b"\n", 0, end) + 1,
            end_column=self._column(end),
        )

    def _convert_all(self, nodes: List[Node]) -> List[SyntaxNode]:
        return [self.convert(child) for child in nodes if child.type not in _SKIPPED_TYPES]

    def _identifier(self, node: Node) -> SyntaxNode:
        return SyntaxNode(kind=IDENTIFIER, span=self._span(node), value=self._text(node), raw_kind=node.type)

    # ------------------------------------------------------------------
    # Expressions

    def _program(self, node: Node) -> SyntaxNode:
        return SyntaxNode(
            kind=PROGRAM,
            span=self._span(node),
            raw_kind=node.type,
            slots={"body": self._convert_all(node.named_children)},
        )

    def _call(self, node: Node) -> SyntaxNode:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        callee = [self.convert(function)] if function is not None else []
        if arguments is not None and arguments.type == "template_string":
            return SyntaxNode(
                kind=TAGGED_TEMPLATE,
                span=self._span(node),
                raw_kind=node.type,
                slots={"tag": callee, "quasi": [self._template(arguments)]},
            )
        args = self._convert_all(arguments.named_children) if arguments is not None else []
        return SyntaxNode(
            kind=CALL,
            span=self._span(node),
            raw_kind=node.type,
            slots={"callee": callee, "arguments": args},
        )

    def _member(self, node: Node) -> SyntaxNode:
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        slots: Dict[str, List[SyntaxNode]] = {}
        if obj is not None:
            slots["object"] = [self.convert(obj)]
        if prop is not None:
            slots["property"] = [self._identifier(prop)]
        return SyntaxNode(
            kind=MEMBER,
            span=self._span(node),
            value=self._text(node),
            raw_kind=node.type,
            slots=slots,
        )

    def _string(self, node: Node, *, verbatim: bool = False) -> SyntaxNode:
        raw = self._text(node)[1:-1]
        value = raw if verbatim else _unescape(raw)
        return SyntaxNode(kind=STRING, span=self._span(node), value=value, raw_kind=node.type)

    def _template(self, node: Node) -> SyntaxNode:
        pieces: List[str] = []
        expressions: List[SyntaxNode] = []
        cursor = node.start_byte + 1
        position = 0
        for child in (c for c in node.named_children if c.type == "template_substitution"):
            pieces.append(_unescape(self._source[cursor : child.start_byte].decode("utf-8", errors="replace")))
            inner = [c for c in child.named_children if c.type not in _SKIPPED_TYPES]
            if len(inner) == 1 and inner[0].type == "identifier":
                pieces.append("{" + self._text(inner[0]) + "}")
            else:
                pieces.append("{" + str(position) + "}")
                position += 1
            expressions.extend(self.convert(expression) for expression in inner)
            cursor = child.end_byte
        pieces.append(_unescape(self._source[cursor : node.end_byte - 1].decode("utf-8", errors="replace")))
        return SyntaxNode(
            kind=TEMPLATE,
            span=self._span(node),
            value="".join(pieces),
            raw_kind=node.type,
            slots={"expressions": expressions},
        )

    def _object(self, node: Node) -> SyntaxNode:
        return SyntaxNode(
            kind=OBJECT,
            span=self._span(node),
            raw_kind=node.type,
            slots={"properties": self._convert_all(node.named_children)},
        )

    def _pair(self, node: Node) -> SyntaxNode:
        key = node.child_by_field_name("key")
        value = node.child_by_field_name("value")
        slots: Dict[str, List[SyntaxNode]] = {}
        if key is not None:
            slots["key"] = [self._identifier(key) if key.type == "property_identifier" else self.convert(key)]
        if value is not None:
            slots["value"] = [self.convert(value)]
        return SyntaxNode(kind=PROPERTY, span=self._span(node), raw_kind=node.type, slots=slots)

    def _shorthand(self, node: Node) -> SyntaxNode:
        return SyntaxNode(
            kind=PROPERTY,
            span=self._span(node),
            raw_kind=node.type,
            slots={"key": [self._identifier(node)]},
        )

    # ------------------------------------------------------------------
    # Markup

    def _element(self, node: Node) -> SyntaxNode:
        open_tag = node.child_by_field_name("open_tag")
        close_tag = node.child_by_field_name("close_tag")
        slots = self._tag_slots(open_tag)
        start = open_tag.end_byte if open_tag is not None else node.start_byte
        end = close_tag.start_byte if close_tag is not None else node.end_byte
        slots["children"] = self._markup_children(node, start, end)
        return SyntaxNode(kind=ELEMENT, span=self._span(node), raw_kind=node.type, slots=slots)

    def _markup_children(self, node: Node, start: int, end: int) -> List[SyntaxNode]:
        # Text runs are cut from the source between the non-text children.
        children: List[SyntaxNode] = []
        cursor = start
        for child in node.named_children:
            if child.start_byte < start or child.end_byte > end or child.type in _MARKUP_TEXT_TYPES:
                continue
            if child.start_byte > cursor:
                children.append(self._markup_text(cursor, child.start_byte))
            if child.type not in _SKIPPED_TYPES:
                children.append(self.convert(child))
            cursor = child.end_byte
        if end > cursor:
            children.append(self._markup_text(cursor, end))
        return children

    def _self_closing_element(self, node: Node) -> SyntaxNode:
        slots = self._tag_slots(node)
        slots["children"] = []
        return SyntaxNode(
            kind=ELEMENT,
            span=self._span(node),
            raw_kind=node.type,
            slots=slots,
            self_closing=True,
        )

    def _tag_slots(self, tag: Optional[Node]) -> Dict[str, List[SyntaxNode]]:
        slots: Dict[str, List[SyntaxNode]] = {"name": [], "attributes": []}
        if tag is None:
            return slots
        name = tag.child_by_field_name("name")
        if name is not None:
            slots["name"] = [
                SyntaxNode(kind=IDENTIFIER, span=self._span(name), value=self._text(name), raw_kind=name.type)
            ]
        slots["attributes"] = [
            self.convert(child)
            for child in tag.children_by_field_name("attribute")
            if child.type not in _SKIPPED_TYPES
        ]
        return slots

    def _attribute(self, node: Node) -> SyntaxNode:
        named = [child for child in node.named_children if child.type not in _SKIPPED_TYPES]
        slots: Dict[str, List[SyntaxNode]] = {"name": [], "value": []}
        if named:
            name = named[0]
            slots["name"] = [
                SyntaxNode(kind=IDENTIFIER, span=self._span(name), value=self._text(name), raw_kind=name.type)
            ]
        if len(named) > 1:
            value = named[1]
            if value.type == "string":
                slots["value"] = [self._string(value, verbatim=True)]
            else:
                slots["value"] = [self.convert(value)]
        return SyntaxNode(kind=ATTRIBUTE, span=self._span(node), raw_kind=node.type, slots=slots)

    def _markup_text(self, start: int, end: int) -> SyntaxNode:
        """Text run between ``start`` and ``end``; the span covers only its non-blank core."""
        raw = self._source[start:end].decode("utf-8", errors="replace")
        value = html.unescape(raw) if "&" in raw else raw
        stripped = raw.strip()
        if stripped:
            lead = raw[: len(raw) - len(raw.lstrip())]
            trail = raw[len(raw.rstrip()) :]
            start += len(lead.encode("utf-8"))
            end -= len(trail.encode("utf-8"))
        return SyntaxNode(kind=MARKUP_TEXT, span=self._byte_span(start, end), value=value, raw_kind="jsx_text")

    def _markup_expression(self, node: Node) -> SyntaxNode:
        return SyntaxNode(
            kind=MARKUP_EXPRESSION,
            span=self._span(node),
            raw_kind=node.type,
            slots={"expression": self._convert_all(node.named_children)},
        )


def _unescape(raw: str) -> str:
    def _replace(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[token]
        try:
            if token.startswith("u{"):
                return chr(int(token[2:-1], 16))
            if token.startswith("u") and len(token) == 5:
                return chr(int(token[1:], 16))
            if token.startswith("x") and len(token) == 3:
                return chr(int(token[1:], 16))
        except ValueError:
            return match.group(0)
        return token

    return _ESCAPE.sub(_replace, raw)


__all__ = [
    "ATTRIBUTE",
    "CALL",
    "ELEMENT",
    "IDENTIFIER",
    "MARKUP_EXPRESSION",
    "MARKUP_TEXT",
    "MEMBER",
    "OBJECT",
    "OTHER",
    "PROGRAM",
    "PROPERTY",
    "STRING",
    "TAGGED_TEMPLATE",
    "TEMPLATE",
    "VISIT_ORDER",
    "ParseError",
    "SyntaxNode",
    "is_source_file",
    "parse_source",
]
