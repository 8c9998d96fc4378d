"""Per-node rules evaluated while the scanner walks a syntax tree."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from .adapters.base import LibraryAdapter, literal_node
from .config import ScanConfig
from .icu import validate_message
from .models import (
    HARD_CODED_TEXT,
    ICU_SYNTAX,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    Finding,
    FixSuggestion,
    make_finding,
)
from .parser import ATTRIBUTE, MARKUP_TEXT, SyntaxNode

TRANSLATABLE_ATTRIBUTES = frozenset(
    {
        "title",
        "alt",
        "placeholder",
        "aria-label",
        "aria-description",
        "label",
        "aria-placeholder",
        "aria-valuetext",
    }
)

NON_TRANSLATABLE = frozenset(
    {
        "id",
        "className",
        "style",
        "key",
        "ref",
        "true",
        "false",
        "null",
        "undefined",
        "onClick",
        "onChange",
        "onSubmit",
    }
)

MIN_TEXT_LENGTH = 3

_SYMBOLS_ONLY = re.compile(r"^[\d\s\-_.,;:!?()\[\]{}]+$")


@dataclass
class RuleContext:
    """State one file's traversal shares with every rule."""

    file: str
    source: str
    config: ScanConfig
    adapter: LibraryAdapter
    findings: List[Finding] = field(default_factory=list)
    within_translation: bool = False

    def report(self, finding: Finding) -> None:
        self.findings.append(finding)

    def generate_key(self, text: str) -> str:
        return self.adapter.generate_key(text, self.file, self.config)

    def externalize(self, text: str, description: str) -> FixSuggestion:
        key = self.generate_key(text)
        return FixSuggestion(
            type="externalize",
            description=description,
            key_name=key,
            replacement=self.adapter.call_snippet(key),
            catalog_path=self.adapter.catalog_path(self.config, self.config.default_locale),
        )


class Rule(ABC):
    """A check run once for every visited node."""

    rule_id: str = ""
    name: str = ""
    severity: str = SEVERITY_WARNING
    description: str = ""

    @abstractmethod
    def check(self, node: SyntaxNode, context: RuleContext) -> None:
        """Inspect ``node`` and ``context.report`` any findings."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule_id})"


def should_be_translated(text: str) -> bool:
    """Return True for text a person would read, as opposed to identifiers and symbols."""
    if len(text) < MIN_TEXT_LENGTH:
        return False
    if not text.strip():
        return False
    if _SYMBOLS_ONLY.match(text):
        return False
    return text not in NON_TRANSLATABLE


class HardCodedTextRule(Rule):
    """Flags markup text and label-like attributes that bypass the translation layer."""

    rule_id = HARD_CODED_TEXT
    name = "hard-coded-string"
    severity = SEVERITY_WARNING
    description = "Detects hard-coded strings that should be externalized for translation"

    def check(self, node: SyntaxNode, context: RuleContext) -> None:
        if context.within_translation:
            return
        if node.kind == MARKUP_TEXT:
            self._check_text(node, context)
        elif node.kind == ATTRIBUTE and node.name in TRANSLATABLE_ATTRIBUTES:
            self._check_attribute(node, context)

    def _check_text(self, node: SyntaxNode, context: RuleContext) -> None:
        text = (node.value or "").strip()
        if not should_be_translated(text):
            return
        context.report(
            make_finding(
                rule_id=self.rule_id,
                severity=self.severity,
                message=f'Hard-coded string found: "{text}"',
                file=context.file,
                span=node.span,
                source=text,
                suggestion=context.externalize(text, "Extract this string to a translation key"),
            )
        )

    def _check_attribute(self, node: SyntaxNode, context: RuleContext) -> None:
        literal = literal_node(node.child("value"))
        if literal is None or literal.value is None:
            return
        text = literal.value
        if not should_be_translated(text):
            return
        context.report(
            make_finding(
                rule_id=self.rule_id,
                severity=self.severity,
                message=f'Hard-coded string in {node.name} attribute: "{text}"',
                file=context.file,
                span=literal.span,
                source=text,
                suggestion=context.externalize(text, f"Extract {node.name} attribute to a translation key"),
            )
        )


class IcuSyntaxRule(Rule):
    """Validates message templates the active adapter recognizes in source code."""

    rule_id = ICU_SYNTAX
    name = "icu-syntax-error"
    severity = SEVERITY_ERROR
    description = "Detects ICU syntax errors in translation messages"

    def check(self, node: SyntaxNode, context: RuleContext) -> None:
        template = context.adapter.message_template(node)
        if template is None or not template.value:
            return
        for error in validate_message(template.value):
            context.report(
                make_finding(
                    rule_id=self.rule_id,
                    severity=self.severity,
                    message=f"ICU syntax error: {error.message}",
                    file=context.file,
                    span=template.span,
                    source=template.value,
                    metadata={"offset": error.offset},
                    discriminator=f"{error.offset}:{error.message}",
                )
            )


def default_rules() -> List[Rule]:
    return [HardCodedTextRule(), IcuSyntaxRule()]


__all__: List[str] = [
    "HardCodedTextRule",
    "IcuSyntaxRule",
    "NON_TRANSLATABLE",
    "Rule",
    "RuleContext",
    "TRANSLATABLE_ATTRIBUTES",
    "default_rules",
    "should_be_translated",
]
