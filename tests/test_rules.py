"""Tests for i18nscan.rules."""

from __future__ import annotations

import textwrap

import pytest

from i18nscan.models import HARD_CODED_TEXT, ICU_SYNTAX, SEVERITY_ERROR, SEVERITY_WARNING
from i18nscan.parser import SyntaxNode
from i18nscan.rules import HardCodedTextRule, Rule, RuleContext, should_be_translated
from i18nscan.scanner import Scanner
from tests._fixtures.project_builder import ProjectBuilder, i18next_config


def _scan(project: ProjectBuilder, content: str, data: dict | None = None, **kwargs):
    scanner = Scanner(project.config(data or i18next_config()), **kwargs)
    return scanner.scan_single_file("src/App.tsx", textwrap.dedent(content).lstrip("\n"))


def _hard_coded(result):
    return [finding for finding in result.findings if finding.rule_id == HARD_CODED_TEXT]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello there", True),
        ("Save", True),
        ("OK", False),
        ("   ", False),
        ("123", False),
        ("--- 42 ---", False),
        ("(1, 2)", False),
        ("onClick", False),
        ("undefined", False),
        ("className", False),
    ],
)
def test_should_be_translated(text: str, expected: bool) -> None:
    assert should_be_translated(text) is expected


def test_markup_text_is_reported_with_externalize_fix(project: ProjectBuilder) -> None:
    result = _scan(project, "export const App = () => <div>Hello there</div>;\n")

    findings = _hard_coded(result)
    assert len(findings) == 1
    finding = findings[0]
    assert finding.severity == SEVERITY_WARNING
    assert finding.source == "Hello there"
    assert finding.line == 1
    assert finding.column == 31
    assert finding.end_column == 42
    assert finding.suggestion is not None
    assert finding.suggestion.type == "externalize"
    assert finding.suggestion.key_name == "App.hello-there"
    assert finding.suggestion.replacement == "{t('App.hello-there')}"
    assert finding.suggestion.catalog_path == "locales/en/common.json"


def test_multiline_text_span_is_trimmed(project: ProjectBuilder) -> None:
    result = _scan(
        project,
        """
        export const App = () => (
          <p>
            Welcome to the shop
          </p>
        );
        """,
    )

    finding = _hard_coded(result)[0]
    assert finding.line == 3
    assert finding.column == 5
    assert finding.end_line == 3
    assert finding.source == "Welcome to the shop"


def test_translatable_attributes_are_reported(project: ProjectBuilder) -> None:
    result = _scan(
        project,
        """
        export const Form = () => (
          <form>
            <input placeholder="Enter your name" type="text" className="field" />
            <img alt={"Company logo"} src="/logo.png" />
          </form>
        );
        """,
    )

    findings = _hard_coded(result)
    assert [finding.source for finding in findings] == ["Enter your name", "Company logo"]
    assert "placeholder attribute" in findings[0].message
    assert findings[0].suggestion is not None
    assert findings[0].suggestion.description == "Extract placeholder attribute to a translation key"


def test_non_translatable_text_is_ignored(project: ProjectBuilder) -> None:
    result = _scan(
        project,
        """
        export const Stats = () => (
          <ul>
            <li>42</li>
            <li>OK</li>
            <li>--</li>
            <li>{count}</li>
          </ul>
        );
        """,
    )

    assert _hard_coded(result) == []


def test_text_inside_translation_wrappers_is_ignored(project: ProjectBuilder) -> None:
    result = _scan(
        project,
        """
        export const App = () => (
          <Trans i18nKey="common:intro">
            Welcome <strong>friend</strong>
          </Trans>
        );
        """,
    )

    assert _hard_coded(result) == []


def test_icu_rule_reports_broken_default_messages(project: ProjectBuilder) -> None:
    data = {
        "library": "formatjs",
        "catalogs": {"formatjs": {"messagesGlobs": ["lang/{locale}.json"]}},
    }
    project.write_json("lang/en.json", {"cart.count": "ok", "cart.ok": "ok"})
    result = _scan(
        project,
        """
        formatMessage({ id: "cart.count", defaultMessage: "{count, plural, one {# item}}" });
        formatMessage({ id: "cart.ok", defaultMessage: "{count, plural, one {# item} other {# items}}" });
        """,
        data,
    )

    icu = [finding for finding in result.findings if finding.rule_id == ICU_SYNTAX]
    assert len(icu) == 1
    assert icu[0].severity == SEVERITY_ERROR
    assert "'other'" in icu[0].message
    assert icu[0].line == 1
    assert result.summary.icu_errors == 1


class _ExplodingRule(Rule):
    rule_id = "TEST999"

    def check(self, node: SyntaxNode, context: RuleContext) -> None:
        raise RuntimeError("boom")


def test_failing_rule_does_not_suppress_others(project: ProjectBuilder) -> None:
    result = _scan(
        project,
        "export const App = () => <div>Hello there</div>;\n",
        rules=[_ExplodingRule(), HardCodedTextRule()],
    )

    assert len(_hard_coded(result)) == 1
    assert result.summary.total_files == 1
