"""Tests for the FormatJS adapter."""

from __future__ import annotations

from i18nscan.adapters import FormatJSAdapter
from i18nscan.parser import STRING, parse_source
from tests._fixtures.project_builder import ProjectBuilder
from tests._fixtures.syntax import extract_calls, walk


def _config(project: ProjectBuilder, globs: list[str] | None = None):
    return project.config(
        {
            "library": "formatjs",
            "locales": ["en", "fr"],
            "catalogs": {"formatjs": {"messagesGlobs": globs or ["lang/{locale}.json"]}},
        }
    )


def test_extracts_format_message_descriptor() -> None:
    source = 'intl.formatMessage({ id: "app.title", defaultMessage: "Hello {name}" }, { name });'
    calls = extract_calls(FormatJSAdapter(), source, path="a.ts")

    assert len(calls) == 1
    call = calls[0]
    assert call.key_name == "app.title"
    assert call.namespace is None
    assert call.default_value == "Hello {name}"
    assert call.variables == ("name",)
    assert call.component == "formatMessage"


def test_values_inside_descriptor() -> None:
    source = 'defineMessage({ id: "cart.count", values: { count: 1 } });'
    call = extract_calls(FormatJSAdapter(), source, path="a.ts")[0]
    assert call.variables == ("count",)


def test_define_messages_declares_one_call_per_descriptor() -> None:
    source = """
const messages = defineMessages({
  greet: { id: "app.greet", defaultMessage: "Hi {name}" },
  bye: { id: "app.bye" },
  dynamic: { id: someId },
});
"""
    calls = extract_calls(FormatJSAdapter(), source, path="a.ts")

    assert [call.key_name for call in calls] == ["app.greet", "app.bye"]
    assert calls[0].default_value == "Hi {name}"
    assert calls[0].component == "defineMessages"
    assert calls[1].key_span.start_line == 4


def test_extracts_formatted_message_component() -> None:
    source = 'const x = <FormattedMessage id="app.greeting" defaultMessage="Hi" values={{ count: 1 }} />;'
    call = extract_calls(FormatJSAdapter(), source)[0]

    assert call.key_name == "app.greeting"
    assert call.default_value == "Hi"
    assert call.variables == ("count",)


def test_ignores_non_literal_descriptors() -> None:
    source = """
        formatMessage(descriptor);
        formatMessage({ id: someId });
        format({ id: "x" });
    """
    assert extract_calls(FormatJSAdapter(), source, path="a.ts") == []


def test_default_message_is_a_template() -> None:
    adapter = FormatJSAdapter()
    tree = parse_source("a.tsx", 'formatMessage({ id: "a", defaultMessage: "{n, plural, other {#}}" });')

    templates = [adapter.message_template(node) for node in walk(tree)]
    templates = [node for node in templates if node is not None]

    assert len(templates) == 1
    assert templates[0].kind == STRING
    assert templates[0].value == "{n, plural, other {#}}"


def test_load_catalogs_with_descriptor_leaves(project: ProjectBuilder) -> None:
    project.write_json(
        "lang/en.json",
        {"app.title": "Hello", "app.nested": {"defaultMessage": "Nested", "description": "ctx"}},
    )
    project.write_json("lang/fr.json", {"app.title": "Bonjour"})

    store = FormatJSAdapter().load_catalogs(_config(project))

    assert store.catalog("en") == {"app.title": "Hello", "app.nested": "Nested"}
    assert store.catalog("fr") == {"app.title": "Bonjour"}


def test_locale_agnostic_glob_selects_files_by_name(project: ProjectBuilder) -> None:
    project.write_json("compiled/en.json", {"a": "A"})
    project.write_json("compiled/fr.json", {"a": "Á"})

    store = FormatJSAdapter().load_catalogs(_config(project, ["compiled/*.json"]))

    assert store.catalog("en") == {"a": "A"}
    assert store.catalog("fr") == {"a": "Á"}


def test_snippet_and_catalog_path(project: ProjectBuilder) -> None:
    project.write_json("lang/en.json", {})
    adapter = FormatJSAdapter()
    config = _config(project)

    assert adapter.call_snippet("app.title") == "{formatMessage({ id: 'app.title' })}"
    assert adapter.catalog_path(config, "en") == "lang/en.json"
    assert adapter.catalog_path(config, "fr") == "lang/fr.json"


def test_hash_keys_use_msg_prefix(project: ProjectBuilder) -> None:
    config = project.config(
        {
            "library": "formatjs",
            "keygen": {"strategy": "hash"},
            "catalogs": {"formatjs": {"messagesGlobs": ["lang/{locale}.json"]}},
        }
    )
    assert FormatJSAdapter().generate_key("Hello", "src/App.tsx", config).startswith("msg_")
