"""Tests for the Lingui adapter."""

from __future__ import annotations

import textwrap

from i18nscan.adapters import LinguiAdapter
from tests._fixtures.project_builder import ProjectBuilder
from tests._fixtures.syntax import extract_calls


def _config(project: ProjectBuilder, pattern: str = "locale/{locale}/messages"):
    return project.config(
        {"library": "lingui", "locales": ["en", "fr"], "catalogs": {"lingui": {"pathPattern": pattern}}}
    )


def _po(entries: dict) -> str:
    body = "".join(f'\nmsgid "{key}"\nmsgstr "{value}"\n' for key, value in entries.items())
    return 'msgid ""\nmsgstr ""\n"Content-Type: text/plain; charset=UTF-8\\n"\n' + body


def test_tagged_template_text_is_the_key() -> None:
    calls = extract_calls(LinguiAdapter(), "const s = t`Hello ${name}`;", path="a.ts")

    assert len(calls) == 1
    assert calls[0].key_name == "Hello {name}"
    assert calls[0].variables == ("name",)
    assert calls[0].namespace is None


def test_positional_placeholders_skip_named_substitutions() -> None:
    call = extract_calls(LinguiAdapter(), "const m = t`${name} has ${user.count} items`;", path="a.ts")[0]
    assert call.key_name == "{name} has {0} items"
    assert call.variables == ("name",)


def test_i18n_underscore_call() -> None:
    calls = extract_calls(LinguiAdapter(), 'i18n._("Welcome back");', path="a.ts")
    assert [call.key_name for call in calls] == ["Welcome back"]


def test_descriptor_with_explicit_id() -> None:
    call = extract_calls(LinguiAdapter(), 'msg({ id: "nav.home", message: "Home" });', path="a.ts")[0]
    assert call.key_name == "nav.home"
    assert call.default_value == "Home"


def test_descriptor_message_is_key_without_id() -> None:
    call = extract_calls(LinguiAdapter(), 'defineMessage({ message: "Checkout" });', path="a.ts")[0]
    assert call.key_name == "Checkout"


def test_trans_children_form_the_key() -> None:
    source = "const x = <Trans>Hello <b>{name}</b>, welcome!</Trans>;"
    calls = extract_calls(LinguiAdapter(), source)

    assert len(calls) == 1
    assert calls[0].key_name == "Hello <0>{name}</0>, welcome!"
    assert calls[0].variables == ("name",)


def test_trans_whitespace_is_normalized() -> None:
    source = textwrap.dedent(
        """
        const x = (
          <Trans>
            Read the
            docs
          </Trans>
        );
        """
    )
    call = extract_calls(LinguiAdapter(), source)[0]
    assert call.key_name == "Read the docs"


def test_trans_with_id() -> None:
    call = extract_calls(LinguiAdapter(), 'const x = <Trans id="custom.id" message="Hi" />;')[0]
    assert call.key_name == "custom.id"
    assert call.default_value == "Hi"


def test_ignores_other_receivers() -> None:
    assert extract_calls(LinguiAdapter(), 'client._("x"); other.t("y");', path="a.ts") == []


def test_po_catalogs_are_found_without_extension(project: ProjectBuilder) -> None:
    project.write(
        {
            "locale/en/messages.po": _po({"Hello": "Hello", "Bye": "Bye"}),
            "locale/fr/messages.po": _po({"Hello": "Bonjour", "Bye": ""}),
        }
    )

    store = LinguiAdapter().load_catalogs(_config(project))

    assert store.catalog("en") == {"Hello": "Hello", "Bye": "Bye"}
    assert store.catalog("fr") == {"Hello": "Bonjour", "Bye": ""}


def test_json_catalogs_with_translation_leaves(project: ProjectBuilder) -> None:
    project.write_json("locale/en/messages.json", {"Hello": {"translation": "Hello"}, "Plain": "Plain"})
    project.write_json("locale/fr/messages.json", {"Hello": {"translation": "Bonjour"}})

    store = LinguiAdapter().load_catalogs(_config(project))

    assert store.catalog("en") == {"Hello": "Hello", "Plain": "Plain"}
    assert store.catalog("fr") == {"Hello": "Bonjour"}


def test_missing_catalog_leaves_locale_empty(project: ProjectBuilder) -> None:
    project.write({"locale/en/messages.po": _po({"Hello": "Hello"})})

    store = LinguiAdapter().load_catalogs(_config(project))

    assert store.keys("fr") == []
    assert "fr" in store


def test_defaults_to_hash_keys(project: ProjectBuilder) -> None:
    key = LinguiAdapter().generate_key("Hello there", "src/App.tsx", _config(project))
    assert key.startswith("msg_")


def test_snippet_and_catalog_path(project: ProjectBuilder) -> None:
    project.write({"locale/en/messages.po": _po({})})
    adapter = LinguiAdapter()
    config = _config(project)

    assert adapter.call_snippet("msg_abc") == "{t`msg_abc`}"
    assert adapter.catalog_path(config, "en") == "locale/en/messages.po"
    assert adapter.catalog_path(config, "fr") == "locale/fr/messages.po"
