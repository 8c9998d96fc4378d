"""Tests for i18nscan.config."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from i18nscan.config import (
    DEFAULT_IGNORE,
    DEFAULT_SRC,
    ConfigError,
    ScanConfig,
    build_config,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ScanConfig)
    assert config.root == tmp_path.resolve()
    assert config.library == "auto"
    assert config.src == DEFAULT_SRC
    assert config.ignore == DEFAULT_IGNORE
    assert config.locales == ("en",)
    assert config.default_locale == "en"
    assert config.keygen.strategy is None
    assert config.keygen.max_len == 60
    assert config.report.formats == ("json",)
    assert config.report.output_dir == "reports/i18n"
    assert config.baseline is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".i18nscan.yml"
    config_file.write_text(
        """
library: i18next
src:
  - "app/**/*.tsx"
locales: [en, fr, de]
defaultLocale: en
catalogs:
  i18next:
    pathPattern: "locales/{locale}/{ns}.json"
    namespaces: [common, home]
    defaultNamespace: common
ignore:
  - "**/*.test.*"
keygen:
  strategy: namespaceSlug
  maxLen: 40
report:
  formats: [json, sarif]
  outputDir: out/i18n
budgets:
  coverage:
    fr: 0.9
    de: 75
  maxNewHardCodedPerPR: 3
baseline:
  path: .i18n-baseline.json
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.library == "i18next"
    assert config.src == ("app/**/*.tsx",)
    assert config.locales == ("en", "fr", "de")
    assert config.catalogs.i18next is not None
    assert config.catalogs.i18next.path_pattern == "locales/{locale}/{ns}.json"
    assert config.catalogs.i18next.namespaces == ("common", "home")
    assert config.catalogs.i18next.default_namespace == "common"
    assert config.catalogs.formatjs is None
    assert config.ignore == ("**/*.test.*",)
    assert config.keygen.strategy == "namespaceSlug"
    assert config.keygen.max_len == 40
    assert config.report.formats == ("json", "sarif")
    assert config.report.output_dir == "out/i18n"
    assert config.budgets.required_coverage("fr") == pytest.approx(90.0)
    assert config.budgets.required_coverage("de") == pytest.approx(75.0)
    assert config.budgets.required_coverage("en") is None
    assert config.budgets.max_new_hard_coded_per_pr == 3
    assert config.baseline is not None
    assert config.baseline.path == ".i18n-baseline.json"
    assert config.baseline.mode == "newIssuesOnly"


def test_default_locale_falls_back_to_first_locale(tmp_path: Path) -> None:
    config = build_config({"locales": ["fr", "en"]}, tmp_path)
    assert config.default_locale == "fr"


def test_config_is_immutable_and_cloneable(tmp_path: Path) -> None:
    config = build_config({}, tmp_path)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.library = "lingui"  # type: ignore[misc]
    patched = dataclasses.replace(config, locales=("en", "fr"))
    assert patched.locales == ("en", "fr")
    assert config.locales == ("en",)


@pytest.mark.parametrize(
    "data, fragment",
    [
        ({"library": "angular"}, "Unknown library"),
        ({"locales": []}, "At least one locale"),
        ({"locales": ["en"], "defaultLocale": "fr"}, "Default locale 'fr'"),
        ({"keygen": {"strategy": "random"}}, "Unknown key generation strategy"),
        ({"keygen": {"maxLen": 0}}, "maxLen"),
        ({"catalogs": {"i18next": {"namespaces": ["common"]}}}, "pathPattern"),
        ({"catalogs": {"formatjs": {"messagesGlobs": []}}}, "messagesGlobs"),
        ({"budgets": {"coverage": {"fr": "most"}}}, "Coverage budget"),
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, data: dict, fragment: str) -> None:
    with pytest.raises(ConfigError) as excinfo:
        build_config(data, tmp_path)
    assert fragment in str(excinfo.value)


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".i18nscan.yml").write_text("library: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".i18nscan.yml").write_text("- en\n- fr\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".i18nscan.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).locales == ("en",)
