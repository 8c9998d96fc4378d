"""Configuration loading for i18nscan (.i18nscan.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .keygen import STRATEGIES

CONFIG_FILENAME = ".i18nscan.yml"

LIBRARIES = ("auto", "i18next", "formatjs", "lingui")

DEFAULT_SRC = ("src/**/*.{ts,tsx,js,jsx}",)
DEFAULT_IGNORE = (
    "**/*.test.*",
    "**/*.spec.*",
    "**/*.stories.*",
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
)


class ConfigError(RuntimeError):
    """Raised when the configuration is unreadable or inconsistent."""


@dataclass(frozen=True)
class I18nextCatalogConfig:
    """Namespaced JSON catalogs: ``locales/{locale}/{ns}.json``."""

    path_pattern: str
    namespaces: Tuple[str, ...] = ()
    default_namespace: Optional[str] = None


@dataclass(frozen=True)
class FormatJSCatalogConfig:
    """Flat per-locale message files located through globs."""

    messages_globs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LinguiCatalogConfig:
    """JSON or gettext catalogs: ``locale/{locale}/messages.po``."""

    path_pattern: str


@dataclass(frozen=True)
class CatalogsConfig:
    i18next: Optional[I18nextCatalogConfig] = None
    formatjs: Optional[FormatJSCatalogConfig] = None
    lingui: Optional[LinguiCatalogConfig] = None


@dataclass(frozen=True)
class KeygenConfig:
    strategy: Optional[str] = None
    max_len: int = 60


@dataclass(frozen=True)
class ReportConfig:
    """Output settings consumed by reporters, not by the scan itself."""

    formats: Tuple[str, ...] = ("json",)
    output_dir: str = "reports/i18n"


@dataclass(frozen=True)
class BudgetsConfig:
    coverage: Dict[str, float] = field(default_factory=dict)
    max_new_hard_coded_per_pr: Optional[int] = None

    def required_coverage(self, locale: str) -> Optional[float]:
        """Budget for ``locale`` as a percentage; fractions such as 0.95 mean 95%."""
        value = self.coverage.get(locale)
        if value is None:
            return None
        return value * 100.0 if value <= 1 else value


@dataclass(frozen=True)
class BaselineConfig:
    path: str
    mode: str = "newIssuesOnly"


@dataclass(frozen=True)
class ScanConfig:
    """Immutable per-scan settings. Use ``dataclasses.replace`` to derive variants."""

    root: Path
    library: str = "auto"
    src: Tuple[str, ...] = DEFAULT_SRC
    locales: Tuple[str, ...] = ("en",)
    default_locale: str = "en"
    catalogs: CatalogsConfig = field(default_factory=CatalogsConfig)
    ignore: Tuple[str, ...] = DEFAULT_IGNORE
    keygen: KeygenConfig = field(default_factory=KeygenConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    budgets: BudgetsConfig = field(default_factory=BudgetsConfig)
    baseline: Optional[BaselineConfig] = None


def load_config(config_path: Path) -> ScanConfig:
    """Load and validate configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return build_config({}, root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return build_config(data, root)


def build_config(data: Mapping[str, Any], root: Path) -> ScanConfig:
    """Merge ``data`` (camelCase keys) over the defaults and validate the result."""
    library = _as_str(data.get("library")) or "auto"
    src = _as_str_tuple(data.get("src")) or DEFAULT_SRC
    locales = _as_str_tuple(data.get("locales")) if "locales" in data else ("en",)
    default_locale = _as_str(data.get("defaultLocale")) or (locales[0] if locales else "en")
    ignore = _as_str_tuple(data.get("ignore")) if "ignore" in data else DEFAULT_IGNORE

    keygen_data = _as_dict(data.get("keygen"))
    keygen = KeygenConfig(
        strategy=_as_str(keygen_data.get("strategy")),
        max_len=_as_int(keygen_data.get("maxLen")) if "maxLen" in keygen_data else 60,  # type: ignore[arg-type]
    )

    report_data = _as_dict(data.get("report"))
    report = ReportConfig(
        formats=_as_str_tuple(report_data.get("formats")) or ("json",),
        output_dir=_as_str(report_data.get("outputDir")) or "reports/i18n",
    )

    budgets_data = _as_dict(data.get("budgets"))
    coverage: Dict[str, float] = {}
    for locale, value in _as_dict(budgets_data.get("coverage")).items():
        number = _as_float(value)
        if number is None:
            raise ConfigError(f"Coverage budget for '{locale}' must be a number")
        coverage[str(locale)] = number
    budgets = BudgetsConfig(
        coverage=coverage,
        max_new_hard_coded_per_pr=_as_int(budgets_data.get("maxNewHardCodedPerPR")),
    )

    baseline = None
    baseline_data = _as_dict(data.get("baseline"))
    if _as_str(baseline_data.get("path")):
        baseline = BaselineConfig(
            path=str(baseline_data["path"]),
            mode=_as_str(baseline_data.get("mode")) or "newIssuesOnly",
        )

    config = ScanConfig(
        root=Path(root),
        library=library,
        src=src,
        locales=locales,
        default_locale=default_locale,
        catalogs=_build_catalogs(_as_dict(data.get("catalogs"))),
        ignore=ignore,
        keygen=keygen,
        report=report,
        budgets=budgets,
        baseline=baseline,
    )
    validate_config(config)
    return config


def validate_config(config: ScanConfig) -> None:
    """Raise ``ConfigError`` for settings that would make a scan meaningless."""
    if config.library not in LIBRARIES:
        raise ConfigError(
            f"Unknown library '{config.library}'. Expected one of: {', '.join(LIBRARIES)}"
        )
    if not config.locales:
        raise ConfigError("At least one locale must be configured")
    if config.default_locale not in config.locales:
        raise ConfigError(
            f"Default locale '{config.default_locale}' is not listed in locales "
            f"({', '.join(config.locales)})"
        )
    if config.keygen.strategy is not None and config.keygen.strategy not in STRATEGIES:
        raise ConfigError(
            f"Unknown key generation strategy '{config.keygen.strategy}'. "
            f"Expected one of: {', '.join(STRATEGIES)}"
        )
    if not isinstance(config.keygen.max_len, int) or config.keygen.max_len <= 0:
        raise ConfigError("keygen.maxLen must be a positive integer")


def _build_catalogs(data: Dict[str, Any]) -> CatalogsConfig:
    i18next = None
    i18next_data = _as_dict(data.get("i18next"))
    if i18next_data:
        pattern = _as_str(i18next_data.get("pathPattern"))
        if not pattern:
            raise ConfigError("catalogs.i18next.pathPattern is required")
        i18next = I18nextCatalogConfig(
            path_pattern=pattern,
            namespaces=_as_str_tuple(i18next_data.get("namespaces")),
            default_namespace=_as_str(i18next_data.get("defaultNamespace")),
        )

    formatjs = None
    formatjs_data = _as_dict(data.get("formatjs"))
    if formatjs_data:
        globs = _as_str_tuple(formatjs_data.get("messagesGlobs"))
        if not globs:
            raise ConfigError("catalogs.formatjs.messagesGlobs must list at least one glob")
        formatjs = FormatJSCatalogConfig(messages_globs=globs)

    lingui = None
    lingui_data = _as_dict(data.get("lingui"))
    if lingui_data:
        pattern = _as_str(lingui_data.get("pathPattern"))
        if not pattern:
            raise ConfigError("catalogs.lingui.pathPattern is required")
        lingui = LinguiCatalogConfig(path_pattern=pattern)

    return CatalogsConfig(i18next=i18next, formatjs=formatjs, lingui=lingui)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if isinstance(item, (str, int, float)))
    return ()
