"""Static analysis of i18n defects in JavaScript/TypeScript projects."""

from .adapters import ADAPTERS, LibraryAdapter, get_adapter, resolve_adapter
from .catalogs import CatalogError, CatalogStore
from .config import ConfigError, ScanConfig, build_config, load_config
from .models import Finding, FixSuggestion, ScanResult, ScanSummary
from .parser import ParseError, parse_source
from .scanner import Scanner

__version__ = "0.1.0"

__all__ = [
    "ADAPTERS",
    "CatalogError",
    "CatalogStore",
    "ConfigError",
    "Finding",
    "FixSuggestion",
    "LibraryAdapter",
    "ParseError",
    "ScanConfig",
    "ScanResult",
    "ScanSummary",
    "Scanner",
    "build_config",
    "get_adapter",
    "load_config",
    "parse_source",
    "resolve_adapter",
]
