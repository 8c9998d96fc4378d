"""Translation coverage per locale, measured against the default locale's keys."""

from __future__ import annotations

from typing import Dict

from .catalogs import CatalogStore
from .config import ScanConfig
from .models import CoverageReport, LocaleCoverage, OverallCoverage


def _percentage(translated: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(translated * 100.0 / total, 2)


def compute_coverage(store: CatalogStore, config: ScanConfig) -> CoverageReport:
    """Build the coverage report for every configured locale.

    The default locale's keys are the universe. A key counts as translated in a
    locale when that locale's catalog holds a non-empty value for it.
    """
    universe = store.keys(config.default_locale)
    by_locale: Dict[str, LocaleCoverage] = {}

    for locale in config.locales:
        catalog = store.catalog(locale)
        missing = [key for key in universe if not catalog.get(key)]
        translated = len(universe) - len(missing)
        percentage = _percentage(translated, len(universe))
        required = config.budgets.required_coverage(locale)
        by_locale[locale] = LocaleCoverage(
            total_keys=len(universe),
            translated_keys=translated,
            missing_keys=missing,
            percentage=percentage,
            budget_met=required is None or percentage >= required,
            required_coverage=required,
        )

    total = sum(entry.total_keys for entry in by_locale.values())
    translated_total = sum(entry.translated_keys for entry in by_locale.values())
    overall = OverallCoverage(
        total_keys=total,
        translated_keys=translated_total,
        percentage=_percentage(translated_total, total),
        budget_met=all(entry.budget_met for entry in by_locale.values()),
    )
    return CoverageReport(by_locale=by_locale, overall=overall)


__all__ = ["compute_coverage"]
