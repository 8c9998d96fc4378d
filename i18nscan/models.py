"""Core data models shared across i18nscan components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .keygen import base36, string_hash

HARD_CODED_TEXT = "I18N001"
MISSING_KEY = "I18N002"
UNUSED_KEY = "I18N003"
ICU_SYNTAX = "I18N201"
CATALOG_ICU_SYNTAX = "I18N202"
DUPLICATE_TEXT = "I18N301"  # reserved for duplicate-text detection

# Older identifiers still emitted by some callers' baselines.
_MISSING_IDS = {MISSING_KEY, "I18N101"}
_UNUSED_IDS = {UNUSED_KEY, "I18N102"}
_ICU_IDS = {ICU_SYNTAX, CATALOG_ICU_SYNTAX}
_DUPLICATE_IDS = {DUPLICATE_TEXT}

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"


@dataclass(frozen=True)
class Span:
    """Source range with byte offsets and 1-based line/column positions."""

    start_byte: int
    end_byte: int
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class TranslationCall:
    """A translation request recognized by a library adapter."""

    key_name: str
    key_span: Span
    namespace: Optional[str] = None
    default_value: Optional[str] = None
    variables: Tuple[str, ...] = ()
    component: Optional[str] = None

    @property
    def flattened_key(self) -> str:
        return f"{self.namespace}:{self.key_name}" if self.namespace else self.key_name


@dataclass
class FixSuggestion:
    """Machine-applicable hint attached to a finding."""

    type: str
    description: str
    key_name: Optional[str] = None
    replacement: Optional[str] = None
    catalog_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.key_name is not None:
            payload["keyName"] = self.key_name
        if self.replacement is not None:
            payload["replacement"] = self.replacement
        if self.catalog_path is not None:
            payload["catalogPath"] = self.catalog_path
        return payload


@dataclass
class Finding:
    """One reported defect."""

    id: str
    rule_id: str
    severity: str
    message: str
    file: str
    line: int
    column: int
    end_line: int
    end_column: int
    source: str
    suggestion: Optional[FixSuggestion] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "ruleId": self.rule_id,
            "severity": self.severity,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
            "source": self.source,
        }
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion.to_dict()
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


def finding_id(
    rule_id: str, file: str, line: int, column: int, discriminator: Optional[str] = None
) -> str:
    """Content-derived identifier, stable for identical file, position and rule."""
    material = f"{file}:{line}:{column}:{rule_id}"
    if discriminator:
        material = f"{material}:{discriminator}"
    return f"{rule_id}-{base36(abs(string_hash(material)))}"


def make_finding(
    *,
    rule_id: str,
    severity: str,
    message: str,
    file: str,
    span: Optional[Span],
    source: str,
    suggestion: Optional[FixSuggestion] = None,
    metadata: Optional[Dict[str, Any]] = None,
    discriminator: Optional[str] = None,
) -> Finding:
    """Build a finding, deriving its identifier from file, position and rule."""
    if span is None:
        line, column, end_line, end_column = 1, 1, 1, 1
    else:
        line, column = span.start_line, span.start_column
        end_line, end_column = span.end_line, span.end_column
    return Finding(
        id=finding_id(rule_id, file, line, column, discriminator),
        rule_id=rule_id,
        severity=severity,
        message=message,
        file=file,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
        source=source,
        suggestion=suggestion,
        metadata=dict(metadata or {}),
    )


@dataclass
class ScanSummary:
    """Per-category counters derived from findings."""

    hard_coded: int = 0
    missing: int = 0
    unused: int = 0
    icu_errors: int = 0
    duplicates: int = 0
    total_files: int = 0
    scan_time: int = 0

    @classmethod
    def from_findings(
        cls, findings: List[Finding], *, total_files: int, scan_time: int
    ) -> "ScanSummary":
        summary = cls(total_files=total_files, scan_time=scan_time)
        for finding in findings:
            if finding.rule_id == HARD_CODED_TEXT:
                summary.hard_coded += 1
            elif finding.rule_id in _MISSING_IDS:
                summary.missing += 1
            elif finding.rule_id in _UNUSED_IDS:
                summary.unused += 1
            elif finding.rule_id in _ICU_IDS:
                summary.icu_errors += 1
            elif finding.rule_id in _DUPLICATE_IDS:
                summary.duplicates += 1
        return summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hardCoded": self.hard_coded,
            "missing": self.missing,
            "unused": self.unused,
            "icuErrors": self.icu_errors,
            "duplicates": self.duplicates,
            "totalFiles": self.total_files,
            "scanTime": self.scan_time,
        }


@dataclass
class LocaleCoverage:
    """Translation coverage of one locale against the default locale."""

    total_keys: int
    translated_keys: int
    missing_keys: List[str]
    percentage: float
    budget_met: bool
    required_coverage: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "totalKeys": self.total_keys,
            "translatedKeys": self.translated_keys,
            "missingKeys": list(self.missing_keys),
            "percentage": self.percentage,
            "budgetMet": self.budget_met,
        }
        if self.required_coverage is not None:
            payload["requiredCoverage"] = self.required_coverage
        return payload


@dataclass
class OverallCoverage:
    """Aggregate coverage across every configured locale."""

    total_keys: int = 0
    translated_keys: int = 0
    percentage: float = 0.0
    budget_met: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalKeys": self.total_keys,
            "translatedKeys": self.translated_keys,
            "percentage": self.percentage,
            "budgetMet": self.budget_met,
        }


@dataclass
class CoverageReport:
    """Per-locale and overall coverage figures."""

    by_locale: Dict[str, LocaleCoverage] = field(default_factory=dict)
    overall: OverallCoverage = field(default_factory=OverallCoverage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "byLocale": {locale: entry.to_dict() for locale, entry in self.by_locale.items()},
            "overall": self.overall.to_dict(),
        }


@dataclass
class ScanResult:
    """Everything a scan produces for reporters, editors and CI."""

    summary: ScanSummary
    findings: List[Finding]
    coverage: CoverageReport
    skipped_files: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(finding.severity == SEVERITY_ERROR for finding in self.findings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "findings": [finding.to_dict() for finding in self.findings],
            "coverage": self.coverage.to_dict(),
        }
