"""Scanner: resolves source files, walks their syntax trees and reconciles keys with catalogs."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .adapters import LibraryAdapter, resolve_adapter
from .catalogs import CatalogStore
from .config import ScanConfig, load_config
from .coverage import compute_coverage
from .icu import validate_message
from .logging import get_logger
from .models import (
    CATALOG_ICU_SYNTAX,
    MISSING_KEY,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    UNUSED_KEY,
    Finding,
    FixSuggestion,
    ScanResult,
    ScanSummary,
    TranslationCall,
    make_finding,
)
from .parser import ParseError, SyntaxNode, is_source_file, parse_source
from .paths import filter_ignored, relative_posix, resolve_glob
from .rules import Rule, RuleContext, default_rules

_EXCLUDED_DIRS = {"node_modules", ".git"}


@dataclass
class FileOutcome:
    """Everything one file contributes to a scan."""

    path: str
    parsed: bool
    findings: List[Finding] = field(default_factory=list)
    used_keys: List[str] = field(default_factory=list)


class Scanner:
    """Runs the rule engine and key reconciliation over a project.

    A scanner holds configuration only; every ``scan``/``scan_single_file``
    call builds its own catalogs, usage set and findings, so independent calls
    may run concurrently.
    """

    def __init__(
        self,
        config: ScanConfig,
        adapter: Optional[LibraryAdapter] = None,
        *,
        rules: Optional[Iterable[Rule]] = None,
        workers: int = 1,
    ) -> None:
        self.config = config
        self.adapter = adapter or resolve_adapter(config)
        self.rules: List[Rule] = list(rules) if rules is not None else default_rules()
        self.workers = max(1, int(workers))
        self.logger = get_logger("scanner")

    @classmethod
    def from_config(cls, path: Path, **kwargs) -> "Scanner":
        """Build a scanner from a ``.i18nscan.yml`` file or the directory holding it."""
        return cls(load_config(Path(path)), **kwargs)

    # ------------------------------------------------------------------
    # Entry points

    def scan(self) -> ScanResult:
        """Scan every configured source file and reconcile catalog usage."""
        started = time.perf_counter()
        catalogs = self.load_catalogs()

        files = self.resolve_files()
        self.logger.debug("Traversing %d source files with %d worker(s)", len(files), self.workers)
        outcomes = self._scan_files(files, catalogs)

        findings: List[Finding] = []
        used: Set[str] = set()
        skipped: List[str] = []
        for outcome in outcomes:
            if not outcome.parsed:
                skipped.append(outcome.path)
                continue
            findings.extend(outcome.findings)
            used.update(outcome.used_keys)
        findings = _first_missing_per_key(findings)

        self.logger.debug("Reconciling %d used keys against catalogs", len(used))
        findings.extend(self._unused_key_findings(catalogs, used))
        if self.adapter.validates_catalog_messages:
            findings.extend(self._catalog_message_findings(catalogs))

        parsed = len(outcomes) - len(skipped)
        return self._build_result(findings, catalogs, parsed, skipped, started)

    def scan_single_file(
        self,
        path: str | Path,
        content: Optional[str] = None,
        *,
        catalogs: Optional[CatalogStore] = None,
    ) -> ScanResult:
        """Scan one file without unused-key reconciliation.

        ``catalogs`` lets interactive callers reuse a store from ``load_catalogs``
        across calls; they must reload it when catalog files change.
        """
        started = time.perf_counter()
        store = catalogs if catalogs is not None else self.load_catalogs()
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self.config.root / file_path

        outcome = self._scan_file(file_path, store, content)
        if not outcome.parsed:
            return self._build_result([], store, 0, [outcome.path], started)
        return self._build_result(_first_missing_per_key(outcome.findings), store, 1, [], started)

    # ------------------------------------------------------------------
    # Catalogs and files

    def load_catalogs(self) -> CatalogStore:
        """Load catalogs through the adapter; any failure degrades to an empty store."""
        self.logger.debug("Loading catalogs with the %s adapter", self.adapter.name)
        try:
            store = self.adapter.load_catalogs(self.config)
        except Exception as exc:
            self.logger.warning("Failed to load catalogs: %s", exc)
            return CatalogStore.unavailable(self.config.locales)
        for locale in self.config.locales:
            store.ensure_locale(locale)
        self.logger.debug(
            "Loaded catalogs: %s",
            ", ".join(f"{locale}={store.size(locale)}" for locale in self.config.locales),
        )
        return store

    def resolve_files(self) -> List[Path]:
        """Source files matched by ``src`` minus ``ignore``, in stable order."""
        root = self.config.root
        candidates: Set[Path] = set()
        for pattern in self.config.src:
            candidates.update(resolve_glob(root, pattern))
        files = [
            path
            for path in sorted(candidates)
            if is_source_file(path.name) and not _EXCLUDED_DIRS.intersection(path.parts)
        ]
        return filter_ignored(files, root, self.config.ignore)

    def _scan_files(self, files: Sequence[Path], catalogs: CatalogStore) -> List[FileOutcome]:
        if self.workers == 1 or len(files) < 2:
            return [self._scan_file(path, catalogs) for path in files]
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            # map() yields in submission order, keeping output deterministic.
            return list(pool.map(lambda path: self._scan_file(path, catalogs), files))

    # ------------------------------------------------------------------
    # Per-file traversal

    def _scan_file(self, path: Path, catalogs: CatalogStore, content: Optional[str] = None) -> FileOutcome:
        rel_path = relative_posix(path, self.config.root)
        if content is None:
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Skipping %s: %s", rel_path, exc)
                return FileOutcome(path=rel_path, parsed=False)

        try:
            tree = parse_source(rel_path, content)
        except ParseError as exc:
            self.logger.warning("Skipping unparsable file %s", exc)
            return FileOutcome(path=rel_path, parsed=False)

        context = RuleContext(file=rel_path, source=content, config=self.config, adapter=self.adapter)
        outcome = FileOutcome(path=rel_path, parsed=True, findings=context.findings)
        source_bytes = content.encode("utf-8")

        stack: List[Tuple[SyntaxNode, bool]] = [(tree, False)]
        while stack:
            node, within = stack.pop()
            context.within_translation = within

            for call in self._extract(node, rel_path):
                key = self.adapter.catalog_key(call, self.config)
                outcome.used_keys.append(key)
                if catalogs.available:
                    self._check_missing(call, key, catalogs, context, source_bytes)

            self._apply_rules(node, context)

            child_within = within or self.adapter.wraps_translatable_text(node)
            children = list(node.iter_children())
            stack.extend((child, child_within) for child in reversed(children))

        return outcome

    def _extract(self, node: SyntaxNode, rel_path: str) -> List[TranslationCall]:
        try:
            return self.adapter.extract_translation_calls(node)
        except Exception as exc:
            self.logger.warning(
                "Translation call extraction failed in %s:%d: %s", rel_path, node.span.start_line, exc
            )
            return []

    def _apply_rules(self, node: SyntaxNode, context: RuleContext) -> None:
        for rule in self.rules:
            try:
                rule.check(node, context)
            except Exception as exc:
                self.logger.warning(
                    "Rule %s failed in %s:%d: %s", rule.rule_id, context.file, node.span.start_line, exc
                )

    def _check_missing(
        self,
        call: TranslationCall,
        key: str,
        catalogs: CatalogStore,
        context: RuleContext,
        source_bytes: bytes,
    ) -> None:
        span = call.key_span
        snippet = source_bytes[span.start_byte : span.end_byte].decode("utf-8", errors="replace")
        for locale in self.config.locales:
            if catalogs.has_key(locale, key):
                continue
            context.report(
                make_finding(
                    rule_id=MISSING_KEY,
                    severity=SEVERITY_ERROR,
                    message=f"Translation key '{key}' is missing in locale '{locale}'",
                    file=context.file,
                    span=span,
                    source=snippet,
                    suggestion=FixSuggestion(
                        type="add-key",
                        description=f"Add '{key}' to the {locale} catalog",
                        key_name=key,
                        replacement=call.default_value,
                        catalog_path=self.adapter.catalog_path(self.config, locale, call.namespace),
                    ),
                    metadata={"key": key, "locale": locale},
                    discriminator=locale,
                )
            )

    # ------------------------------------------------------------------
    # Reconciliation

    def _catalog_file(self, catalogs: CatalogStore, locale: str, key: str) -> str:
        source = catalogs.source_of(locale, key)
        if source is None:
            return f"<{locale} catalog>"
        return relative_posix(Path(source), self.config.root)

    def _unused_key_findings(self, catalogs: CatalogStore, used: Set[str]) -> List[Finding]:
        if not catalogs.available:
            return []
        locale = self.config.default_locale
        findings: List[Finding] = []
        for key in catalogs.keys(locale):
            if key in used:
                continue
            catalog_file = self._catalog_file(catalogs, locale, key)
            findings.append(
                make_finding(
                    rule_id=UNUSED_KEY,
                    severity=SEVERITY_WARNING,
                    message=f"Translation key '{key}' is defined but never used",
                    file=catalog_file,
                    span=None,
                    source=key,
                    suggestion=FixSuggestion(
                        type="remove-key",
                        description=f"Remove unused key '{key}' from the {locale} catalog",
                        key_name=key,
                        catalog_path=catalog_file,
                    ),
                    metadata={"key": key, "locale": locale},
                    discriminator=key,
                )
            )
        return findings

    def _catalog_message_findings(self, catalogs: CatalogStore) -> List[Finding]:
        findings: List[Finding] = []
        for locale in self.config.locales:
            for key, message in catalogs.catalog(locale).items():
                for error in validate_message(message):
                    findings.append(
                        make_finding(
                            rule_id=CATALOG_ICU_SYNTAX,
                            severity=SEVERITY_ERROR,
                            message=f"ICU syntax error in '{key}' ({locale}): {error.message}",
                            file=self._catalog_file(catalogs, locale, key),
                            span=None,
                            source=message,
                            metadata={"key": key, "locale": locale, "offset": error.offset},
                            discriminator=f"{locale}:{key}:{error.offset}:{error.message}",
                        )
                    )
        return findings

    def _build_result(
        self,
        findings: List[Finding],
        catalogs: CatalogStore,
        parsed_files: int,
        skipped: List[str],
        started: float,
    ) -> ScanResult:
        elapsed_ms = int(round((time.perf_counter() - started) * 1000))
        summary = ScanSummary.from_findings(findings, total_files=parsed_files, scan_time=elapsed_ms)
        self.logger.debug(
            "Scan finished: %d findings across %d files in %dms", len(findings), parsed_files, elapsed_ms
        )
        return ScanResult(
            summary=summary,
            findings=findings,
            coverage=compute_coverage(catalogs, self.config),
            skipped_files=skipped,
        )


def _first_missing_per_key(findings: List[Finding]) -> List[Finding]:
    """Keep only the first missing-key finding (in file order) for each key and locale."""
    seen: Set[Tuple[str, str]] = set()
    kept: List[Finding] = []
    for finding in findings:
        if finding.rule_id == MISSING_KEY:
            pair = (finding.metadata["key"], finding.metadata["locale"])
            if pair in seen:
                continue
            seen.add(pair)
        kept.append(finding)
    return kept


__all__ = ["FileOutcome", "Scanner"]
