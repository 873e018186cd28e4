"""
Analyzer — Top-level entry points for one migration file or a batch.

A file whose parse failed is refused outright: AnalysisError carries the path
and the parser's raw error list. In a batch each refusal is recorded and the
remaining files are still analysed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from lockguard.core.lock_classifier import DEFAULT_PG_VERSION
from lockguard.core.ordering import build_migration_files, validate_ordering
from lockguard.core.plan_builder import build_execution_plan
from lockguard.models.analysis_models import BatchResult, FileFailure
from lockguard.models.plan_models import ExecutionPlan
from lockguard.models.risk_models import ProductionContext, SizeThresholds
from lockguard.models.rule_models import Rule, Severity
from lockguard.models.statement_models import ParseError, ParseResult

logger = logging.getLogger("lockguard.core.analyzer")


class AnalysisError(Exception):
    """The statement sequence for ``path`` could not be obtained."""

    def __init__(self, path: str, parse_errors: Sequence[ParseError]) -> None:
        self.path = path
        self.parse_errors = tuple(parse_errors)
        summary = "; ".join(e.message for e in self.parse_errors) or "unknown parse error"
        super().__init__(f"Failed to parse {path}: {summary}")


def analyze_migration(
    path: str,
    parse_result: ParseResult,
    rules: Sequence[Rule],
    pg_version: int = DEFAULT_PG_VERSION,
    production_context: ProductionContext | None = None,
    severity_overrides: Mapping[str, Severity] | None = None,
    thresholds: SizeThresholds | None = None,
) -> ExecutionPlan:
    """
    Analyse one parsed migration file.

    Raises:
        AnalysisError: if the parser reported errors for the file.
    """
    if parse_result.errors:
        logger.warning(f"Refusing to analyze {path}: {len(parse_result.errors)} parse errors")
        raise AnalysisError(path, parse_result.errors)

    return build_execution_plan(
        path,
        parse_result,
        rules,
        pg_version=pg_version,
        production_context=production_context,
        severity_overrides=severity_overrides,
        thresholds=thresholds,
    )


def analyze_batch(
    files: Sequence[tuple[str, ParseResult]],
    rules: Sequence[Rule],
    pg_version: int = DEFAULT_PG_VERSION,
    production_context: ProductionContext | None = None,
    severity_overrides: Mapping[str, Severity] | None = None,
    known_tables: Iterable[str] = (),
    thresholds: SizeThresholds | None = None,
) -> BatchResult:
    """
    Analyse several files independently, then check their ordering.

    Args:
        files: (path, parse result) pairs in the order the caller applies them.
        rules: Rule catalog, shared read-only across files.
        known_tables: Tables that exist before the first migration.

    Returns:
        BatchResult with one plan per parsable file, one failure per refused
        file, and ordering issues across the parsable files.
    """
    plans: list[ExecutionPlan] = []
    failures: list[FileFailure] = []
    parsed: list[tuple[str, ParseResult]] = []

    for path, parse_result in files:
        try:
            plan = analyze_migration(
                path,
                parse_result,
                rules,
                pg_version=pg_version,
                production_context=production_context,
                severity_overrides=severity_overrides,
                thresholds=thresholds,
            )
        except AnalysisError as e:
            failures.append(FileFailure(path=e.path, parse_errors=e.parse_errors))
            continue
        plans.append(plan)
        parsed.append((path, parse_result))

    migration_files = build_migration_files((path, pr.statements) for path, pr in parsed)
    issues = validate_ordering(migration_files, known_tables)

    logger.info(
        f"Batch analysis: {len(plans)} files analyzed, {len(failures)} refused, "
        f"{len(issues)} ordering issues"
    )
    return BatchResult(plans=tuple(plans), failures=tuple(failures), ordering_issues=tuple(issues))
