"""
Execution Plan Builder — Walks one migration file and bundles, per statement,
its lock, risk, surviving violations, touched relations and duration class.

The overall plan risk is the worst statement risk (highest level, ties broken
by numeric score). One dangerous statement makes the whole migration risky.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from lockguard.core.duration import estimate_duration
from lockguard.core.lock_classifier import DEFAULT_PG_VERSION, classify_lock
from lockguard.core.risk_scorer import compute_risk
from lockguard.core.rule_engine import RuleEngine
from lockguard.core.suppression import (
    filter_disabled_violations,
    find_stale_directives,
    parse_disable_directives,
)
from lockguard.core.targets import extract_targets
from lockguard.core.transaction import analyze_transactions, is_inside_transaction_at
from lockguard.models.lock_models import LockClassification, LockLevel
from lockguard.models.plan_models import ExecutionPlan, PlanStatement
from lockguard.models.risk_models import (
    RISK_LEVEL_RANK,
    ProductionContext,
    RiskScore,
    SizeThresholds,
)
from lockguard.models.rule_models import Rule, Severity
from lockguard.models.statement_models import ParseResult

logger = logging.getLogger("lockguard.core.plan_builder")


def build_execution_plan(
    path: str,
    parse_result: ParseResult,
    rules: Sequence[Rule],
    pg_version: int = DEFAULT_PG_VERSION,
    production_context: ProductionContext | None = None,
    severity_overrides: Mapping[str, Severity] | None = None,
    thresholds: SizeThresholds | None = None,
) -> ExecutionPlan:
    """
    Build the execution plan for one parsed migration file.

    Args:
        path: File path, carried through for reporting.
        parse_result: Parser output for the file.
        rules: Rule catalog to evaluate.
        pg_version: Target PostgreSQL major version.
        production_context: Optional live-database telemetry.
        severity_overrides: Optional rule id -> severity overrides.
        thresholds: Row-count tiers for the size factor.

    Returns:
        ExecutionPlan with one PlanStatement per parsed statement.
    """
    statements = parse_result.statements
    locks = [classify_lock(entry.node, pg_version) for entry in statements]

    engine = RuleEngine(rules, severity_overrides)
    rule_result = engine.run(statements, pg_version, production_context, locks=locks)

    directives = parse_disable_directives(parse_result.sql)
    statement_lines = [entry.line for entry in statements]
    kept = filter_disabled_violations(rule_result.violations, directives, statement_lines)
    stale = find_stale_directives(rule_result.violations, directives, statement_lines)

    plan_statements: list[PlanStatement] = []
    for index, entry in enumerate(statements):
        tables = extract_targets(entry.node)
        target = tables[0] if tables else None
        stats = None
        queries = None
        if production_context is not None and target is not None:
            stats = production_context.table_stats.get(target)
            queries = production_context.affected_queries.get(target)

        lock = locks[index]
        plan_statements.append(
            PlanStatement(
                index=index,
                sql=entry.sql,
                line=entry.line,
                lock=lock,
                risk=compute_risk(lock, stats, queries, thresholds),
                violations=tuple(v for v in kept if v.statement_index == index),
                tables=tuple(tables),
                duration=estimate_duration(entry.node, lock, stats),
                in_transaction=is_inside_transaction_at(statements, index),
            )
        )

    overall = overall_risk(plan_statements)
    logger.info(
        f"Planned {path}: {len(plan_statements)} statements, {len(kept)} violations, "
        f"overall {overall.level.value} ({overall.score})"
    )

    return ExecutionPlan(
        path=path,
        pg_version=pg_version,
        statements=tuple(plan_statements),
        transactions=analyze_transactions(statements),
        total_violations=len(kept),
        rule_errors=rule_result.errors,
        stale_directives=tuple(stale),
        overall_risk=overall,
    )


def overall_risk(statements: Sequence[PlanStatement]) -> RiskScore:
    """Worst statement risk; an empty file is GREEN."""
    if not statements:
        return compute_risk(LockClassification(lock_level=LockLevel.ACCESS_SHARE))
    worst = max(statements, key=lambda s: (RISK_LEVEL_RANK[s.risk.level], s.risk.score))
    return worst.risk
