"""
Large Table Rule — long-held lock on a table with millions of rows.

Only active when production context is supplied.
"""

from __future__ import annotations

from lockguard.core.risk_scorer import format_bytes
from lockguard.core.rule_helpers import is_ddl, violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import Statement


RULE_ID = "LG013"

LARGE_TABLE_ROWS = 1_000_000


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if ctx.production_context is None or not is_ddl(statement):
        return None
    if not ctx.lock.long_held:
        return None

    stats = ctx.table_stats
    if stats is None or stats.row_count < LARGE_TABLE_ROWS:
        return None

    return violation(
        RULE,
        ctx,
        message=(
            f'"{stats.table_name}" has {stats.row_count:,} rows '
            f"({format_bytes(stats.total_bytes)}). This statement holds "
            f"{ctx.lock.lock_level.value} for work proportional to table size."
        ),
        safe_alternative=(
            "-- Use an online alternative (CONCURRENTLY, NOT VALID + VALIDATE, or\n"
            "-- batched backfills), or schedule a maintenance window."
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="large-table-ddl",
    severity=Severity.WARNING,
    description="Long-running lock on a large table.",
    rationale="Lock duration scales with table size for rewrites, scans and index builds.",
    check=check,
    requires_production_context=True,
)
