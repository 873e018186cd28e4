"""
High Traffic Table Rule — DDL against a table with heavy query volume.

Only active when production context is supplied.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import is_ddl, violation
from lockguard.models.lock_models import LockLevel
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import Statement


RULE_ID = "LG012"

HIGH_TRAFFIC_CALLS = 10_000


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if ctx.production_context is None or not is_ddl(statement):
        return None
    if ctx.lock.lock_level == LockLevel.ACCESS_SHARE:
        return None

    queries = ctx.affected_queries
    total_calls = sum(q.calls for q in queries)
    if total_calls < HIGH_TRAFFIC_CALLS:
        return None

    services = sorted({q.service_name for q in queries if q.service_name})
    service_note = f" from {', '.join(services)}" if services else ""
    return violation(
        RULE,
        ctx,
        message=(
            f'"{ctx.target_table}" serves {total_calls:,} calls across {len(queries)} '
            f"queries{service_note}. A {ctx.lock.lock_level.value} lock here will queue "
            f"live traffic."
        ),
        safe_alternative="-- Schedule this migration for a low-traffic window.",
    )


RULE = Rule(
    id=RULE_ID,
    name="high-traffic-table-ddl",
    severity=Severity.WARNING,
    description="DDL on a table with high query volume.",
    rationale="Even short locks on a hot table can pile up thousands of waiting queries.",
    check=check,
    requires_production_context=True,
)
