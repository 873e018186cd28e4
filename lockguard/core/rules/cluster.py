"""
Cluster Rule — CLUSTER rewrites the table under ACCESS EXCLUSIVE lock.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import ClusterStatement, Statement


RULE_ID = "LG021"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, ClusterStatement):
        return None

    table = statement.table or "<table>"
    return violation(
        RULE,
        ctx,
        message=(
            f'CLUSTER rewrites "{table}" in index order under ACCESS EXCLUSIVE lock, '
            f"blocking all reads and writes for the whole rewrite."
        ),
        safe_alternative=f"-- Reorder online with pg_repack:\n-- pg_repack --table={table} <database>",
    )


RULE = Rule(
    id=RULE_ID,
    name="ban-cluster",
    severity=Severity.CRITICAL,
    description="CLUSTER takes the table offline for the duration of the rewrite.",
    check=check,
)
