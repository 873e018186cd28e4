"""
Materialized View Rule — REFRESH MATERIALIZED VIEW without CONCURRENTLY.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import RefreshMaterializedViewStatement, Statement


RULE_ID = "LG022"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, RefreshMaterializedViewStatement):
        return None
    # WITH NO DATA only truncates the view
    if statement.concurrent or statement.with_no_data:
        return None

    return violation(
        RULE,
        ctx,
        message=(
            f'REFRESH MATERIALIZED VIEW "{statement.view}" without CONCURRENTLY blocks '
            f"all reads of the view until the refresh completes."
        ),
        safe_alternative=(
            f"-- Requires a unique index on the view:\n"
            f"REFRESH MATERIALIZED VIEW CONCURRENTLY {statement.view};"
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="require-concurrent-refresh-matview",
    severity=Severity.WARNING,
    description="Materialized view refreshes should use CONCURRENTLY.",
    check=check,
)
