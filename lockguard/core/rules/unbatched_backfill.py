"""
Unbatched Backfill Rule — UPDATE or DELETE without a WHERE clause.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import DataStatement, Statement


RULE_ID = "LG011"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, DataStatement):
        return None
    if statement.verb not in ("update", "delete") or statement.has_where:
        return None

    verb = statement.verb.upper()
    return violation(
        RULE,
        ctx,
        message=(
            f'{verb} on "{statement.table}" without WHERE touches every row in a single '
            f"transaction, holding row locks and generating WAL for the whole table."
        ),
        safe_alternative=(
            f"-- Process in batches:\n"
            f"{verb} ... FROM {statement.table}\n"
            f"  WHERE id IN (SELECT id FROM {statement.table} WHERE <condition> LIMIT 10000);"
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="unbatched-backfill",
    severity=Severity.WARNING,
    description="Full-table UPDATE/DELETE should be batched.",
    rationale=(
        "A single huge data change holds row locks until it commits, bloats the table "
        "and can stall replicas."
    ),
    check=check,
)
