"""
Concurrent-in-Transaction Rule — CONCURRENTLY operations inside BEGIN ... COMMIT.

PostgreSQL rejects CREATE INDEX CONCURRENTLY, DROP INDEX CONCURRENTLY and
REINDEX CONCURRENTLY inside a transaction block, so the migration fails.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import is_inside_transaction, violation
from lockguard.core.transaction import cannot_run_in_transaction
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import Statement


RULE_ID = "LG017"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    entry = ctx.all_statements[ctx.statement_index]
    if not cannot_run_in_transaction(entry):
        return None
    if not is_inside_transaction(ctx):
        return None

    return violation(
        RULE,
        ctx,
        message=(
            "CONCURRENTLY cannot run inside a transaction block; PostgreSQL will reject "
            "this statement and the migration will fail."
        ),
        safe_alternative=(
            "-- Move this statement outside BEGIN/COMMIT, or disable the migration\n"
            "-- tool's automatic transaction for this file."
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="ban-concurrent-in-transaction",
    severity=Severity.CRITICAL,
    description="CONCURRENTLY operations are not allowed inside a transaction.",
    check=check,
)
