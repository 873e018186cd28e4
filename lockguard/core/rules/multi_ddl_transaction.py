"""
Multi-DDL Transaction Rule — several DDL statements in one explicit transaction.

Locks acquired inside a transaction are held until COMMIT, so each extra DDL
statement extends how long the earlier locks block traffic. The violation is
reported once, on the second DDL statement of the block.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import is_ddl, is_inside_transaction, violation
from lockguard.core.transaction import closes_transaction, opens_transaction
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import Statement


RULE_ID = "LG008"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not is_ddl(statement) or not is_inside_transaction(ctx):
        return None

    earlier_ddl = 0
    for entry in reversed(ctx.preceding()):
        if opens_transaction(entry) or closes_transaction(entry):
            break
        if is_ddl(entry.node):
            earlier_ddl += 1

    if earlier_ddl != 1:
        return None

    return violation(
        RULE,
        ctx,
        message=(
            "Multiple DDL statements in one transaction hold every acquired lock until "
            "COMMIT, compounding the blocking window."
        ),
        safe_alternative=(
            "-- Split into one migration (or transaction) per DDL statement,\n"
            "-- each with its own SET lock_timeout."
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="no-multi-ddl-transaction",
    severity=Severity.CRITICAL,
    description="Multiple DDL statements inside one transaction accumulate locks.",
    rationale=(
        "PostgreSQL releases table locks only at transaction end. A transaction that "
        "alters several tables keeps all of them locked until the last statement runs."
    ),
    check=check,
)
