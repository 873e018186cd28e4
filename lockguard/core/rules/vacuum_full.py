"""
VACUUM FULL Rule — rewrites the table under ACCESS EXCLUSIVE lock.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import Statement, VacuumStatement


RULE_ID = "LG006"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, VacuumStatement) or not statement.full:
        return None

    tables = ", ".join(statement.tables) or "every table in the database"
    first = statement.tables[0] if statement.tables else "<table>"
    return violation(
        RULE,
        ctx,
        message=(
            f"VACUUM FULL rewrites {tables} under ACCESS EXCLUSIVE lock, blocking all "
            f"reads and writes until it completes."
        ),
        safe_alternative=(
            f"-- Reclaim space online with pg_repack:\n"
            f"-- pg_repack --table={first} <database>\n"
            f"VACUUM {first};"
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="no-vacuum-full",
    severity=Severity.CRITICAL,
    description="VACUUM FULL locks the table for the whole rewrite.",
    rationale=(
        "VACUUM FULL copies the table into a new file while holding ACCESS EXCLUSIVE. "
        "pg_repack or a plain VACUUM reclaim space without taking the table offline."
    ),
    check=check,
)
