"""
Drop Cascade Rule — CASCADE silently drops dependent objects.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import (
    AlterTableStatement,
    DropStatement,
    Statement,
    TruncateStatement,
)


RULE_ID = "LG016"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if isinstance(statement, (DropStatement, TruncateStatement)) and statement.cascade:
        what = "TRUNCATE" if isinstance(statement, TruncateStatement) else "DROP"
        return _cascade_violation(ctx, what)

    if isinstance(statement, AlterTableStatement):
        if any(cmd.cascade for cmd in statement.commands):
            return _cascade_violation(ctx, "ALTER TABLE ... DROP")

    return None


def _cascade_violation(ctx: RuleContext, what: str) -> RuleViolation:
    return violation(
        RULE,
        ctx,
        message=(
            f"{what} with CASCADE also removes every dependent object (views, foreign "
            f"keys, rows in referencing tables) without listing them."
        ),
        safe_alternative="-- Drop dependent objects explicitly, then run the statement without CASCADE.",
    )


RULE = Rule(
    id=RULE_ID,
    name="no-drop-cascade",
    severity=Severity.WARNING,
    description="CASCADE can remove more than intended.",
    rationale="Dependent objects disappear with no record in the migration of what was removed.",
    check=check,
)
