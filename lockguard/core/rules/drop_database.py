"""
Drop Database Rule — DROP DATABASE has no place in a migration.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import DropDatabaseStatement, Statement


RULE_ID = "LG023"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, DropDatabaseStatement):
        return None

    return violation(
        RULE,
        ctx,
        message=f'DROP DATABASE "{statement.name}" irreversibly destroys the entire database.',
    )


RULE = Rule(
    id=RULE_ID,
    name="ban-drop-database",
    severity=Severity.CRITICAL,
    description="DROP DATABASE in a migration file.",
    check=check,
)
