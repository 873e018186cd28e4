"""
Drop Column Rule — DROP COLUMN breaks application code still reading the column.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterTableStatement, Statement


RULE_ID = "LG024"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, AlterTableStatement):
        return None

    for cmd in statement.commands:
        if cmd.action != "drop_column":
            continue
        column = cmd.column or "<column>"
        return violation(
            RULE,
            ctx,
            message=(
                f'DROP COLUMN "{column}" on "{statement.table}" takes ACCESS EXCLUSIVE lock, '
                f"and running application code that still references the column fails at once."
            ),
            safe_alternative=(
                f"-- Deploy 1: remove every application reference to {column}\n"
                f"-- Deploy 2: drop it with a short lock timeout\n"
                f"SET lock_timeout = '5s';\n"
                f"ALTER TABLE {statement.table} DROP COLUMN {column};\n"
                f"RESET lock_timeout;"
            ),
        )

    return None


RULE = Rule(
    id=RULE_ID,
    name="no-drop-column",
    severity=Severity.WARNING,
    description="DROP COLUMN is not backwards compatible with running code.",
    rationale=(
        "Old application instances keep selecting and inserting the column until they "
        "are replaced, so the drop has to ship after the code that stops using it."
    ),
    check=check,
)
