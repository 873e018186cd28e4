"""
Column Type Change Rule — ALTER COLUMN TYPE rewrites the table.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterTableStatement, Statement


RULE_ID = "LG007"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, AlterTableStatement):
        return None

    for cmd in statement.commands:
        if cmd.action != "alter_column_type":
            continue
        column = cmd.column or "<column>"
        new_type = cmd.new_type or "<new_type>"
        table = statement.table
        return violation(
            RULE,
            ctx,
            message=(
                f'ALTER COLUMN "{column}" TYPE {new_type} on "{table}" rewrites the table '
                f"and rebuilds its indexes under ACCESS EXCLUSIVE lock."
            ),
            safe_alternative=(
                f"-- Expand and contract:\n"
                f"ALTER TABLE {table} ADD COLUMN {column}_new {new_type};\n"
                f"-- Backfill {column}_new in batches and keep it in sync with a trigger,\n"
                f"-- switch readers over, then drop the old column.\n"
                f"ALTER TABLE {table} DROP COLUMN {column};\n"
                f"ALTER TABLE {table} RENAME COLUMN {column}_new TO {column};"
            ),
        )

    return None


RULE = Rule(
    id=RULE_ID,
    name="no-column-type-change",
    severity=Severity.CRITICAL,
    description="Changing a column type rewrites the table under ACCESS EXCLUSIVE lock.",
    rationale=(
        "Apart from a few binary-compatible casts, ALTER COLUMN TYPE rewrites every row "
        "and every index on the table while it is fully locked."
    ),
    check=check,
)
