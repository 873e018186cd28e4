"""
Check-Not-Null Rule — SET NOT NULL scanning the table under ACCESS EXCLUSIVE.

On PostgreSQL 12+ a preceding validated CHECK (col IS NOT NULL) lets
SET NOT NULL skip the scan, so the rule stays quiet in that case.
"""

from __future__ import annotations

import re

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterTableStatement, Statement


RULE_ID = "LG002"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    """Flag SET NOT NULL without the CHECK constraint pattern."""
    if not isinstance(statement, AlterTableStatement):
        return None

    for cmd in statement.commands:
        if cmd.action != "set_not_null" or not cmd.column:
            continue
        if ctx.pg_version >= 12 and _has_preceding_check(ctx, statement.table, cmd.column):
            continue

        return violation(
            RULE,
            ctx,
            message=(
                f'SET NOT NULL on "{statement.table}"."{cmd.column}" requires a full table '
                f"scan under ACCESS EXCLUSIVE lock. Use the CHECK constraint pattern instead."
            ),
            safe_alternative=_safe_not_null(statement.table, cmd.column, ctx.pg_version),
        )

    return None


def _has_preceding_check(ctx: RuleContext, table: str, column: str) -> bool:
    pattern = re.compile(
        rf'(?<![\w$"])"?{re.escape(column)}"?\s+IS\s+NOT\s+NULL\b', re.IGNORECASE
    )
    for entry in ctx.preceding():
        node = entry.node
        if not isinstance(node, AlterTableStatement) or node.table != table:
            continue
        for cmd in node.commands:
            constraint = cmd.constraint
            if cmd.action != "add_constraint" or constraint is None:
                continue
            if constraint.constraint_type != "check":
                continue
            if pattern.search(constraint.expression or ""):
                return True
    return False


def _safe_not_null(table: str, column: str, pg_version: int) -> str:
    constraint = f"{table}_{column}_not_null"
    if pg_version >= 18:
        return (
            f"-- Mark NOT NULL without scanning, then validate under a weaker lock\n"
            f"ALTER TABLE {table} ALTER COLUMN {column} SET NOT NULL NOT VALID;\n"
            f"ALTER TABLE {table} VALIDATE NOT NULL {column};"
        )
    return (
        f"ALTER TABLE {table} ADD CONSTRAINT {constraint}\n"
        f"  CHECK ({column} IS NOT NULL) NOT VALID;\n"
        f"ALTER TABLE {table} VALIDATE CONSTRAINT {constraint};\n"
        f"ALTER TABLE {table} ALTER COLUMN {column} SET NOT NULL;\n"
        f"ALTER TABLE {table} DROP CONSTRAINT {constraint};"
    )


RULE = Rule(
    id=RULE_ID,
    name="require-check-not-null",
    severity=Severity.CRITICAL,
    description="SET NOT NULL scans the whole table under ACCESS EXCLUSIVE lock.",
    rationale=(
        "Adding a NOT VALID CHECK constraint is instant and validating it only takes "
        "SHARE UPDATE EXCLUSIVE. PostgreSQL 12+ then uses the validated constraint to "
        "skip the scan when setting NOT NULL."
    ),
    check=check,
)
