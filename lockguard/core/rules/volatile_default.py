"""
Volatile Default Rule — ADD COLUMN with a volatile DEFAULT.

Before PostgreSQL 11 any default rewrites the table; volatile defaults such as
now() or gen_random_uuid() still force a rewrite on every version.
"""

from __future__ import annotations

from lockguard.core.lock_classifier import find_volatile_function
from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterTableStatement, Statement


RULE_ID = "LG003"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    """Flag ADD COLUMN whose default calls a volatile function."""
    if not isinstance(statement, AlterTableStatement):
        return None

    for cmd in statement.commands:
        if cmd.action != "add_column":
            continue
        column = cmd.column_def
        default_expr = column.default_expr if column else cmd.default_expr
        func = find_volatile_function(default_expr)
        if func is None:
            continue

        column_name = column.name if column else (cmd.column or "new_column")
        type_name = column.type_name if column and column.type_name else "<type>"
        safe_alternative = (
            f"ALTER TABLE {statement.table} ADD COLUMN {column_name} {type_name};\n"
            f"-- Backfill in batches:\n"
            f"UPDATE {statement.table} SET {column_name} = {func}()\n"
            f"  WHERE id IN (SELECT id FROM {statement.table} "
            f"WHERE {column_name} IS NULL LIMIT 10000);"
        )

        if ctx.pg_version < 11:
            return violation(
                RULE,
                ctx,
                message=(
                    f'ADD COLUMN with volatile default "{func}()" on "{statement.table}" '
                    f"rewrites the whole table under ACCESS EXCLUSIVE lock on "
                    f"PostgreSQL {ctx.pg_version}."
                ),
                safe_alternative=safe_alternative,
            )

        return violation(
            RULE,
            ctx,
            message=(
                f'ADD COLUMN with volatile default "{func}()" on "{statement.table}" '
                f"cannot use the fast-default path and rewrites every existing row."
            ),
            safe_alternative=safe_alternative,
            severity=Severity.WARNING,
        )

    return None


RULE = Rule(
    id=RULE_ID,
    name="volatile-default-rewrite",
    severity=Severity.CRITICAL,
    description="ADD COLUMN with a volatile DEFAULT rewrites the table.",
    rationale=(
        "PostgreSQL 11 stores constant defaults in the catalog, but a volatile default "
        "must be evaluated per row, so the table is rewritten while ACCESS EXCLUSIVE "
        "is held."
    ),
    check=check,
)
