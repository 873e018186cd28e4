"""
Rename Table Rule — RENAME TO breaks code still using the old table name.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import RenameStatement, Statement


RULE_ID = "LG019"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, RenameStatement) or statement.object_type != "table":
        return None

    return violation(
        RULE,
        ctx,
        message=(
            f'Renaming table "{statement.table}" to "{statement.new_name}" breaks every '
            f"query that still uses the old name."
        ),
        safe_alternative=(
            f"ALTER TABLE {statement.table} RENAME TO {statement.new_name};\n"
            f"CREATE VIEW {statement.table} AS SELECT * FROM {statement.new_name};\n"
            f"-- Drop the compatibility view once all callers have moved."
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="no-rename-table",
    severity=Severity.WARNING,
    description="Renaming a table is not backwards compatible with running code.",
    check=check,
)
