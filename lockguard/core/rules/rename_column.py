"""
Rename Column Rule — RENAME COLUMN breaks application code still using the old name.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import RenameStatement, Statement


RULE_ID = "LG010"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, RenameStatement) or statement.object_type != "column":
        return None

    old = statement.old_name or "<column>"
    new = statement.new_name
    return violation(
        RULE,
        ctx,
        message=(
            f'Renaming column "{old}" to "{new}" on "{statement.table}" breaks every '
            f"running query and deployed service that still references the old name."
        ),
        safe_alternative=(
            f"ALTER TABLE {statement.table} ADD COLUMN {new} <type>;\n"
            f"-- Backfill {new}, dual-write from the application, switch reads,\n"
            f"-- then drop {old} in a later migration."
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="no-rename-column",
    severity=Severity.WARNING,
    description="Renaming a column is not backwards compatible with running code.",
    rationale=(
        "Deploys are not atomic: old application instances keep querying the old column "
        "name until they are replaced."
    ),
    check=check,
)
