"""
Drop Table Rule — DROP TABLE is irreversible.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import DropStatement, Statement


RULE_ID = "LG018"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, DropStatement) or statement.object_type != "table":
        return None

    names = ", ".join(statement.names)
    first = statement.names[0] if statement.names else "<table>"
    return violation(
        RULE,
        ctx,
        message=(
            f'DROP TABLE "{names}" permanently deletes the data and fails any code '
            f"still reading the table."
        ),
        safe_alternative=(
            f"-- Stop all reads and writes first, then rename before dropping:\n"
            f"ALTER TABLE {first} RENAME TO {first}_deprecated;\n"
            f"-- Drop it in a later migration once nothing breaks."
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="ban-drop-table",
    severity=Severity.CRITICAL,
    description="Dropping a table destroys data and breaks running code.",
    check=check,
)
