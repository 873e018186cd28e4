"""
Foreign Key Rule — ADD FOREIGN KEY without NOT VALID.

Validating a new foreign key scans both tables while SHARE ROW EXCLUSIVE
blocks writes on each of them.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterTableStatement, Statement


RULE_ID = "LG005"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, AlterTableStatement):
        return None

    for cmd in statement.commands:
        constraint = cmd.constraint
        if cmd.action != "add_constraint" or constraint is None:
            continue
        if constraint.constraint_type != "foreign_key" or constraint.not_valid:
            continue

        name = constraint.name or f"{statement.table}_fkey"
        columns = ", ".join(constraint.columns) or "<column>"
        ref = constraint.references_table or "<referenced_table>"
        return violation(
            RULE,
            ctx,
            message=(
                f'ADD FOREIGN KEY on "{statement.table}" without NOT VALID scans the table '
                f'and "{ref}" while blocking writes on both.'
            ),
            safe_alternative=(
                f"ALTER TABLE {statement.table} ADD CONSTRAINT {name}\n"
                f"  FOREIGN KEY ({columns}) REFERENCES {ref} NOT VALID;\n"
                f"ALTER TABLE {statement.table} VALIDATE CONSTRAINT {name};"
            ),
        )

    return None


RULE = Rule(
    id=RULE_ID,
    name="require-not-valid-foreign-key",
    severity=Severity.CRITICAL,
    description="Foreign keys should be added NOT VALID and validated separately.",
    rationale=(
        "NOT VALID skips the existing-row check, so the constraint is added almost "
        "instantly. VALIDATE CONSTRAINT then checks rows holding only SHARE UPDATE "
        "EXCLUSIVE, which does not block reads or writes."
    ),
    check=check,
)
