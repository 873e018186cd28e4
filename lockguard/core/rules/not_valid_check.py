"""
Check Constraint Rule — ADD CHECK without NOT VALID.

Adding a validated CHECK constraint scans the whole table under
ACCESS EXCLUSIVE lock.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterTableStatement, Statement


RULE_ID = "LG020"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, AlterTableStatement):
        return None

    for cmd in statement.commands:
        constraint = cmd.constraint
        if cmd.action != "add_constraint" or constraint is None:
            continue
        if constraint.constraint_type != "check" or constraint.not_valid:
            continue

        name = constraint.name or f"{statement.table}_check"
        expression = constraint.expression or "<condition>"
        return violation(
            RULE,
            ctx,
            message=(
                f'ADD CONSTRAINT "{name}" CHECK on "{statement.table}" without NOT VALID '
                f"scans every row while holding ACCESS EXCLUSIVE."
            ),
            safe_alternative=(
                f"ALTER TABLE {statement.table} ADD CONSTRAINT {name}\n"
                f"  CHECK ({expression}) NOT VALID;\n"
                f"ALTER TABLE {statement.table} VALIDATE CONSTRAINT {name};"
            ),
        )

    return None


RULE = Rule(
    id=RULE_ID,
    name="require-not-valid-check",
    severity=Severity.CRITICAL,
    description="CHECK constraints should be added NOT VALID and validated separately.",
    rationale=(
        "NOT VALID only enforces the constraint for new rows. VALIDATE CONSTRAINT then "
        "checks existing rows under SHARE UPDATE EXCLUSIVE."
    ),
    check=check,
    fixable=True,
)
