"""
Enum Add Value Rule — ALTER TYPE ... ADD VALUE inside a transaction block.

Before PostgreSQL 12 the statement fails inside BEGIN ... COMMIT. On 12+ it
runs, but the lock on the type is held until the transaction commits.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import is_inside_transaction, violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import AlterEnumStatement, Statement


RULE_ID = "LG025"


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, AlterEnumStatement):
        return None
    if not is_inside_transaction(ctx):
        return None

    value = f"'{statement.new_value}'"
    if ctx.pg_version < 12:
        return violation(
            RULE,
            ctx,
            message=(
                f'ALTER TYPE "{statement.type_name}" ADD VALUE {value} inside a transaction '
                f"block fails on PostgreSQL {ctx.pg_version}; it is only allowed from 12 on."
            ),
            safe_alternative=(
                f"-- Run outside BEGIN/COMMIT:\n"
                f"ALTER TYPE {statement.type_name} ADD VALUE {value};"
            ),
        )

    return violation(
        RULE,
        ctx,
        message=(
            f'ALTER TYPE "{statement.type_name}" ADD VALUE {value} inside a transaction holds '
            f"the lock on the enum type until COMMIT, and the new value cannot be used "
            f"before then."
        ),
        safe_alternative=(
            f"-- Run in its own migration, outside BEGIN/COMMIT:\n"
            f"ALTER TYPE {statement.type_name} ADD VALUE IF NOT EXISTS {value};"
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="no-enum-add-value-in-transaction",
    severity=Severity.WARNING,
    description="ALTER TYPE ... ADD VALUE should run outside a transaction block.",
    rationale=(
        "PostgreSQL < 12 rejects adding an enum value inside a transaction. Later "
        "versions allow it but keep the type locked and the value unusable until commit."
    ),
    check=check,
)
