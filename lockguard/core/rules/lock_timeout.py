"""
Lock Timeout Rule — heavy-lock DDL without a preceding SET lock_timeout.

Without a timeout a DDL statement waiting for its lock sits at the head of
the lock queue, and every later query on the table queues behind it.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import has_preceding_setting, violation
from lockguard.models.lock_models import LockLevel
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import (
    CreateTableStatement,
    SetStatement,
    Statement,
    TransactionStatement,
)


RULE_ID = "LG004"

_HEAVY_LOCKS = (LockLevel.ACCESS_EXCLUSIVE, LockLevel.SHARE)


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    """Flag ACCESS EXCLUSIVE / SHARE DDL with no lock_timeout set before it."""
    if ctx.lock.lock_level not in _HEAVY_LOCKS:
        return None
    if isinstance(statement, (SetStatement, TransactionStatement, CreateTableStatement)):
        return None
    if has_preceding_setting(ctx, "lock_timeout"):
        return None

    return violation(
        RULE,
        ctx,
        message=(
            f"Statement acquires {ctx.lock.lock_level.value} lock without a preceding "
            f"SET lock_timeout. If the lock is contended it will wait indefinitely and "
            f"block every query queued behind it."
        ),
        safe_alternative=f"SET lock_timeout = '5s';\n{ctx.sql}\nRESET lock_timeout;",
    )


RULE = Rule(
    id=RULE_ID,
    name="require-lock-timeout",
    severity=Severity.CRITICAL,
    description="DDL taking a heavy lock should set lock_timeout first.",
    rationale=(
        "Lock requests queue in order. A DDL statement waiting behind a long-running "
        "query blocks all later reads and writes on the table, turning a slow query "
        "into an outage. lock_timeout makes the migration fail fast instead."
    ),
    check=check,
    fixable=True,
)
