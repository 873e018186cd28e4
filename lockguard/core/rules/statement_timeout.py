"""
Statement Timeout Rule — long-running maintenance without SET statement_timeout.
"""

from __future__ import annotations

from lockguard.core.rule_helpers import has_preceding_setting, violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import (
    AlterTableStatement,
    ClusterStatement,
    CreateIndexStatement,
    ReindexStatement,
    Statement,
    VacuumStatement,
)


RULE_ID = "LG014"

_LONG_ALTER_ACTIONS = ("validate_constraint", "set_not_null", "alter_column_type")


def is_long_running(statement: Statement) -> bool:
    if isinstance(statement, VacuumStatement):
        return statement.full
    if isinstance(statement, (ClusterStatement, ReindexStatement)):
        return True
    if isinstance(statement, CreateIndexStatement):
        return not statement.concurrent
    if isinstance(statement, AlterTableStatement):
        return any(cmd.action in _LONG_ALTER_ACTIONS for cmd in statement.commands)
    return False


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not is_long_running(statement):
        return None
    if has_preceding_setting(ctx, "statement_timeout"):
        return None

    return violation(
        RULE,
        ctx,
        message=(
            "Long-running statement without a preceding SET statement_timeout. "
            "If it runs longer than expected nothing will stop it."
        ),
        safe_alternative=f"SET statement_timeout = '30s';\n{ctx.sql}\nRESET statement_timeout;",
    )


RULE = Rule(
    id=RULE_ID,
    name="require-statement-timeout",
    severity=Severity.WARNING,
    description="Long-running maintenance should set statement_timeout first.",
    rationale=(
        "Table scans, rewrites and index builds can run far longer than planned; a "
        "statement timeout bounds how long their locks can be held."
    ),
    check=check,
    fixable=True,
)
