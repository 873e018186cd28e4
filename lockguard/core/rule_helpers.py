"""
Shared helpers for rule checks.
"""

from __future__ import annotations

from lockguard.core.transaction import is_inside_transaction_at
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import DDL_KINDS, SetStatement, Statement


def is_inside_transaction(ctx: RuleContext) -> bool:
    """True when the nearest preceding transaction marker is a BEGIN."""
    return is_inside_transaction_at(ctx.all_statements, ctx.statement_index)


def is_ddl(statement: Statement) -> bool:
    return statement.kind in DDL_KINDS


def has_preceding_setting(ctx: RuleContext, name: str) -> bool:
    """True when an earlier statement sets (not resets) the run-time parameter ``name``."""
    for entry in ctx.preceding():
        node = entry.node
        if isinstance(node, SetStatement):
            if node.name.lower() == name and not node.is_reset:
                return True
            continue
        if name in entry.sql.lower():
            return True
    return False


def violation(
    rule: Rule,
    ctx: RuleContext,
    message: str,
    safe_alternative: str | None = None,
    severity: Severity | None = None,
) -> RuleViolation:
    """Build a violation for ``rule`` at the current statement."""
    return RuleViolation(
        rule_id=rule.id,
        rule_name=rule.name,
        severity=severity or rule.severity,
        message=message,
        line=ctx.line,
        statement_index=ctx.statement_index,
        safe_alternative=safe_alternative,
    )
