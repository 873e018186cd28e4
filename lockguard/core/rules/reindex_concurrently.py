"""
Reindex Rule — REINDEX without CONCURRENTLY on PostgreSQL 12+.
"""

from __future__ import annotations

import re

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import ReindexStatement, Statement


RULE_ID = "LG015"

_REINDEX_RE = re.compile(r"REINDEX\s+(INDEX|TABLE|SCHEMA|DATABASE)\s+", re.IGNORECASE)


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, ReindexStatement) or statement.concurrent:
        return None
    # REINDEX SYSTEM cannot run concurrently
    if ctx.pg_version < 12 or statement.target_type == "system":
        return None

    return violation(
        RULE,
        ctx,
        message=(
            f'REINDEX {statement.target_type.upper()} "{statement.name}" without '
            f"CONCURRENTLY blocks writes while every index is rebuilt."
        ),
        safe_alternative=_REINDEX_RE.sub(
            lambda m: f"REINDEX {m.group(1).upper()} CONCURRENTLY ", ctx.sql, count=1
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="require-concurrent-reindex",
    severity=Severity.WARNING,
    description="REINDEX should use CONCURRENTLY on PostgreSQL 12 and later.",
    rationale="REINDEX CONCURRENTLY rebuilds indexes without blocking writes.",
    check=check,
)
