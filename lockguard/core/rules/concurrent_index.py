"""
Concurrent Index Rule — CREATE INDEX without CONCURRENTLY.

A plain CREATE INDEX holds a SHARE lock for the whole build, blocking every
write to the table until the index is finished.
"""

from __future__ import annotations

import re

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import CreateIndexStatement, Statement


RULE_ID = "LG001"

_CREATE_INDEX_RE = re.compile(r"CREATE\s+(UNIQUE\s+)?INDEX\s+", re.IGNORECASE)


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    """Flag non-concurrent index builds."""
    if not isinstance(statement, CreateIndexStatement) or statement.concurrent:
        return None

    index_label = f' "{statement.index_name}"' if statement.index_name else ""
    safe_sql = _CREATE_INDEX_RE.sub(
        lambda m: f"CREATE {m.group(1) or ''}INDEX CONCURRENTLY ", ctx.sql, count=1
    )

    return violation(
        RULE,
        ctx,
        message=(
            f"CREATE INDEX{index_label} without CONCURRENTLY blocks all writes on "
            f'"{statement.table}" for the entire duration of the index build.'
        ),
        safe_alternative=(
            "-- CONCURRENTLY cannot run inside a transaction block\n" + safe_sql
        ),
    )


RULE = Rule(
    id=RULE_ID,
    name="require-concurrent-index",
    severity=Severity.CRITICAL,
    description="CREATE INDEX without CONCURRENTLY blocks writes for the whole index build.",
    rationale=(
        "A regular index build takes a SHARE lock on the table. Inserts, updates and "
        "deletes queue behind it until the build finishes, which can take minutes on "
        "large tables. CREATE INDEX CONCURRENTLY builds in several passes without "
        "blocking writes."
    ),
    check=check,
    fixable=True,
)
