"""
Drop Index Rule — DROP INDEX without CONCURRENTLY.
"""

from __future__ import annotations

import re

from lockguard.core.rule_helpers import violation
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import DropStatement, Statement


RULE_ID = "LG009"

_DROP_INDEX_RE = re.compile(r"DROP\s+INDEX\s+", re.IGNORECASE)


def check(statement: Statement, ctx: RuleContext) -> RuleViolation | None:
    if not isinstance(statement, DropStatement):
        return None
    if statement.object_type != "index" or statement.concurrent:
        return None

    names = ", ".join(statement.names)
    return violation(
        RULE,
        ctx,
        message=(
            f'DROP INDEX "{names}" without CONCURRENTLY takes ACCESS EXCLUSIVE on the '
            f"parent table and blocks all queries until it completes."
        ),
        safe_alternative=_DROP_INDEX_RE.sub("DROP INDEX CONCURRENTLY ", ctx.sql, count=1),
    )


RULE = Rule(
    id=RULE_ID,
    name="require-drop-index-concurrently",
    severity=Severity.WARNING,
    description="DROP INDEX should use CONCURRENTLY to avoid blocking the table.",
    rationale=(
        "A plain DROP INDEX locks the indexed table. DROP INDEX CONCURRENTLY waits for "
        "conflicting transactions instead and only takes SHARE UPDATE EXCLUSIVE."
    ),
    check=check,
    fixable=True,
)
