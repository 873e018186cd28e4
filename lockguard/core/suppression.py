"""
Inline Suppression — Parses disable comments and filters violations.

Recognised comment forms (case-insensitive, ``--`` or ``/* */``):

    -- lockguard-disable                  all rules, next statement
    -- lockguard-disable LG001, LG004     listed rules, next statement
    -- lockguard-disable-file             all rules, whole file
    -- lockguard-disable-file LG001       listed rules, whole file

A statement directive applies to the first statement starting on or after
its line and never reaches any other statement.
"""

from __future__ import annotations

import bisect
import logging
import re
from typing import Sequence

from lockguard.models.rule_models import RuleViolation
from lockguard.models.suppression_models import ALL_RULES, DisableDirective, StaleDirective

logger = logging.getLogger("lockguard.core.suppression")

_DIRECTIVE_RE = re.compile(
    r"(?:--|/\*)[ \t]*lockguard-disable(?P<file>-file)?(?![\w-])(?P<rest>[^\n]*)",
    re.IGNORECASE,
)
_RULE_TOKEN_RE = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


def parse_disable_directives(sql: str) -> list[DisableDirective]:
    """Extract every disable directive from ``sql``, in source order."""
    directives: list[DisableDirective] = []

    for match in _DIRECTIVE_RE.finditer(sql):
        line = sql.count("\n", 0, match.start()) + 1
        rest = match.group("rest").split("*/", 1)[0]
        rule_ids = tuple(dict.fromkeys(t.upper() for t in _RULE_TOKEN_RE.findall(rest)))

        directives.append(
            DisableDirective(
                scope="file" if match.group("file") else "statement",
                rules=rule_ids or ALL_RULES,
                line=line,
            )
        )

    return directives


def attach_directives(
    directives: Sequence[DisableDirective],
    statement_lines: Sequence[int],
) -> dict[int, list[DisableDirective]]:
    """Map statement index -> statement directives that apply to it."""
    attached: dict[int, list[DisableDirective]] = {}
    for directive in directives:
        if directive.scope != "statement":
            continue
        index = bisect.bisect_left(statement_lines, directive.line)
        if index < len(statement_lines):
            attached.setdefault(index, []).append(directive)
    return attached


def is_suppressed(
    violation: RuleViolation,
    file_directives: Sequence[DisableDirective],
    attached: dict[int, list[DisableDirective]],
) -> bool:
    if any(d.covers(violation.rule_id) for d in file_directives):
        return True
    return any(d.covers(violation.rule_id) for d in attached.get(violation.statement_index, ()))


def filter_disabled_violations(
    violations: Sequence[RuleViolation],
    directives: Sequence[DisableDirective],
    statement_lines: Sequence[int],
) -> list[RuleViolation]:
    """
    Drop violations silenced by directives.

    Args:
        violations: Violations in engine order; matched to statements by
            ``statement_index``.
        directives: Output of ``parse_disable_directives``.
        statement_lines: Start line of every statement, in file order.

    Returns:
        The surviving violations, order preserved.
    """
    if not directives:
        return list(violations)

    file_directives = [d for d in directives if d.scope == "file"]
    attached = attach_directives(directives, statement_lines)

    kept = [v for v in violations if not is_suppressed(v, file_directives, attached)]
    if len(kept) != len(violations):
        logger.debug(f"Suppressed {len(violations) - len(kept)} violations via inline directives")
    return kept


def find_stale_directives(
    violations: Sequence[RuleViolation],
    directives: Sequence[DisableDirective],
    statement_lines: Sequence[int],
) -> list[StaleDirective]:
    """
    Report directives that suppress none of ``violations`` (pre-filter).

    Blanket directives that name no rule ids are never reported.
    """
    stale: list[StaleDirective] = []
    attached = attach_directives(directives, statement_lines)
    target_of = {id(d): index for index, ds in attached.items() for d in ds}

    for directive in directives:
        if directive.rules == ALL_RULES:
            continue

        if directive.scope == "file":
            if not any(directive.covers(v.rule_id) for v in violations):
                stale.append(StaleDirective(directive=directive, reason="no matching violation in file"))
            continue

        index = target_of.get(id(directive))
        if index is None:
            stale.append(StaleDirective(directive=directive, reason="no statement follows directive"))
            continue

        if not any(
            v.statement_index == index and directive.covers(v.rule_id) for v in violations
        ):
            stale.append(
                StaleDirective(directive=directive, reason="no matching violation on next statement")
            )

    return stale
