"""
Rule Engine — Runs a caller-supplied rule catalog over one file's statements.

Statements are visited in order and every rule is tried against every
statement independently. A rule that raises is isolated to its
(rule, statement) pair and reported as a RuleError; the run continues.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping, Sequence

from lockguard.core.lock_classifier import DEFAULT_PG_VERSION, classify_lock
from lockguard.core.targets import primary_target
from lockguard.models.lock_models import LockClassification
from lockguard.models.risk_models import ProductionContext
from lockguard.models.rule_models import (
    Rule,
    RuleContext,
    RuleError,
    RuleResult,
    RuleViolation,
    Severity,
)
from lockguard.models.statement_models import ParsedStatement

logger = logging.getLogger("lockguard.core.rule_engine")


class RuleEngine:
    """
    Deterministic rule engine.

    The rule catalog is passed in explicitly; the engine only depends on the
    Rule contract, never on concrete rule identities.
    """

    def __init__(
        self,
        rules: Sequence[Rule],
        severity_overrides: Mapping[str, Severity] | None = None,
    ) -> None:
        self.rules: tuple[Rule, ...] = tuple(rules)
        self.severity_overrides: dict[str, Severity] = dict(severity_overrides or {})

    def run(
        self,
        statements: Sequence[ParsedStatement],
        pg_version: int = DEFAULT_PG_VERSION,
        production_context: ProductionContext | None = None,
        locks: Sequence[LockClassification] | None = None,
    ) -> RuleResult:
        """
        Run all rules against all statements of one file.

        Args:
            statements: Parsed statements, in file order.
            pg_version: Target PostgreSQL major version.
            production_context: Optional live-database telemetry.
            locks: Optional precomputed lock classifications (one per statement).

        Returns:
            RuleResult with violations in statement order, then catalog order.
        """
        start = time.monotonic()
        all_statements = tuple(statements)
        violations: list[RuleViolation] = []
        errors: list[RuleError] = []

        for index, entry in enumerate(all_statements):
            lock = locks[index] if locks is not None else classify_lock(entry.node, pg_version)
            ctx = RuleContext(
                sql=entry.sql,
                line=entry.line,
                statement_index=index,
                all_statements=all_statements,
                pg_version=pg_version,
                lock=lock,
                production_context=production_context,
                target_table=primary_target(entry.node),
            )

            for rule in self.rules:
                try:
                    violation = rule.check(entry.node, ctx)
                except Exception as e:
                    logger.warning(
                        f"Rule '{rule.id}' failed on statement {index} (line {entry.line}): "
                        f"{type(e).__name__}: {e}"
                    )
                    errors.append(
                        RuleError(
                            rule_id=rule.id,
                            statement_index=index,
                            line=entry.line,
                            error_type=type(e).__name__,
                            message=str(e),
                        )
                    )
                    continue

                if violation is not None:
                    violations.append(self._effective(violation, index))

        elapsed = (time.monotonic() - start) * 1000
        logger.debug(
            f"Ran {len(self.rules)} rules over {len(all_statements)} statements "
            f"in {elapsed:.1f}ms: {len(violations)} violations, {len(errors)} errors"
        )

        return RuleResult(
            violations=tuple(violations),
            errors=tuple(errors),
            rules_executed=tuple(rule.id for rule in self.rules),
            statements_analyzed=len(all_statements),
        )

    def run_single_rule(
        self,
        rule_id: str,
        statements: Sequence[ParsedStatement],
        pg_version: int = DEFAULT_PG_VERSION,
        production_context: ProductionContext | None = None,
    ) -> RuleResult:
        """Run one rule of the catalog by id."""
        for rule in self.rules:
            if rule.id == rule_id:
                engine = RuleEngine([rule], self.severity_overrides)
                return engine.run(statements, pg_version, production_context)
        raise ValueError(f"Unknown rule: {rule_id}")

    def _effective(self, violation: RuleViolation, index: int) -> RuleViolation:
        update: dict = {}
        override = self.severity_overrides.get(violation.rule_id)
        if override is not None and override != violation.severity:
            update["severity"] = override
        if violation.statement_index != index:
            update["statement_index"] = index
        return violation.model_copy(update=update) if update else violation
