"""
Rule Engine Data Models — Rules, per-statement context, violations and results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from lockguard.models.lock_models import LockClassification
from lockguard.models.risk_models import AffectedQuery, ProductionContext, TableStats
from lockguard.models.statement_models import ParsedStatement, Statement


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class RuleViolation(BaseModel):
    """A single rule violation on one statement."""

    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(..., description="Stable rule identifier, e.g. 'LG001'")
    rule_name: str = Field(..., description="Human rule name, e.g. 'require-concurrent-index'")
    severity: Severity
    message: str
    line: int = Field(..., description="Line where the violating statement starts")
    statement_index: int = Field(default=0, description="Index of the statement in the file")
    safe_alternative: str | None = Field(
        default=None, description="Suggested rewrite that avoids the problem"
    )


class RuleError(BaseModel):
    """A rule check that raised instead of returning; not a violation."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    statement_index: int
    line: int
    error_type: str
    message: str


class RuleResult(BaseModel):
    """Result of running a rule catalog over one file's statements."""

    model_config = ConfigDict(frozen=True)

    violations: tuple[RuleViolation, ...] = ()
    errors: tuple[RuleError, ...] = ()
    rules_executed: tuple[str, ...] = ()
    statements_analyzed: int = 0

    def for_statement(self, index: int) -> list[RuleViolation]:
        return [v for v in self.violations if v.statement_index == index]


@dataclass(frozen=True)
class RuleContext:
    """Read-only view handed to every rule check for one statement."""

    sql: str
    line: int
    statement_index: int
    all_statements: tuple[ParsedStatement, ...]
    pg_version: int
    lock: LockClassification
    production_context: Optional[ProductionContext] = None
    target_table: Optional[str] = None

    @property
    def table_stats(self) -> Optional[TableStats]:
        if self.production_context is None or self.target_table is None:
            return None
        return self.production_context.table_stats.get(self.target_table)

    @property
    def affected_queries(self) -> list[AffectedQuery]:
        if self.production_context is None or self.target_table is None:
            return []
        return list(self.production_context.affected_queries.get(self.target_table, ()))

    def preceding(self) -> tuple[ParsedStatement, ...]:
        return self.all_statements[: self.statement_index]


RuleCheckFn = Callable[[Statement, RuleContext], Optional[RuleViolation]]


@dataclass(frozen=True)
class Rule:
    """A stateless safety rule; ``check`` returns a violation or None."""

    id: str
    name: str
    severity: Severity
    description: str
    check: RuleCheckFn
    rationale: str = ""
    docs_url: Optional[str] = None
    fixable: bool = False
    requires_production_context: bool = False
