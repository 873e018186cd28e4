"""
Execution Plan Data Models — Per-statement analysis bundles for one migration file.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from lockguard.models.lock_models import LockClassification
from lockguard.models.risk_models import RiskScore
from lockguard.models.rule_models import RuleError, RuleViolation
from lockguard.models.suppression_models import StaleDirective
from lockguard.models.transaction_models import TransactionSummary


class DurationClass(str, Enum):
    INSTANT = "instant"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    UNKNOWN = "unknown"


class PlanStatement(BaseModel):
    """Full analysis of one statement."""

    model_config = ConfigDict(frozen=True)

    index: int
    sql: str
    line: int
    lock: LockClassification
    risk: RiskScore
    violations: tuple[RuleViolation, ...] = Field(
        default=(), description="Violations remaining after inline suppression"
    )
    tables: tuple[str, ...] = Field(default=(), description="Relations the statement touches")
    duration: DurationClass = DurationClass.UNKNOWN
    in_transaction: bool = False


class ExecutionPlan(BaseModel):
    """Ordered analysis of one migration file."""

    model_config = ConfigDict(frozen=True)

    path: str
    pg_version: int
    statements: tuple[PlanStatement, ...] = ()
    transactions: TransactionSummary = Field(default_factory=TransactionSummary)
    total_violations: int = 0
    rule_errors: tuple[RuleError, ...] = ()
    stale_directives: tuple[StaleDirective, ...] = ()
    overall_risk: RiskScore
