"""
Risk Scoring Data Models — Auditable factor breakdown and production telemetry.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RiskLevel(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"


RISK_LEVEL_RANK: dict[RiskLevel, int] = {
    RiskLevel.GREEN: 0,
    RiskLevel.YELLOW: 1,
    RiskLevel.RED: 2,
}


class RiskFactor(BaseModel):
    """How a single factor contributes to the total risk score."""

    model_config = ConfigDict(frozen=True)

    name: str
    weight: int = Field(..., description="Maximum points this factor can contribute")
    value: int = Field(..., ge=0, description="Points actually contributed")
    detail: str = ""


class RiskScore(BaseModel):
    """Composite risk for one statement; score is the sum of factor values."""

    model_config = ConfigDict(frozen=True)

    level: RiskLevel
    score: int = Field(..., ge=0, le=100)
    factors: tuple[RiskFactor, ...] = ()


class SizeThresholds(BaseModel):
    """Row-count tiers used by the size factor."""

    model_config = ConfigDict(frozen=True)

    small_rows: int = 10_000
    medium_rows: int = 100_000
    large_rows: int = 1_000_000
    huge_rows: int = 10_000_000


class TableStats(BaseModel):
    """Externally supplied statistics for one table."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    row_count: int = 0
    total_bytes: int = 0
    index_count: int = 0


class AffectedQuery(BaseModel):
    """Externally supplied telemetry for one normalized query touching a table."""

    model_config = ConfigDict(frozen=True)

    query_id: str
    normalized_query: str
    calls: int = 0
    mean_exec_time_ms: float = 0.0
    service_name: str | None = None


class ProductionContext(BaseModel):
    """Live-database telemetry keyed by table name. Optional everywhere."""

    model_config = ConfigDict(frozen=True)

    table_stats: dict[str, TableStats] = Field(default_factory=dict)
    affected_queries: dict[str, tuple[AffectedQuery, ...]] = Field(default_factory=dict)
    active_connections: dict[str, int] = Field(default_factory=dict)
