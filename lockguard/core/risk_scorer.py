"""
Risk Scoring Engine — Computes explainable risk scores per statement.

Risk Score = lock factor (0-40) + size factor (0-30) + frequency factor (0-30)

The size and frequency factors are only present when production context
supplies them. The score is always the exact sum of the reported factors.
"""

from __future__ import annotations

from typing import Sequence

from lockguard.models.lock_models import LockClassification, LockLevel
from lockguard.models.risk_models import (
    AffectedQuery,
    RiskFactor,
    RiskLevel,
    RiskScore,
    SizeThresholds,
    TableStats,
)

LOCK_WEIGHT = 40
SIZE_WEIGHT = 30
FREQUENCY_WEIGHT = 30

RED_CUTOFF = 50
YELLOW_CUTOFF = 25

SLOW_QUERY_MS = 100.0

LOCK_BASE_POINTS: dict[LockLevel, int] = {
    LockLevel.ACCESS_SHARE: 0,
    LockLevel.ROW_EXCLUSIVE: 5,
    LockLevel.SHARE_UPDATE_EXCLUSIVE: 10,
    LockLevel.SHARE: 20,
    LockLevel.SHARE_ROW_EXCLUSIVE: 20,
    LockLevel.ACCESS_EXCLUSIVE: 25,
}

_GB = 1_000_000_000


def compute_risk(
    lock: LockClassification,
    table_stats: TableStats | None = None,
    affected_queries: Sequence[AffectedQuery] | None = None,
    thresholds: SizeThresholds | None = None,
) -> RiskScore:
    """
    Compute an auditable risk score for one statement.

    Args:
        lock: Lock classification of the statement.
        table_stats: Optional size statistics for the target table.
        affected_queries: Optional telemetry for queries touching the table.
        thresholds: Row-count tiers for the size factor.

    Returns:
        RiskScore whose ``score`` equals the sum of its factor values.
    """
    factors: list[RiskFactor] = [
        RiskFactor(
            name="Lock Severity",
            weight=LOCK_WEIGHT,
            value=score_lock(lock),
            detail=f"{lock.lock_level.value}{' (long-held)' if lock.long_held else ''}",
        )
    ]

    if table_stats is not None:
        factors.append(
            RiskFactor(
                name="Table Size",
                weight=SIZE_WEIGHT,
                value=score_table_size(table_stats, thresholds or SizeThresholds()),
                detail=f"{table_stats.row_count:,} rows ({format_bytes(table_stats.total_bytes)})",
            )
        )

    if affected_queries:
        total_calls = sum(q.calls for q in affected_queries)
        services = sorted({q.service_name for q in affected_queries if q.service_name})
        detail = f"{len(affected_queries)} queries, {total_calls:,} calls"
        if services:
            detail += f" across {', '.join(services)}"
        factors.append(
            RiskFactor(
                name="Query Frequency",
                weight=FREQUENCY_WEIGHT,
                value=score_query_frequency(affected_queries),
                detail=detail,
            )
        )

    total = min(100, max(0, sum(f.value for f in factors)))
    return RiskScore(level=risk_level(total), score=total, factors=tuple(factors))


def risk_level(score: int) -> RiskLevel:
    if score >= RED_CUTOFF:
        return RiskLevel.RED
    if score >= YELLOW_CUTOFF:
        return RiskLevel.YELLOW
    return RiskLevel.GREEN


def score_lock(lock: LockClassification) -> int:
    score = LOCK_BASE_POINTS[lock.lock_level]
    if lock.long_held:
        score += 20
    if lock.blocks_reads and lock.blocks_writes:
        score = max(score, 30)
    return min(score, LOCK_WEIGHT)


def score_table_size(stats: TableStats, thresholds: SizeThresholds) -> int:
    rows = stats.row_count
    if rows >= thresholds.huge_rows:
        row_score = 30
    elif rows >= thresholds.large_rows:
        row_score = 20
    elif rows >= thresholds.medium_rows:
        row_score = 10
    elif rows >= thresholds.small_rows:
        row_score = 5
    else:
        row_score = 0

    size = stats.total_bytes
    if size >= 100 * _GB:
        byte_score = 30
    elif size >= 10 * _GB:
        byte_score = 20
    elif size >= _GB:
        byte_score = 10
    else:
        byte_score = 0

    return min(max(row_score, byte_score), SIZE_WEIGHT)


def score_query_frequency(queries: Sequence[AffectedQuery]) -> int:
    total_calls = sum(q.calls for q in queries)
    if total_calls > 100_000:
        score = 25
    elif total_calls > 10_000:
        score = 20
    elif total_calls > 1_000:
        score = 10
    elif total_calls > 100:
        score = 5
    else:
        score = 0

    if any(q.mean_exec_time_ms >= SLOW_QUERY_MS for q in queries):
        score += 5

    return min(score, FREQUENCY_WEIGHT)


def format_bytes(size: int) -> str:
    if size >= 1e12:
        return f"{size / 1e12:.1f} TB"
    if size >= 1e9:
        return f"{size / 1e9:.1f} GB"
    if size >= 1e6:
        return f"{size / 1e6:.1f} MB"
    if size >= 1e3:
        return f"{size / 1e3:.1f} KB"
    return f"{size} B"
