"""
Tests for the Risk Scorer — factor math, bands, and auditability.
"""

from lockguard.core.risk_scorer import compute_risk, format_bytes, score_lock
from lockguard.models.lock_models import LockClassification, LockLevel
from lockguard.models.risk_models import AffectedQuery, RiskLevel, SizeThresholds, TableStats


SHARE_LONG = LockClassification(lock_level=LockLevel.SHARE, blocks_writes=True, long_held=True)
EXCLUSIVE_SHORT = LockClassification(
    lock_level=LockLevel.ACCESS_EXCLUSIVE, blocks_reads=True, blocks_writes=True
)


def test_lock_only_score():
    risk = compute_risk(SHARE_LONG)
    assert risk.score == 40
    assert risk.level == RiskLevel.YELLOW
    assert [f.name for f in risk.factors] == ["Lock Severity"]


def test_blocking_both_floors_at_30():
    assert score_lock(EXCLUSIVE_SHORT) == 30


def test_access_share_is_green_zero():
    risk = compute_risk(LockClassification(lock_level=LockLevel.ACCESS_SHARE))
    assert risk.score == 0
    assert risk.level == RiskLevel.GREEN


def test_large_table_pushes_to_red():
    stats = TableStats(table_name="users", row_count=5_000_000, total_bytes=2_000_000_000)
    risk = compute_risk(SHARE_LONG, table_stats=stats)
    assert risk.score == 60
    assert risk.level == RiskLevel.RED


def test_size_uses_larger_of_rows_and_bytes():
    stats = TableStats(table_name="blobs", row_count=500, total_bytes=150_000_000_000)
    risk = compute_risk(LockClassification(lock_level=LockLevel.ACCESS_SHARE), table_stats=stats)
    size = next(f for f in risk.factors if f.name == "Table Size")
    assert size.value == 30


def test_custom_thresholds():
    stats = TableStats(table_name="t", row_count=50_000)
    risk = compute_risk(
        LockClassification(lock_level=LockLevel.ACCESS_SHARE),
        table_stats=stats,
        thresholds=SizeThresholds(medium_rows=40_000),
    )
    assert risk.score == 10


def test_frequency_adds_slow_query_bonus():
    queries = [
        AffectedQuery(query_id="a", normalized_query="q", calls=20_000, mean_exec_time_ms=5),
        AffectedQuery(query_id="b", normalized_query="q", calls=100, mean_exec_time_ms=250),
    ]
    risk = compute_risk(LockClassification(lock_level=LockLevel.ACCESS_SHARE), affected_queries=queries)
    freq = next(f for f in risk.factors if f.name == "Query Frequency")
    assert freq.value == 25


def test_empty_query_list_adds_no_factor():
    risk = compute_risk(SHARE_LONG, affected_queries=[])
    assert len(risk.factors) == 1


def test_score_is_sum_of_factors():
    stats = TableStats(table_name="users", row_count=20_000_000, total_bytes=300_000_000_000)
    queries = [AffectedQuery(query_id="a", normalized_query="q", calls=1_000_000, mean_exec_time_ms=500)]
    risk = compute_risk(SHARE_LONG, table_stats=stats, affected_queries=queries)
    assert risk.score == sum(f.value for f in risk.factors)
    assert risk.score == 100
    assert all(f.value <= f.weight for f in risk.factors)


def test_format_bytes():
    assert format_bytes(512) == "512 B"
    assert format_bytes(2_500_000_000) == "2.5 GB"
