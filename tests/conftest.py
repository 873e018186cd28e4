"""
Test fixtures shared across all LockGuard tests.

The analysis core consumes parser output, so fixtures build ParsedStatement
sequences directly from statement nodes plus their source text.
"""

import pytest

from lockguard.core.rule_catalog import default_rules
from lockguard.models.risk_models import AffectedQuery, ProductionContext, TableStats
from lockguard.models.statement_models import ParsedStatement, ParseResult


def _build(*items):
    """items: (node, sql) pairs, one statement per line, or a ready ParsedStatement."""
    statements = []
    lines = []
    offset = 0
    for index, item in enumerate(items):
        if isinstance(item, ParsedStatement):
            statements.append(item)
            lines.append(item.sql)
            continue
        node, sql = item
        statements.append(ParsedStatement(node=node, sql=sql, line=index + 1, location=offset))
        lines.append(sql)
        offset += len(sql) + 1
    return tuple(statements), "\n".join(lines) + "\n"


@pytest.fixture
def make_statements():
    """Factory: (node, sql) pairs -> tuple of ParsedStatement, one per line."""
    def factory(*items):
        statements, _ = _build(*items)
        return statements
    return factory


@pytest.fixture
def make_parse_result():
    """Factory: (node, sql) pairs -> ParseResult whose source has one statement per line."""
    def factory(*items, sql=None, errors=()):
        statements, source = _build(*items)
        return ParseResult(sql=source if sql is None else sql, statements=statements, errors=errors)
    return factory


@pytest.fixture
def rules():
    return default_rules()


@pytest.fixture
def production_context():
    """Busy 5M-row users table; small audit_log table."""
    return ProductionContext(
        table_stats={
            "users": TableStats(
                table_name="users", row_count=5_000_000, total_bytes=2_500_000_000, index_count=4
            ),
            "audit_log": TableStats(table_name="audit_log", row_count=2_000, total_bytes=400_000),
        },
        affected_queries={
            "users": (
                AffectedQuery(
                    query_id="q1",
                    normalized_query="SELECT * FROM users WHERE id = $1",
                    calls=50_000,
                    mean_exec_time_ms=2.5,
                    service_name="api",
                ),
                AffectedQuery(
                    query_id="q2",
                    normalized_query="UPDATE users SET last_seen = $1 WHERE id = $2",
                    calls=8_000,
                    mean_exec_time_ms=150.0,
                    service_name="worker",
                ),
            ),
        },
    )
