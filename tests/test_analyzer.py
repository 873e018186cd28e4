"""
Tests for the top-level analyze entry points.
"""

import pytest

from lockguard.core.analyzer import AnalysisError, analyze_batch, analyze_migration
from lockguard.models.statement_models import (
    CreateIndexStatement,
    CreateTableStatement,
    DataStatement,
    ParseError,
)


def test_parse_errors_are_refused(make_parse_result, rules):
    errors = (ParseError(message='syntax error at or near "TABEL"', cursor_position=8),)
    with pytest.raises(AnalysisError) as exc_info:
        analyze_migration("bad.sql", make_parse_result(errors=errors), rules)
    assert exc_info.value.path == "bad.sql"
    assert exc_info.value.parse_errors == errors
    assert "TABEL" in str(exc_info.value)


def test_analyze_migration_returns_plan(make_parse_result, rules):
    plan = analyze_migration(
        "001_users.sql",
        make_parse_result((CreateTableStatement(table="users"), "CREATE TABLE users (id bigint);")),
        rules,
        pg_version=14,
    )
    assert plan.path == "001_users.sql"
    assert plan.pg_version == 14
    assert plan.total_violations == 0


def test_batch_isolates_failures(make_parse_result, rules):
    good = make_parse_result((CreateTableStatement(table="users"), "CREATE TABLE users (id bigint);"))
    bad = make_parse_result(errors=(ParseError(message="boom"),))
    later = make_parse_result(
        (CreateIndexStatement(index_name="idx", table="users"), "CREATE INDEX idx ON users (email);")
    )
    result = analyze_batch(
        [("001_users.sql", good), ("002_bad.sql", bad), ("003_idx.sql", later)], rules
    )
    assert [p.path for p in result.plans] == ["001_users.sql", "003_idx.sql"]
    assert [f.path for f in result.failures] == ["002_bad.sql"]
    assert result.failures[0].parse_errors[0].message == "boom"
    # 002 was refused, so only 1 and 3 are compared
    assert [i.kind for i in result.ordering_issues] == ["gap"]


def test_batch_reports_missing_dependency(make_parse_result, rules):
    insert = make_parse_result((DataStatement(verb="insert", table="orders"), "INSERT INTO orders VALUES (1);"))
    result = analyze_batch([("001_seed.sql", insert)], rules)
    assert [i.kind for i in result.ordering_issues] == ["missing-dependency"]

    result = analyze_batch([("001_seed.sql", insert)], rules, known_tables=["orders"])
    assert result.ordering_issues == ()
