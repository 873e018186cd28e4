"""
Tests for Auto-Fix — mechanical rewrites for fixable rules.
"""

import pytest

from lockguard.core.rule_engine import RuleEngine
from lockguard.engine.auto_fix import (
    apply_edits,
    auto_fix,
    is_fixable,
    statement_end,
    statements_on_line,
)
from lockguard.models.fix_models import Edit
from lockguard.models.rule_models import RuleViolation, Severity
from lockguard.models.statement_models import (
    AlterTableCommand,
    AlterTableStatement,
    ConstraintDef,
    CreateIndexStatement,
    ParsedStatement,
)


def _v(rule_id, line, severity=Severity.CRITICAL):
    return RuleViolation(rule_id=rule_id, rule_name=rule_id.lower(), severity=severity, message="m", line=line)


def test_is_fixable():
    for rule_id in ("LG001", "LG004", "LG009", "LG014", "LG020", "lg001"):
        assert is_fixable(rule_id)
    for rule_id in ("LG002", "LG007", "LG018"):
        assert not is_fixable(rule_id)


def test_no_violations_returns_input():
    sql = "SET lock_timeout = '5s';\nCREATE INDEX CONCURRENTLY idx ON users (email);\n"
    result = auto_fix(sql, [])
    assert result.fixed_sql == sql
    assert result.fixed_count == 0
    assert result.unfixable == ()


def test_unfixable_pass_through():
    sql = "ALTER TABLE users ALTER COLUMN email TYPE text;"
    violation = _v("LG007", 1)
    result = auto_fix(sql, [violation])
    assert result.fixed_sql == sql
    assert result.fixed_count == 0
    assert result.unfixable == (violation,)


@pytest.mark.parametrize(
    "sql, expected",
    [
        ("CREATE INDEX idx ON users (email);", "CREATE INDEX CONCURRENTLY idx ON users (email);"),
        ("create unique index idx ON users (email);", "create unique index CONCURRENTLY idx ON users (email);"),
        ("CREATE INDEX CONCURRENTLY idx ON users (email);", "CREATE INDEX CONCURRENTLY idx ON users (email);"),
    ],
)
def test_lg001_concurrently(sql, expected):
    assert auto_fix(sql, [_v("LG001", 1)]).fixed_sql == expected


def test_lg009_drop_index():
    assert auto_fix("DROP INDEX idx;", [_v("LG009", 1)]).fixed_sql == "DROP INDEX CONCURRENTLY idx;"
    assert (
        auto_fix("DROP INDEX IF EXISTS idx;", [_v("LG009", 1)]).fixed_sql
        == "DROP INDEX CONCURRENTLY IF EXISTS idx;"
    )


def test_lg004_prepends_lock_timeout_with_indent():
    sql = "BEGIN;\n  ALTER TABLE users DROP COLUMN bio;\nCOMMIT;\n"
    result = auto_fix(sql, [_v("LG004", 2)])
    assert result.fixed_sql == (
        "BEGIN;\n  SET lock_timeout = '5s';\n  ALTER TABLE users DROP COLUMN bio;\nCOMMIT;\n"
    )
    assert result.fixed_count == 1


def test_lock_timeout_prepended_once_per_file():
    sql = "ALTER TABLE a DROP COLUMN x;\nALTER TABLE b DROP COLUMN y;\n"
    result = auto_fix(sql, [_v("LG004", 1), _v("LG004", 2)])
    assert result.fixed_sql.count("lock_timeout") == 1
    assert result.fixed_count == 2


def test_prepend_skipped_when_setting_precedes():
    sql = "SET lock_timeout = '2s';\nALTER TABLE a DROP COLUMN x;\n"
    assert auto_fix(sql, [_v("LG004", 2)]).fixed_sql == sql


def test_custom_timeout_values():
    result = auto_fix("VACUUM FULL t;", [_v("LG014", 1)], statement_timeout="10min")
    assert result.fixed_sql == "SET statement_timeout = '10min';\nVACUUM FULL t;"


def test_lg020_not_valid_after_balanced_check():
    sql = "ALTER TABLE users ADD CONSTRAINT c CHECK (length(name) > 0 AND note <> ')');"
    result = auto_fix(sql, [_v("LG020", 1)])
    assert result.fixed_sql == (
        "ALTER TABLE users ADD CONSTRAINT c CHECK (length(name) > 0 AND note <> ')') NOT VALID;"
    )


def test_lg020_leaves_not_valid_alone():
    sql = "ALTER TABLE users ADD CONSTRAINT c CHECK (age > 0) NOT VALID;"
    assert auto_fix(sql, [_v("LG020", 1)]).fixed_sql == sql


def test_overlapping_fixes_apply_in_rule_id_order():
    sql = "CREATE INDEX idx ON users (email);"
    result = auto_fix(sql, [_v("LG014", 1), _v("LG004", 1), _v("LG001", 1)])
    assert result.fixed_sql == (
        "SET statement_timeout = '30s';\n"
        "SET lock_timeout = '5s';\n"
        "CREATE INDEX CONCURRENTLY idx ON users (email);"
    )
    assert result.fixed_count == 3
    assert len(result.edits) == 1


def test_lg009_after_lg004_prepend():
    result = auto_fix("DROP INDEX idx;", [_v("LG009", 1), _v("LG004", 1)])
    assert result.fixed_sql == "SET lock_timeout = '5s';\nDROP INDEX CONCURRENTLY idx;"


def test_picks_matching_statement_on_shared_line():
    sql = "SET search_path = app; CREATE INDEX idx ON users (email);"
    result = auto_fix(sql, [_v("LG001", 1)])
    assert result.fixed_sql == "SET search_path = app; CREATE INDEX CONCURRENTLY idx ON users (email);"


def test_unlocatable_violation_is_unfixable():
    violation = _v("LG001", 42)
    result = auto_fix("CREATE INDEX idx ON t (x);", [violation])
    assert result.unfixable == (violation,)
    assert result.fixed_count == 0


def test_fix_is_idempotent_on_safe_sql(rules):
    sql = "CREATE INDEX idx ON users (email);\n"
    node = CreateIndexStatement(index_name="idx", table="users", columns=("email",))
    violations = RuleEngine(rules).run([ParsedStatement(node=node, sql=sql.strip(), line=1)]).violations
    fixed = auto_fix(sql, violations).fixed_sql

    fixed_node = node.model_copy(update={"concurrent": True})
    line = fixed.splitlines().index("CREATE INDEX CONCURRENTLY idx ON users (email);") + 1
    again = RuleEngine(rules).run(
        [ParsedStatement(node=fixed_node, sql="CREATE INDEX CONCURRENTLY idx ON users (email);", line=line)]
    ).violations
    assert again == ()
    assert auto_fix(fixed, again).fixed_sql == fixed


def test_fixed_check_constraint_is_clean(rules):
    check = ConstraintDef(name="c", constraint_type="check", expression="age > 0")
    node = AlterTableStatement(table="users", commands=(AlterTableCommand(action="add_constraint", constraint=check),))
    sql = "ALTER TABLE users ADD CONSTRAINT c CHECK (age > 0);"
    violations = RuleEngine(rules).run([ParsedStatement(node=node, sql=sql, line=1)]).violations
    assert {v.rule_id for v in violations} == {"LG004", "LG020"}
    assert auto_fix(sql, violations).fixed_sql == (
        "SET lock_timeout = '5s';\nALTER TABLE users ADD CONSTRAINT c CHECK (age > 0) NOT VALID;"
    )


def test_apply_edits_rejects_overlap_and_out_of_bounds():
    with pytest.raises(ValueError):
        apply_edits("abcdef", [Edit(start=1, end=4, replacement="x"), Edit(start=3, end=5, replacement="y")])
    with pytest.raises(ValueError):
        apply_edits("abc", [Edit(start=2, end=10, replacement="x")])
    assert apply_edits("abc", [Edit(start=3, end=3, replacement="d"), Edit(start=0, end=1, replacement="A")]) == "Abcd"


def test_statement_end_skips_quotes_and_comments():
    sql = "INSERT INTO t VALUES ('a;b', $$c;d$$); -- x;y\nSELECT 1;"
    assert sql[: statement_end(sql, 0)] == "INSERT INTO t VALUES ('a;b', $$c;d$$);"
    assert statement_end("ALTER TABLE t /* ; */ ADD c int", 0) == len("ALTER TABLE t /* ; */ ADD c int")


def test_prepend_lands_before_statement_starting_mid_line():
    sql = "ALTER TABLE users\n  ADD COLUMN a int; CREATE INDEX idx ON users (a);\n"
    result = auto_fix(sql, [_v("LG004", 2)])
    assert result.fixed_sql == (
        "ALTER TABLE users\n  ADD COLUMN a int; SET lock_timeout = '5s';\nCREATE INDEX idx ON users (a);\n"
    )
    assert result.fixed_count == 1


def test_statements_on_line_ignores_tail_of_earlier_statement():
    sql = "ALTER TABLE users\n  ADD COLUMN a int; CREATE INDEX idx ON users (a);\n"
    spans = statements_on_line(sql, 2)
    assert [sql[start:end] for start, end in spans] == ["CREATE INDEX idx ON users (a);"]
    assert statements_on_line(sql, 3) == []


def test_statements_on_line_skips_leading_comment():
    sql = "-- add index\nCREATE INDEX idx ON users (a);\n"
    assert [sql[s:e] for s, e in statements_on_line(sql, 2)] == ["CREATE INDEX idx ON users (a);"]
    assert [sql[s:e] for s, e in statements_on_line(sql, 1)] == ["CREATE INDEX idx ON users (a);"]


def test_leading_block_comment_on_same_line():
    sql = "/* hot path */ CREATE INDEX idx ON users (email);\n"
    result = auto_fix(sql, [_v("LG001", 1)])
    assert result.fixed_sql == "/* hot path */ CREATE INDEX CONCURRENTLY idx ON users (email);\n"
    assert result.fixed_count == 1
    assert result.unfixable == ()


def test_violation_without_edit_is_unfixable():
    sql = "CREATE INDEX CONCURRENTLY idx ON users (email);"
    violation = _v("LG001", 1)
    result = auto_fix(sql, [violation])
    assert result.fixed_sql == sql
    assert result.fixed_count == 0
    assert result.unfixable == (violation,)


def test_prepend_on_transaction_control_is_unfixable():
    violation = _v("LG004", 1)
    result = auto_fix("BEGIN;", [violation])
    assert result.fixed_sql == "BEGIN;"
    assert result.unfixable == (violation,)


def test_unfixable_keeps_input_order():
    first, second, third = _v("LG007", 1), _v("LG001", 1), _v("LG002", 1)
    result = auto_fix("DROP TABLE t;", [first, second, third])
    assert result.unfixable == (first, second, third)
    assert result.fixed_count == 0
