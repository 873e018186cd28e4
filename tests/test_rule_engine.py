"""
Tests for the Rule Engine — ordering, fault isolation, overrides, determinism.
"""

import pytest

from lockguard.core.rule_engine import RuleEngine
from lockguard.core.rule_helpers import is_inside_transaction
from lockguard.models.rule_models import Rule, RuleContext, RuleViolation, Severity
from lockguard.models.statement_models import (
    CreateIndexStatement,
    OtherStatement,
    SetStatement,
    TransactionStatement,
)


def _always(rule_id):
    def check(statement, ctx):
        return RuleViolation(
            rule_id=rule_id, rule_name=rule_id.lower(), severity=Severity.WARNING,
            message="hit", line=ctx.line,
        )
    return Rule(id=rule_id, name=rule_id.lower(), severity=Severity.WARNING, description="", check=check)


def _boom(statement, ctx):
    raise RuntimeError("rule bug")


BOOM = Rule(id="X999", name="boom", severity=Severity.CRITICAL, description="", check=_boom)


@pytest.fixture
def two_statements(make_statements):
    return make_statements(
        (SetStatement(name="lock_timeout", value="5s"), "SET lock_timeout = '5s';"),
        (CreateIndexStatement(index_name="idx", table="users", columns=("email",)),
         "CREATE INDEX idx ON users (email);"),
    )


def test_statement_order_then_catalog_order(two_statements):
    result = RuleEngine([_always("B"), _always("A")]).run(two_statements)
    assert [(v.statement_index, v.rule_id) for v in result.violations] == [
        (0, "B"), (0, "A"), (1, "B"), (1, "A"),
    ]
    assert result.rules_executed == ("B", "A")
    assert result.statements_analyzed == 2


def test_raising_rule_is_isolated(two_statements):
    result = RuleEngine([BOOM, _always("A")]).run(two_statements)
    assert len(result.errors) == 2
    assert result.errors[0].rule_id == "X999"
    assert result.errors[0].error_type == "RuntimeError"
    assert len(result.violations) == 2


def test_raising_rule_is_logged(two_statements, caplog):
    with caplog.at_level("WARNING", logger="lockguard.core.rule_engine"):
        RuleEngine([BOOM]).run(two_statements)
    assert "X999" in caplog.text


def test_severity_override(two_statements, rules):
    result = RuleEngine(rules, severity_overrides={"LG001": Severity.WARNING}).run(two_statements)
    lg001 = [v for v in result.violations if v.rule_id == "LG001"]
    assert lg001 and all(v.severity == Severity.WARNING for v in lg001)


def test_run_is_deterministic(two_statements, rules):
    engine = RuleEngine(rules)
    first = engine.run(two_statements, pg_version=15)
    second = engine.run(two_statements, pg_version=15)
    assert first.model_dump_json() == second.model_dump_json()


def test_run_single_rule(two_statements, rules):
    result = RuleEngine(rules).run_single_rule("LG001", two_statements)
    assert result.rules_executed == ("LG001",)
    assert [v.rule_id for v in result.violations] == ["LG001"]


def test_run_single_rule_unknown_id(two_statements, rules):
    with pytest.raises(ValueError, match="Unknown rule"):
        RuleEngine(rules).run_single_rule("LG999", two_statements)


def test_context_sees_all_statements(two_statements):
    seen = []

    def check(statement, ctx: RuleContext):
        seen.append((ctx.statement_index, len(ctx.all_statements), len(ctx.preceding())))
        return None

    RuleEngine([Rule(id="S", name="s", severity=Severity.WARNING, description="", check=check)]).run(
        two_statements
    )
    assert seen == [(0, 2, 0), (1, 2, 1)]


def test_inside_transaction_lookbehind(make_statements):
    statements = make_statements(
        (TransactionStatement(action="begin"), "BEGIN;"),
        (OtherStatement(node_type="CreateFunctionStmt"), "CREATE FUNCTION f() ..."),
        (TransactionStatement(action="commit"), "COMMIT;"),
        (OtherStatement(node_type="CreateFunctionStmt"), "CREATE FUNCTION g() ..."),
    )
    flags = []

    def check(statement, ctx):
        flags.append(is_inside_transaction(ctx))
        return None

    RuleEngine([Rule(id="T", name="t", severity=Severity.WARNING, description="", check=check)]).run(statements)
    assert flags == [False, True, True, False]


def test_text_transaction_markers(make_statements):
    statements = make_statements(
        (OtherStatement(node_type="TransactionStmt"), "begin"),
        (OtherStatement(node_type="CreateFunctionStmt"), "CREATE FUNCTION f() ..."),
    )
    flags = []

    def check(statement, ctx):
        flags.append(is_inside_transaction(ctx))
        return None

    RuleEngine([Rule(id="T", name="t", severity=Severity.WARNING, description="", check=check)]).run(statements)
    assert flags == [False, True]
