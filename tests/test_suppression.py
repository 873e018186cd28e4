"""
Tests for inline suppression directives.
"""

from lockguard.core.suppression import (
    filter_disabled_violations,
    find_stale_directives,
    parse_disable_directives,
)
from lockguard.models.rule_models import RuleViolation, Severity
from lockguard.models.suppression_models import DisableDirective


def _v(rule_id, index, line):
    return RuleViolation(
        rule_id=rule_id, rule_name=rule_id.lower(), severity=Severity.CRITICAL,
        message="m", line=line, statement_index=index,
    )


def test_parse_all_forms():
    sql = (
        "-- lockguard-disable\n"
        "CREATE INDEX a ON t (x);\n"
        "-- LockGuard-Disable lg001, LG004\n"
        "CREATE INDEX b ON t (x);\n"
        "/* lockguard-disable-file LG009 */\n"
        "-- lockguard-disable-file\n"
    )
    directives = parse_disable_directives(sql)
    assert directives == [
        DisableDirective(scope="statement", rules="all", line=1),
        DisableDirective(scope="statement", rules=("LG001", "LG004"), line=3),
        DisableDirective(scope="file", rules=("LG009",), line=5),
        DisableDirective(scope="file", rules="all", line=6),
    ]


def test_unrelated_comments_are_ignored():
    assert parse_disable_directives("-- lockguard is great\n-- lockguard-disabled\nSELECT 1;") == []


def test_statement_directive_targets_next_statement_only():
    sql = "-- lockguard-disable LG001\nCREATE INDEX a ON t (x);\nCREATE INDEX b ON t (x);\n"
    directives = parse_disable_directives(sql)
    violations = [_v("LG001", 0, 2), _v("LG004", 0, 2), _v("LG001", 1, 3)]
    kept = filter_disabled_violations(violations, directives, [2, 3])
    assert [(v.rule_id, v.statement_index) for v in kept] == [("LG004", 0), ("LG001", 1)]


def test_directive_on_same_line_as_statement():
    sql = "CREATE INDEX a ON t (x); -- lockguard-disable\n"
    directives = parse_disable_directives(sql)
    kept = filter_disabled_violations([_v("LG001", 0, 1)], directives, [1])
    assert kept == []


def test_multiple_directives_union():
    sql = "-- lockguard-disable LG001\n-- lockguard-disable LG004\nCREATE INDEX a ON t (x);\n"
    directives = parse_disable_directives(sql)
    violations = [_v("LG001", 0, 3), _v("LG004", 0, 3), _v("LG014", 0, 3)]
    kept = filter_disabled_violations(violations, directives, [3])
    assert [v.rule_id for v in kept] == ["LG014"]


def test_file_directive_applies_everywhere():
    sql = "CREATE INDEX a ON t (x);\nCREATE INDEX b ON t (x);\n-- lockguard-disable-file LG001\n"
    directives = parse_disable_directives(sql)
    violations = [_v("LG001", 0, 1), _v("LG004", 0, 1), _v("LG001", 1, 2)]
    kept = filter_disabled_violations(violations, directives, [1, 2])
    assert [v.rule_id for v in kept] == ["LG004"]


def test_no_directives_keeps_everything():
    violations = [_v("LG001", 0, 1)]
    assert filter_disabled_violations(violations, [], [1]) == violations


def test_stale_directives():
    sql = (
        "-- lockguard-disable LG001\n"
        "CREATE INDEX CONCURRENTLY a ON t (x);\n"
        "-- lockguard-disable-file LG023\n"
        "-- lockguard-disable LG004\n"
    )
    directives = parse_disable_directives(sql)
    stale = find_stale_directives([], directives, [2])
    assert [s.directive.line for s in stale] == [1, 3, 4]
    assert stale[2].reason == "no statement follows directive"


def test_used_directive_is_not_stale():
    directives = parse_disable_directives("-- lockguard-disable LG001\nCREATE INDEX a ON t (x);\n")
    assert find_stale_directives([_v("LG001", 0, 2)], directives, [2]) == []


def test_blanket_directives_are_never_stale():
    sql = (
        "-- lockguard-disable-file\n"
        "-- lockguard-disable\n"
        "CREATE INDEX CONCURRENTLY a ON t (x);\n"
        "-- lockguard-disable\n"
    )
    directives = parse_disable_directives(sql)
    assert len(directives) == 3
    assert find_stale_directives([], directives, [3]) == []
