"""
Tests for the cross-file Ordering Validator.
"""

import pytest

from lockguard.core.ordering import (
    build_migration_file,
    build_migration_files,
    natural_key,
    parse_version,
    sort_files,
    validate_ordering,
)
from lockguard.models.ordering_models import MigrationFile
from lockguard.models.rule_models import Severity
from lockguard.models.statement_models import (
    AlterTableCommand,
    AlterTableStatement,
    ConstraintDef,
    CreateTableStatement,
    RenameStatement,
)


def _file(path, created=(), referenced=()):
    version, scheme = parse_version(path)
    return MigrationFile(
        path=path, name=path.rsplit("/", 1)[-1], version=version, scheme=scheme,
        created_tables=tuple(created), referenced_tables=tuple(referenced),
    )


def _kinds(issues):
    return [i.kind for i in issues]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("V1__init.sql", ((1,), "flyway")),
        ("v2.1__add_users.sql", ((2, 1), "flyway")),
        ("3__seed.sql", ((3,), "flyway")),
        ("20240115103000_create_users.sql", ((20240115103000,), "timestamp")),
        ("001_init.sql", ((1,), "sequential")),
        ("002-users.sql", ((2,), "sequential")),
        ("003.sql", ((3,), "sequential")),
        ("004", ((4,), "sequential")),
        ("migrations/005_x.sql", ((5,), "sequential")),
        ("init.sql", (None, None)),
        ("V_x.sql", (None, None)),
    ],
)
def test_parse_version(name, expected):
    assert parse_version(name) == expected


def test_duplicate_version_scenario():
    issues = validate_ordering([_file("001_init.sql"), _file("001_dup.sql")])
    assert _kinds(issues) == ["duplicate-version"]
    assert issues[0].severity == Severity.CRITICAL
    assert issues[0].files == ("001_init.sql", "001_dup.sql")
    assert "001_init.sql" in issues[0].message and "001_dup.sql" in issues[0].message


def test_gap_reported_exactly_once():
    issues = validate_ordering([_file("001_a.sql"), _file("002_b.sql"), _file("004_c.sql")])
    gaps = [i for i in issues if i.kind == "gap"]
    assert len(gaps) == 1
    assert gaps[0].severity == Severity.WARNING
    assert gaps[0].files == ("002_b.sql", "004_c.sql")
    assert "missing 3" in gaps[0].message


def test_no_gap_for_timestamps():
    files = [_file("20240101000000_a.sql"), _file("20240301000000_b.sql")]
    assert validate_ordering(files) == []


def test_out_of_order_adjacent_inversions():
    issues = validate_ordering([_file("001_a.sql"), _file("003_c.sql"), _file("002_b.sql")])
    assert _kinds(issues) == ["out-of-order"]
    assert issues[0].files == ("003_c.sql", "002_b.sql")
    assert issues[0].severity == Severity.CRITICAL


def test_sorted_input_has_no_issues():
    files = [_file("001_a.sql", created=["users"]), _file("002_b.sql", referenced=["users"])]
    assert validate_ordering(files) == []


def test_missing_dependency():
    files = [_file("001_a.sql", referenced=["users"]), _file("002_b.sql", created=["users"])]
    issues = validate_ordering(files)
    assert _kinds(issues) == ["missing-dependency"]
    assert issues[0].severity == Severity.WARNING
    assert issues[0].files == ("001_a.sql",)


def test_known_tables_satisfy_dependencies():
    files = [_file("001_a.sql", referenced=["users"])]
    assert validate_ordering(files, known_tables=["public.Users"]) == []


def test_invalid_name_still_participates():
    files = [_file("001_a.sql", created=["users"]), _file("seed.sql", referenced=["users"])]
    issues = validate_ordering(files)
    assert _kinds(issues) == ["invalid-name"]
    assert issues[0].files == ("seed.sql",)


def test_one_file_can_trigger_several_issues():
    files = [_file("002_b.sql"), _file("001_a.sql", referenced=["orders"]), _file("001_c.sql")]
    kinds = _kinds(validate_ordering(files))
    assert kinds.count("duplicate-version") == 1
    assert kinds.count("out-of-order") == 1
    assert kinds.count("missing-dependency") == 1


def test_sort_files_puts_unversioned_last_in_natural_order():
    files = [_file("m10.sql"), _file("002_b.sql"), _file("m2.sql"), _file("001_a.sql")]
    assert [f.name for f in sort_files(files)] == ["001_a.sql", "002_b.sql", "m2.sql", "m10.sql"]
    assert natural_key("m2") < natural_key("m10")


def test_build_migration_file_extracts_tables(make_statements):
    fk = ConstraintDef(constraint_type="foreign_key", columns=("user_id",), references_table="users")
    statements = make_statements(
        (CreateTableStatement(table="orders", constraints=(fk,)), "CREATE TABLE orders (...);"),
        (AlterTableStatement(table="public.invoices",
                             commands=(AlterTableCommand(action="drop_column", column="x"),)),
         "ALTER TABLE public.invoices DROP COLUMN x;"),
        (RenameStatement(object_type="table", table="legacy", new_name="archive"),
         "ALTER TABLE legacy RENAME TO archive;"),
    )
    f = build_migration_file("db/007_orders.sql", statements)
    assert f.name == "007_orders.sql"
    assert f.version == (7,)
    assert f.created_tables == ("archive", "orders")
    assert f.referenced_tables == ("invoices", "legacy", "users")


def test_build_migration_files_keeps_order(make_statements):
    files = build_migration_files([("002_b.sql", ()), ("001_a.sql", ())])
    assert [f.path for f in files] == ["002_b.sql", "001_a.sql"]


def test_validation_is_deterministic():
    files = [_file("003_c.sql"), _file("001_a.sql", referenced=["x", "a"]), _file("001_b.sql")]
    assert validate_ordering(files) == validate_ordering(files)
