"""
Statement Data Models — Typed DDL statement nodes consumed by the analysis core.

These models are produced by the external SQL parser adapter and are the
input to the lock classifier, the rule engine and the plan builder.
Every variant carries a ``kind`` tag; ``Statement`` is the closed union.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class ColumnDef(_Node):
    """A column definition (CREATE TABLE or ADD COLUMN)."""

    name: str
    type_name: str = Field(default="", description="Declared type, e.g. 'varchar(255)'")
    default_expr: str | None = Field(default=None, description="DEFAULT expression text")
    not_null: bool = False
    primary_key: bool = False
    references_table: str | None = Field(
        default=None, description="Inline REFERENCES target table"
    )


class ConstraintDef(_Node):
    """A table constraint (ADD CONSTRAINT or CREATE TABLE constraint)."""

    name: str | None = None
    constraint_type: Literal[
        "check", "foreign_key", "unique", "primary_key", "exclusion", "not_null"
    ]
    columns: tuple[str, ...] = ()
    expression: str | None = Field(default=None, description="CHECK expression text")
    references_table: str | None = None
    not_valid: bool = Field(default=False, description="True when declared NOT VALID")
    using_index: str | None = None


class AlterTableCommand(_Node):
    """A single ALTER TABLE sub-command."""

    action: Literal[
        "add_column",
        "drop_column",
        "alter_column_type",
        "set_not_null",
        "drop_not_null",
        "set_default",
        "drop_default",
        "add_constraint",
        "validate_constraint",
        "drop_constraint",
        "set_logged",
        "set_unlogged",
        "other",
    ]
    column: str | None = Field(default=None, description="Target column name")
    column_def: ColumnDef | None = None
    constraint: ConstraintDef | None = None
    constraint_name: str | None = Field(
        default=None, description="Constraint name for VALIDATE / DROP CONSTRAINT"
    )
    new_type: str | None = None
    default_expr: str | None = None
    cascade: bool = False


class CreateIndexStatement(_Node):
    kind: Literal["create_index"] = "create_index"
    index_name: str | None = None
    table: str
    schema_name: str | None = None
    columns: tuple[str, ...] = ()
    unique: bool = False
    concurrent: bool = False
    if_not_exists: bool = False
    access_method: str = "btree"
    where_clause: str | None = None


class CreateTableStatement(_Node):
    kind: Literal["create_table"] = "create_table"
    table: str
    schema_name: str | None = None
    columns: tuple[ColumnDef, ...] = ()
    constraints: tuple[ConstraintDef, ...] = ()
    if_not_exists: bool = False
    partition_by: str | None = None


class AlterTableStatement(_Node):
    kind: Literal["alter_table"] = "alter_table"
    table: str
    schema_name: str | None = None
    commands: tuple[AlterTableCommand, ...] = ()
    if_exists: bool = False


class DropStatement(_Node):
    kind: Literal["drop"] = "drop"
    object_type: Literal[
        "table", "index", "view", "materialized_view", "schema", "type",
        "sequence", "function", "trigger", "extension", "other",
    ]
    names: tuple[str, ...] = ()
    concurrent: bool = False
    cascade: bool = False
    if_exists: bool = False


class DropDatabaseStatement(_Node):
    kind: Literal["drop_database"] = "drop_database"
    name: str
    if_exists: bool = False


class RenameStatement(_Node):
    kind: Literal["rename"] = "rename"
    object_type: Literal["table", "column", "index", "constraint", "other"]
    table: str
    old_name: str | None = Field(
        default=None, description="Old column/constraint name (None for RENAME TABLE)"
    )
    new_name: str


class ClusterStatement(_Node):
    kind: Literal["cluster"] = "cluster"
    table: str | None = None
    index_name: str | None = None


class RefreshMaterializedViewStatement(_Node):
    kind: Literal["refresh_materialized_view"] = "refresh_materialized_view"
    view: str
    concurrent: bool = False
    with_no_data: bool = False


class VacuumStatement(_Node):
    kind: Literal["vacuum"] = "vacuum"
    tables: tuple[str, ...] = ()
    full: bool = False
    analyze: bool = False


class ReindexStatement(_Node):
    kind: Literal["reindex"] = "reindex"
    target_type: Literal["index", "table", "schema", "database", "system"]
    name: str
    concurrent: bool = False


class TruncateStatement(_Node):
    kind: Literal["truncate"] = "truncate"
    tables: tuple[str, ...] = ()
    cascade: bool = False


class AlterEnumStatement(_Node):
    """ALTER TYPE ... ADD VALUE on an enum type."""

    kind: Literal["alter_enum"] = "alter_enum"
    type_name: str
    new_value: str
    if_not_exists: bool = False


class SetStatement(_Node):
    """SET / RESET of a run-time parameter."""

    kind: Literal["set"] = "set"
    name: str
    value: str | None = None
    is_reset: bool = False
    is_local: bool = False


class TransactionStatement(_Node):
    kind: Literal["transaction"] = "transaction"
    action: Literal["begin", "start", "commit", "rollback", "savepoint", "release", "other"]


class DataStatement(_Node):
    """INSERT / UPDATE / DELETE inside a migration."""

    kind: Literal["dml"] = "dml"
    verb: Literal["insert", "update", "delete"]
    table: str
    has_where: bool = False
    source_tables: tuple[str, ...] = ()


class OtherStatement(_Node):
    """A statement the parser recognised but that has no dedicated shape here."""

    kind: Literal["other"] = "other"
    node_type: str = Field(..., description="Parser node name, e.g. 'CreateFunctionStmt'")
    tables: tuple[str, ...] = ()


Statement = Annotated[
    Union[
        CreateIndexStatement,
        CreateTableStatement,
        AlterTableStatement,
        DropStatement,
        DropDatabaseStatement,
        RenameStatement,
        ClusterStatement,
        RefreshMaterializedViewStatement,
        VacuumStatement,
        ReindexStatement,
        TruncateStatement,
        AlterEnumStatement,
        SetStatement,
        TransactionStatement,
        DataStatement,
        OtherStatement,
    ],
    Field(discriminator="kind"),
]

DDL_KINDS = frozenset({
    "create_index",
    "create_table",
    "alter_table",
    "drop",
    "drop_database",
    "rename",
    "cluster",
    "refresh_materialized_view",
    "vacuum",
    "reindex",
    "truncate",
    "alter_enum",
})


class ParsedStatement(_Node):
    """A statement node plus its position in the migration file."""

    node: Statement
    sql: str = Field(..., description="Original statement text, trimmed")
    line: int = Field(..., ge=1, description="1-based line where the statement starts")
    location: int = Field(default=0, ge=0, description="Character offset in the file")


class ParseError(_Node):
    """A parse failure reported by the external parser."""

    message: str
    cursor_position: int | None = None


class ParseResult(_Node):
    """Output of the external SQL parser for one migration file."""

    sql: str = ""
    statements: tuple[ParsedStatement, ...] = ()
    errors: tuple[ParseError, ...] = ()
