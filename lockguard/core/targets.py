"""
Target Extraction — Relation names a statement touches.

Feeds production-context lookups, plan output, and the per-file
created/referenced table sets used by the ordering validator.
"""

from __future__ import annotations

from lockguard.models.statement_models import (
    AlterTableStatement,
    ClusterStatement,
    CreateIndexStatement,
    CreateTableStatement,
    DataStatement,
    DropStatement,
    OtherStatement,
    RefreshMaterializedViewStatement,
    ReindexStatement,
    RenameStatement,
    Statement,
    TruncateStatement,
    VacuumStatement,
)


def extract_targets(statement: Statement) -> list[str]:
    """Return relation names touched by ``statement``, primary target first."""
    if isinstance(statement, (CreateIndexStatement, CreateTableStatement, AlterTableStatement)):
        return [statement.table]
    if isinstance(statement, RenameStatement):
        return [statement.table]
    if isinstance(statement, DropStatement):
        return list(statement.names)
    if isinstance(statement, (VacuumStatement, TruncateStatement, OtherStatement)):
        return list(statement.tables)
    if isinstance(statement, ClusterStatement):
        return [statement.table] if statement.table else []
    if isinstance(statement, RefreshMaterializedViewStatement):
        return [statement.view]
    if isinstance(statement, ReindexStatement):
        return [statement.name] if statement.target_type == "table" else []
    if isinstance(statement, DataStatement):
        return [statement.table, *statement.source_tables]
    return []


def primary_target(statement: Statement) -> str | None:
    targets = extract_targets(statement)
    return targets[0] if targets else None


def created_tables(statement: Statement) -> list[str]:
    if isinstance(statement, CreateTableStatement):
        return [statement.table]
    if isinstance(statement, RenameStatement) and statement.object_type == "table":
        return [statement.new_name]
    return []


def referenced_tables(statement: Statement) -> list[str]:
    """Tables a statement needs to already exist."""
    if isinstance(statement, CreateTableStatement):
        refs = [c.references_table for c in statement.columns if c.references_table]
        refs += [c.references_table for c in statement.constraints if c.references_table]
        return [r for r in refs if r != statement.table]
    if isinstance(statement, AlterTableStatement):
        refs = [statement.table]
        for cmd in statement.commands:
            if cmd.constraint is not None and cmd.constraint.references_table:
                refs.append(cmd.constraint.references_table)
            if cmd.column_def is not None and cmd.column_def.references_table:
                refs.append(cmd.column_def.references_table)
        return refs
    if isinstance(statement, DropStatement):
        if statement.object_type == "table" and not statement.if_exists:
            return list(statement.names)
        return []
    if isinstance(statement, (CreateIndexStatement, RenameStatement, DataStatement, TruncateStatement)):
        return extract_targets(statement)
    return []
