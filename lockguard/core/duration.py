"""
Duration Estimation — Coarse wall-clock class for a statement.

Metadata-only operations are instant. Anything that scans, rewrites or
builds scales with the target's row count; without a row count the
estimate is unknown unless the operation is knowably cheap.
"""

from __future__ import annotations

from lockguard.models.lock_models import LockClassification
from lockguard.models.plan_models import DurationClass
from lockguard.models.risk_models import TableStats
from lockguard.models.statement_models import (
    AlterEnumStatement,
    AlterTableStatement,
    ClusterStatement,
    CreateIndexStatement,
    CreateTableStatement,
    DropDatabaseStatement,
    DropStatement,
    OtherStatement,
    RenameStatement,
    SetStatement,
    Statement,
    TransactionStatement,
    VacuumStatement,
)

_REWRITE_ACTIONS = ("alter_column_type", "set_logged", "set_unlogged")
_SCAN_ACTIONS = ("set_not_null", "validate_constraint", "add_constraint")


def _scaled(rows: int | None, seconds_below: int, minutes_below: int) -> DurationClass:
    if rows is None:
        return DurationClass.UNKNOWN
    if rows < seconds_below:
        return DurationClass.SECONDS
    if rows < minutes_below:
        return DurationClass.MINUTES
    return DurationClass.HOURS


def estimate_duration(
    statement: Statement,
    lock: LockClassification,
    table_stats: TableStats | None = None,
) -> DurationClass:
    """Estimate how long ``statement`` runs on a table described by ``table_stats``."""
    rows = table_stats.row_count if table_stats is not None else None

    if isinstance(statement, (SetStatement, TransactionStatement, CreateTableStatement)):
        return DurationClass.INSTANT
    if isinstance(statement, AlterEnumStatement):
        return DurationClass.INSTANT
    if isinstance(statement, (RenameStatement, DropStatement, DropDatabaseStatement)):
        return DurationClass.INSTANT

    if isinstance(statement, CreateIndexStatement):
        if statement.concurrent:
            return _scaled(rows, 100_000, 10_000_000)
        return _scaled(rows, 10_000, 1_000_000)

    if isinstance(statement, ClusterStatement):
        return DurationClass.HOURS

    if isinstance(statement, VacuumStatement):
        if not statement.full:
            return _scaled(rows, 1_000_000, 100_000_000)
        if rows is not None and rows < 100_000:
            return DurationClass.MINUTES
        return DurationClass.HOURS

    if isinstance(statement, AlterTableStatement):
        actions = {cmd.action for cmd in statement.commands}
        if not actions or "other" in actions:
            return DurationClass.UNKNOWN
        if actions & set(_REWRITE_ACTIONS) or (lock.long_held and "add_column" in actions):
            return _scaled(rows, 100_000, 10_000_000)
        if "validate_constraint" in actions or (lock.long_held and actions & set(_SCAN_ACTIONS)):
            if rows is None:
                return DurationClass.UNKNOWN
            return DurationClass.SECONDS if rows < 1_000_000 else DurationClass.MINUTES
        if lock.long_held:
            return DurationClass.UNKNOWN
        return DurationClass.INSTANT

    if isinstance(statement, OtherStatement):
        return DurationClass.UNKNOWN
    if not lock.long_held:
        return DurationClass.INSTANT
    return _scaled(rows, 100_000, 10_000_000)
