"""
Lock Classifier — Maps a statement node to the PostgreSQL lock it acquires.

Pure and total: every statement variant gets a classification, and anything
without a dedicated shape falls back to the most conservative one
(ACCESS EXCLUSIVE, blocks reads and writes).
"""

from __future__ import annotations

import re

from lockguard.models.lock_models import LOCK_LEVEL_RANK, LockClassification, LockLevel
from lockguard.models.statement_models import (
    AlterEnumStatement,
    AlterTableCommand,
    AlterTableStatement,
    ClusterStatement,
    CreateIndexStatement,
    CreateTableStatement,
    DataStatement,
    DropDatabaseStatement,
    DropStatement,
    RefreshMaterializedViewStatement,
    ReindexStatement,
    RenameStatement,
    SetStatement,
    Statement,
    TransactionStatement,
    TruncateStatement,
    VacuumStatement,
)

DEFAULT_PG_VERSION = 17

VOLATILE_FUNCTIONS = (
    "now",
    "random",
    "nextval",
    "clock_timestamp",
    "statement_timestamp",
    "timeofday",
    "txid_current",
    "gen_random_uuid",
    "uuid_generate_v1",
    "uuid_generate_v4",
)

_VOLATILE_RE = re.compile(r"\b(" + "|".join(VOLATILE_FUNCTIONS) + r")\s*\(", re.IGNORECASE)

_NO_LOCK = LockClassification(lock_level=LockLevel.ACCESS_SHARE)


def conservative_default() -> LockClassification:
    return LockClassification(
        lock_level=LockLevel.ACCESS_EXCLUSIVE,
        blocks_reads=True,
        blocks_writes=True,
        long_held=False,
    )


def _exclusive(long_held: bool = False) -> LockClassification:
    return LockClassification(
        lock_level=LockLevel.ACCESS_EXCLUSIVE,
        blocks_reads=True,
        blocks_writes=True,
        long_held=long_held,
    )


def _share_update_exclusive() -> LockClassification:
    return LockClassification(lock_level=LockLevel.SHARE_UPDATE_EXCLUSIVE)


def find_volatile_function(expr: str | None) -> str | None:
    """Return the first volatile function called in ``expr``, if any."""
    if not expr:
        return None
    match = _VOLATILE_RE.search(expr)
    return match.group(1).lower() if match else None


def is_rewriting_default(expr: str | None, pg_version: int) -> bool:
    """True when ADD COLUMN ... DEFAULT ``expr`` rewrites existing rows."""
    if expr is None or expr.strip().lower() == "null":
        return False
    return pg_version < 11 or find_volatile_function(expr) is not None


def lock_severity(lock: LockClassification) -> int:
    """Total ordering of classifications; long-held locks outrank short ones."""
    base = LOCK_LEVEL_RANK[lock.lock_level]
    return base + 10 if lock.long_held else base


def classify_lock(statement: Statement, pg_version: int = DEFAULT_PG_VERSION) -> LockClassification:
    """
    Classify the table lock a statement acquires.

    Args:
        statement: Parsed statement node.
        pg_version: Target PostgreSQL major version.

    Returns:
        LockClassification for the statement.
    """
    if isinstance(statement, CreateIndexStatement):
        if statement.concurrent:
            return _share_update_exclusive()
        return LockClassification(
            lock_level=LockLevel.SHARE, blocks_writes=True, long_held=True
        )

    if isinstance(statement, AlterTableStatement):
        if not statement.commands:
            return conservative_default()
        worst = _NO_LOCK
        for cmd in statement.commands:
            lock = _classify_alter_command(cmd, pg_version)
            if lock_severity(lock) > lock_severity(worst):
                worst = lock
        return worst

    if isinstance(statement, CreateTableStatement):
        # ACCESS EXCLUSIVE on a relation nobody else can see yet
        return LockClassification(lock_level=LockLevel.ACCESS_EXCLUSIVE)

    if isinstance(statement, AlterEnumStatement):
        # Held on the type, not on any table
        return LockClassification(lock_level=LockLevel.ACCESS_EXCLUSIVE)

    if isinstance(statement, DropStatement):
        if statement.concurrent and statement.object_type == "index":
            return _share_update_exclusive()
        return _exclusive()

    if isinstance(statement, VacuumStatement):
        if statement.full:
            return _exclusive(long_held=True)
        return _share_update_exclusive()

    if isinstance(statement, ReindexStatement):
        if statement.concurrent:
            return _share_update_exclusive()
        return LockClassification(
            lock_level=LockLevel.SHARE, blocks_writes=True, long_held=True
        )

    if isinstance(statement, ClusterStatement):
        return _exclusive(long_held=True)

    if isinstance(statement, RefreshMaterializedViewStatement):
        if statement.concurrent:
            # EXCLUSIVE: reads continue, writes wait
            return LockClassification(
                lock_level=LockLevel.SHARE_ROW_EXCLUSIVE, blocks_writes=True, long_held=True
            )
        return _exclusive(long_held=not statement.with_no_data)

    if isinstance(statement, (TruncateStatement, RenameStatement, DropDatabaseStatement)):
        return _exclusive()

    if isinstance(statement, DataStatement):
        full_scan = statement.verb in ("update", "delete") and not statement.has_where
        return LockClassification(lock_level=LockLevel.ROW_EXCLUSIVE, long_held=full_scan)

    if isinstance(statement, (SetStatement, TransactionStatement)):
        return _NO_LOCK

    return conservative_default()


def _classify_alter_command(cmd: AlterTableCommand, pg_version: int) -> LockClassification:
    action = cmd.action

    if action == "add_column":
        default_expr = cmd.column_def.default_expr if cmd.column_def else cmd.default_expr
        return _exclusive(long_held=is_rewriting_default(default_expr, pg_version))

    if action in ("alter_column_type", "set_not_null", "set_logged", "set_unlogged"):
        return _exclusive(long_held=True)

    if action == "add_constraint":
        constraint = cmd.constraint
        not_valid = constraint is not None and constraint.not_valid
        if constraint is not None and constraint.constraint_type == "foreign_key":
            return LockClassification(
                lock_level=LockLevel.SHARE_ROW_EXCLUSIVE,
                blocks_writes=True,
                long_held=not not_valid,
            )
        if constraint is not None and constraint.using_index:
            return _exclusive()
        return _exclusive(long_held=not not_valid)

    if action == "validate_constraint":
        return _share_update_exclusive()

    if action in ("drop_column", "drop_constraint", "drop_not_null", "set_default", "drop_default"):
        return _exclusive()

    return conservative_default()
