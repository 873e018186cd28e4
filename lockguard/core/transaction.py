"""
Transaction Boundary Analysis — Tracks BEGIN ... COMMIT blocks in a migration.

Used by rules (look-behind for "am I inside a transaction?") and by the plan
builder (which statements hold their locks until COMMIT).
"""

from __future__ import annotations

from typing import Sequence

from lockguard.models.statement_models import (
    DDL_KINDS,
    CreateIndexStatement,
    DropStatement,
    ParsedStatement,
    ReindexStatement,
    TransactionStatement,
)
from lockguard.models.transaction_models import TransactionBlock, TransactionSummary


def _normalize(sql: str) -> str:
    return sql.strip().lower()


def opens_transaction(entry: ParsedStatement) -> bool:
    node = entry.node
    if isinstance(node, TransactionStatement):
        return node.action in ("begin", "start")
    sql = _normalize(entry.sql)
    return sql in ("begin", "begin transaction") or sql.startswith("begin;")


def closes_transaction(entry: ParsedStatement) -> bool:
    node = entry.node
    if isinstance(node, TransactionStatement):
        return node.action in ("commit", "rollback")
    sql = _normalize(entry.sql)
    return (
        sql in ("commit", "rollback")
        or sql.startswith("commit;")
        or sql.startswith("rollback;")
    )


def is_inside_transaction_at(statements: Sequence[ParsedStatement], index: int) -> bool:
    """Walk backwards from ``index``: the nearest BEGIN or COMMIT/ROLLBACK decides."""
    for i in range(index - 1, -1, -1):
        entry = statements[i]
        if opens_transaction(entry):
            return True
        if closes_transaction(entry):
            return False
    return False


def cannot_run_in_transaction(entry: ParsedStatement) -> bool:
    node = entry.node
    if isinstance(node, (CreateIndexStatement, ReindexStatement)):
        return node.concurrent
    if isinstance(node, DropStatement):
        return node.concurrent
    return False


def analyze_transactions(statements: Sequence[ParsedStatement]) -> TransactionSummary:
    """Collect explicit transaction blocks in statement order."""
    blocks: list[TransactionBlock] = []
    current: dict | None = None

    for i, entry in enumerate(statements):
        if opens_transaction(entry):
            if current is not None:
                # Nested BEGIN is a no-op in PostgreSQL; keep the outer block
                continue
            current = {
                "begin_index": i,
                "begin_line": entry.line,
                "ddl_indices": [],
                "invalid_in_transaction_indices": [],
            }
            continue

        if closes_transaction(entry):
            if current is not None:
                blocks.append(_freeze_block(current, end_index=i))
                current = None
            continue

        if current is not None:
            if entry.node.kind in DDL_KINDS:
                current["ddl_indices"].append(i)
            if cannot_run_in_transaction(entry):
                current["invalid_in_transaction_indices"].append(i)

    if current is not None:
        blocks.append(_freeze_block(current, end_index=None))

    return TransactionSummary(blocks=tuple(blocks))


def _freeze_block(raw: dict, end_index: int | None) -> TransactionBlock:
    return TransactionBlock(
        begin_index=raw["begin_index"],
        begin_line=raw["begin_line"],
        end_index=end_index,
        ddl_indices=tuple(raw["ddl_indices"]),
        invalid_in_transaction_indices=tuple(raw["invalid_in_transaction_indices"]),
    )
