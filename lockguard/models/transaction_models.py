"""
Transaction Data Models — Explicit BEGIN ... COMMIT blocks of a migration file.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TransactionBlock(BaseModel):
    """One explicit transaction block."""

    model_config = ConfigDict(frozen=True)

    begin_index: int
    begin_line: int
    end_index: int | None = None
    ddl_indices: tuple[int, ...] = ()
    invalid_in_transaction_indices: tuple[int, ...] = ()

    @property
    def unterminated(self) -> bool:
        return self.end_index is None


class TransactionSummary(BaseModel):
    """All transaction blocks of a file."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[TransactionBlock, ...] = ()

    @property
    def has_unterminated(self) -> bool:
        return any(b.unterminated for b in self.blocks)
