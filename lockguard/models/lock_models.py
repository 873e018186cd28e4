"""
Lock Data Models — PostgreSQL table-lock levels and per-statement classification.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class LockLevel(str, Enum):
    ACCESS_SHARE = "ACCESS SHARE"
    ROW_EXCLUSIVE = "ROW EXCLUSIVE"
    SHARE_UPDATE_EXCLUSIVE = "SHARE UPDATE EXCLUSIVE"
    SHARE = "SHARE"
    SHARE_ROW_EXCLUSIVE = "SHARE ROW EXCLUSIVE"
    ACCESS_EXCLUSIVE = "ACCESS EXCLUSIVE"


# Weakest to strongest
LOCK_LEVEL_RANK: dict[LockLevel, int] = {
    LockLevel.ACCESS_SHARE: 0,
    LockLevel.ROW_EXCLUSIVE: 1,
    LockLevel.SHARE_UPDATE_EXCLUSIVE: 2,
    LockLevel.SHARE: 3,
    LockLevel.SHARE_ROW_EXCLUSIVE: 4,
    LockLevel.ACCESS_EXCLUSIVE: 5,
}


class LockClassification(BaseModel):
    """The lock a statement acquires and how it affects concurrent traffic."""

    model_config = ConfigDict(frozen=True)

    lock_level: LockLevel
    blocks_reads: bool = False
    blocks_writes: bool = False
    long_held: bool = False
