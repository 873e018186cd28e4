"""
Ordering Data Models — Per-file migration summaries and cross-file issues.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from lockguard.models.rule_models import Severity

VersionScheme = Literal["flyway", "timestamp", "sequential"]

OrderingIssueKind = Literal[
    "out-of-order", "duplicate-version", "missing-dependency", "gap", "invalid-name"
]


class MigrationFile(BaseModel):
    """What the ordering validator needs to know about one migration file."""

    model_config = ConfigDict(frozen=True)

    path: str
    name: str = Field(..., description="File name without directories")
    version: tuple[int, ...] | None = Field(
        default=None, description="Parsed version, e.g. (1, 2) for V1.2__x.sql"
    )
    scheme: VersionScheme | None = None
    created_tables: tuple[str, ...] = Field(default=(), description="Tables the file creates, sorted")
    referenced_tables: tuple[str, ...] = Field(
        default=(), description="Tables the file needs to already exist, sorted"
    )


class OrderingIssue(BaseModel):
    """A cross-file ordering finding. Advisory; never raised."""

    model_config = ConfigDict(frozen=True)

    kind: OrderingIssueKind
    severity: Severity
    message: str
    files: tuple[str, ...] = ()
