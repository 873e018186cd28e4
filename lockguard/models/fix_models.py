"""
Auto-Fix Data Models — Text edits and the result of rewriting a migration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from lockguard.models.rule_models import RuleViolation


class Edit(BaseModel):
    """Replace ``text[start:end]`` with ``replacement``. Insertions have start == end."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    replacement: str = ""


class FixResult(BaseModel):
    """Rewritten SQL plus what could and could not be fixed automatically."""

    model_config = ConfigDict(frozen=True)

    fixed_sql: str
    fixed_count: int = Field(default=0, description="Number of violations whose fix was applied or already in place")
    unfixable: tuple[RuleViolation, ...] = Field(
        default=(), description="Violations that need a manual change"
    )
    edits: tuple[Edit, ...] = Field(
        default=(), description="File-level edits applied, in application order"
    )
