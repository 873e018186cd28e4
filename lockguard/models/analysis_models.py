"""
Analysis Result Models — Batch output and per-file failures.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from lockguard.models.ordering_models import OrderingIssue
from lockguard.models.plan_models import ExecutionPlan
from lockguard.models.statement_models import ParseError


class FileFailure(BaseModel):
    """A file that could not be analysed because its parse failed."""

    model_config = ConfigDict(frozen=True)

    path: str
    parse_errors: tuple[ParseError, ...] = ()


class BatchResult(BaseModel):
    """Plans for every parsable file plus cross-file ordering issues."""

    model_config = ConfigDict(frozen=True)

    plans: tuple[ExecutionPlan, ...] = ()
    failures: tuple[FileFailure, ...] = ()
    ordering_issues: tuple[OrderingIssue, ...] = Field(
        default=(), description="Issues across the successfully parsed files"
    )
