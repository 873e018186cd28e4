"""
API Request/Response Models — Public JSON contract of the HTTP service.

Statement nodes arrive already parsed; the service never parses SQL itself.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from lockguard.models.ordering_models import MigrationFile, OrderingIssue
from lockguard.models.risk_models import ProductionContext
from lockguard.models.rule_models import RuleViolation, Severity
from lockguard.models.statement_models import ParsedStatement, ParseResult


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze."""

    path: str = Field(..., description="Migration file path, used for reporting")
    parse_result: ParseResult
    pg_version: int | None = Field(
        default=None, ge=9, description="Target PostgreSQL major version; server default when omitted"
    )
    production_context: ProductionContext | None = None


class BatchFile(BaseModel):
    path: str
    parse_result: ParseResult


class BatchRequest(BaseModel):
    """Request body for POST /analyze/batch. Files are listed in apply order."""

    files: list[BatchFile] = Field(default_factory=list)
    pg_version: int | None = Field(default=None, ge=9)
    production_context: ProductionContext | None = None
    known_tables: list[str] | None = Field(
        default=None, description="Pre-existing tables; server default when omitted"
    )


class FixRequest(BaseModel):
    """Request body for POST /fix."""

    sql: str = Field(..., description="Full migration text")
    violations: list[RuleViolation] = Field(default_factory=list)


class OrderingFile(BaseModel):
    path: str
    statements: list[ParsedStatement] = Field(default_factory=list)


class OrderingRequest(BaseModel):
    """Request body for POST /ordering."""

    files: list[OrderingFile] = Field(default_factory=list)
    known_tables: list[str] | None = None


class OrderingResponse(BaseModel):
    files: list[MigrationFile]
    issues: list[OrderingIssue]


class RuleInfo(BaseModel):
    """Catalog entry exposed by GET /rules."""

    id: str
    name: str
    severity: Severity
    description: str
    rationale: str = ""
    docs_url: str | None = None
    fixable: bool = False
    requires_production_context: bool = False
