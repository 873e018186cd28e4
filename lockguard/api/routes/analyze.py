"""
Analyze Routes — POST /analyze and POST /analyze/batch.

Accepts parser output for one or more migration files and returns execution
plans. A file with parse errors is refused (422 for a single file, a
per-file failure entry in a batch).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from lockguard.api.dependencies import (
    get_rule_catalog,
    get_severity_overrides,
    get_size_thresholds,
)
from lockguard.config import settings
from lockguard.core.analyzer import analyze_batch, analyze_migration
from lockguard.models.analysis_models import BatchResult
from lockguard.models.api_models import AnalyzeRequest, BatchRequest
from lockguard.models.plan_models import ExecutionPlan
from lockguard.models.risk_models import SizeThresholds
from lockguard.models.rule_models import Rule, Severity
from lockguard.models.statement_models import ParseResult

logger = logging.getLogger("lockguard.api.analyze")
router = APIRouter()


def _check_size(path: str, parse_result: ParseResult) -> None:
    size = len(parse_result.sql.encode("utf-8"))
    if size > settings.max_sql_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"{path} exceeds maximum size of {settings.max_sql_bytes} bytes",
        )


@router.post("/analyze", response_model=ExecutionPlan)
async def analyze(
    req: AnalyzeRequest,
    rules: tuple[Rule, ...] = Depends(get_rule_catalog),
    overrides: dict[str, Severity] = Depends(get_severity_overrides),
    thresholds: SizeThresholds = Depends(get_size_thresholds),
):
    """Analyze one parsed migration file. AnalysisError is mapped to 422 by the app."""
    _check_size(req.path, req.parse_result)
    return analyze_migration(
        req.path,
        req.parse_result,
        rules,
        pg_version=req.pg_version or settings.pg_version,
        production_context=req.production_context,
        severity_overrides=overrides,
        thresholds=thresholds,
    )


@router.post("/analyze/batch", response_model=BatchResult)
async def analyze_many(
    req: BatchRequest,
    rules: tuple[Rule, ...] = Depends(get_rule_catalog),
    overrides: dict[str, Severity] = Depends(get_severity_overrides),
    thresholds: SizeThresholds = Depends(get_size_thresholds),
):
    """Analyze several files in apply order and check their ordering."""
    for f in req.files:
        _check_size(f.path, f.parse_result)

    known_tables = req.known_tables if req.known_tables is not None else settings.known_tables
    result = analyze_batch(
        [(f.path, f.parse_result) for f in req.files],
        rules,
        pg_version=req.pg_version or settings.pg_version,
        production_context=req.production_context,
        severity_overrides=overrides,
        known_tables=known_tables,
        thresholds=thresholds,
    )
    if result.failures:
        logger.warning(f"Batch refused {len(result.failures)} of {len(req.files)} files")
    return result
