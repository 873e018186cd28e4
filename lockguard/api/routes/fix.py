"""
Fix Route — POST /fix

Rewrites a migration for the violations that have a mechanical fix.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from lockguard.config import settings
from lockguard.engine.auto_fix import auto_fix
from lockguard.models.api_models import FixRequest
from lockguard.models.fix_models import FixResult

router = APIRouter()


@router.post("/fix", response_model=FixResult)
async def fix(req: FixRequest):
    if len(req.sql.encode("utf-8")) > settings.max_sql_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"SQL exceeds maximum size of {settings.max_sql_bytes} bytes",
        )
    return auto_fix(
        req.sql,
        req.violations,
        lock_timeout=settings.lock_timeout_value,
        statement_timeout=settings.statement_timeout_value,
    )
