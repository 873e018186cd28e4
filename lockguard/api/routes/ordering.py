"""
Ordering Route — POST /ordering

Validates a set of migration files against each other without running any
per-statement rules.
"""

from __future__ import annotations

from fastapi import APIRouter

from lockguard.config import settings
from lockguard.core.ordering import build_migration_files, validate_ordering
from lockguard.models.api_models import OrderingRequest, OrderingResponse

router = APIRouter()


@router.post("/ordering", response_model=OrderingResponse)
async def ordering(req: OrderingRequest):
    files = build_migration_files((f.path, f.statements) for f in req.files)
    known_tables = req.known_tables if req.known_tables is not None else settings.known_tables
    return OrderingResponse(files=files, issues=validate_ordering(files, known_tables))
