"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter

from lockguard.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "pg_version": settings.pg_version,
    }
