"""
LockGuard FastAPI Application — Migration lock analysis service.

  POST /analyze        → execution plan for one parsed migration
  POST /analyze/batch  → plans for several files + ordering issues
  POST /fix            → rewrite fixable violations
  POST /ordering       → cross-file ordering issues only
  GET  /rules          → active rule catalog
  GET  /health         → {"status": "ok"}
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lockguard.api.routes.analyze import router as analyze_router
from lockguard.api.routes.fix import router as fix_router
from lockguard.api.routes.health import router as health_router
from lockguard.api.routes.ordering import router as ordering_router
from lockguard.api.routes.rules import router as rules_router
from lockguard.config import settings
from lockguard.core.analyzer import AnalysisError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("lockguard")

app = FastAPI(
    title="LockGuard",
    description="Static lock and risk analysis for PostgreSQL migrations",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(analyze_router)
app.include_router(fix_router)
app.include_router(ordering_router)
app.include_router(rules_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = await request.body()
    logger.error(f"Validation Error. Raw body: {body.decode('utf-8')[:500]} | Errors: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(), "body": body.decode("utf-8")[:100]},
    )


@app.exception_handler(AnalysisError)
async def analysis_exception_handler(request: Request, exc: AnalysisError):
    logger.warning(f"Analysis refused for {exc.path}: {len(exc.parse_errors)} parse errors")
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "path": exc.path,
            "parse_errors": [e.model_dump() for e in exc.parse_errors],
        },
    )
