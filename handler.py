"""
AWS Lambda handler — Mangum wrapper for the LockGuard FastAPI app.

API Gateway events are translated to ASGI; lifespan events are not needed
because the service keeps no startup state.
"""

from mangum import Mangum

from lockguard.main import app

handler = Mangum(app, lifespan="off")
