"""Liveness and readiness probes.

Invariants:
    - /health/ answers 200 while the process serves requests
    - /health/ready answers 503 until the database answers SELECT 1
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from doconnect.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": "doconnect-api"}


@router.get("/ready")
async def readiness():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": {"database": "unavailable"}},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
