"""
Health check endpoints for liveness and readiness probes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from marketplace.core.config import Settings, get_settings
from marketplace.core.database import check_db_connection, get_db
from marketplace.core.logging import get_logger
from marketplace.schemas.common import HealthResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/live", response_model=HealthResponse, summary="Liveness probe")
async def liveness() -> HealthResponse:
    """Always 200 while the process is serving."""
    return HealthResponse(status="ok")


@router.get("/ready", response_model=HealthResponse, summary="Readiness probe")
async def readiness(
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Readiness probe - checks if the service can handle traffic.

    Checks:
    - the database answers a trivial query
    - JWT_SECRET is configured, otherwise nobody can log in
    """
    checks = {}

    db_ok = check_db_connection(db)
    checks["database"] = "ok" if db_ok else "failed"
    if not db_ok:
        logger.warning("Readiness check failed: database not reachable")

    secret_ok = settings.is_jwt_secret_configured
    checks["jwt_secret"] = "ok" if secret_ok else "not configured"
    if not secret_ok:
        logger.warning("Readiness check failed: JWT_SECRET not configured")

    if db_ok and secret_ok:
        return HealthResponse(status="ok", checks=checks)
    response.status_code = 503
    return HealthResponse(status="not ready", checks=checks)
