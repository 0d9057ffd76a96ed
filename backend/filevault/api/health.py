"""Health check endpoints"""
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filevault import __version__
from filevault.database import get_db
from filevault.utils.clock import utcnow
from filevault.utils.logger import logger

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time
STARTUP_TIME = time.time()


@router.get("")
def health_check():
    """
    Basic health check endpoint

    Returns 200 if service is running
    """
    return {
        "status": "healthy",
        "service": "FileVault",
        "version": __version__,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Readiness check - verifies the database is reachable

    Returns 200 if ready to serve traffic, 503 if not ready
    """
    checks = {
        "database": False,
        "database_latency_ms": None,
    }

    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        checks["database"] = True
        checks["database_latency_ms"] = round(latency_ms, 2)
    except SQLAlchemyError:
        logger.error("Readiness check failed", extra={"action": "readiness"}, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "checks": checks, "message": "Database check failed"},
        )

    if latency_ms > 1000:  # More than 1 second
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "checks": checks, "message": "Database latency is high"},
        )

    return {
        "status": "ready",
        "checks": checks,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/live")
def liveness_check():
    """
    Liveness check - verifies service is alive

    Used by Kubernetes liveness probe
    """
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": utcnow().isoformat(),
    }
