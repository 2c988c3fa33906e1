"""
Health check endpoint for the account service
"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from ..db import check_db_connection

router = APIRouter(tags=["health"])

_started = time.monotonic()


@router.get("/health")
def health_check(request: Request) -> JSONResponse:
    """
    Report database and session cache status.

    The cache is optional: only the database decides the HTTP status,
    200 when reachable and 503 otherwise.
    """
    database_ok = check_db_connection()
    cache = getattr(request.app.state, "session_cache", None)
    cache_ok = cache is not None and cache.is_available()

    health: Dict[str, Any] = {
        "status": "OK" if database_ok else "DEGRADED",
        "uptime": round(time.monotonic() - _started, 3),
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "database": "healthy" if database_ok else "unhealthy",
            "redis": "healthy" if cache_ok else "unhealthy",
        },
    }
    status_code = status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=health)
