"""
Jojárts API — Health Check Route
==================================

GET /api/health answers {"ok": true} while the process is serving. It does
not probe the database: storage is verified once at startup, and a failed
check there stops the process.
"""

from fastapi import APIRouter

from app.schemas.common import HealthResponse

router = APIRouter(prefix="/api", tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(ok=True)
