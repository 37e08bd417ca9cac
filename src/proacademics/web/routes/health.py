"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from proacademics.config import load_app_config
from proacademics.db.database import ping
from proacademics.web.schemas import ApiResponse, HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=ApiResponse[HealthResponse])
async def health_check() -> dict:
    """Check API and database health."""
    database_ok = ping()
    health = HealthResponse(
        status="ok" if database_ok else "degraded",
        version=load_app_config().api.version,
        timestamp=datetime.now(timezone.utc).isoformat(),
        checks={"database": "ok" if database_ok else "error"},
    )
    return {"success": True, "data": health}
