# routers/health.py

from fastapi import APIRouter

from core.cache import cache_stats
from core.config import settings
from core.permission_helpers import resolve_guard_mode
from core.remote_auth import check_has_elevated_users
from core.supabase_client import ping_supabase
from models.enums import AccessOutcome

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase table reachability")
def health_db():
    """
    One-row read from the facility, product and role tables.
    Reports ok / degraded / not_configured with per-table latency.
    """
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/auth
# Can the database answer authorization RPCs right now?
# -----------------------------------------------------
@router.get("/auth", summary="Remote authorization reachability")
async def health_auth():
    decision = await check_has_elevated_users()

    if decision.outcome == AccessOutcome.unknown:
        return {"service": "Authorization RPCs", "status": "degraded", "detail": decision.detail}

    return {"service": "Authorization RPCs", "status": "ok"}


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "env": settings.ENV,
        "role_guard_mode": str(resolve_guard_mode()),
        "cache": cache_stats(),
    }
