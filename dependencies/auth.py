from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.errors import extract_supabase_error
from core.supabase_client import get_supabase_client
from core.logging_config import logger
from core.roles import to_internal
from models.enums import Role


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model (backend identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID
    email: str
    role: Role                      # always mapped through to_internal

    full_name: Optional[str] = None
    facility_id: Optional[str] = None   # home facility, if any


# ============================================================
# Profile lookup (profiles table is the role source of truth)
# ============================================================
def _load_profile(client: Client, user_id: str) -> dict:
    """
    Fetch the caller's profile row. A missing row yields {} (viewer); a
    failed lookup raises 503 so the caller retries instead of being
    authorized on incomplete data.
    """
    try:
        result = (
            client.table("profiles")
            .select("role, full_name, facility_id")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        logger.warning(f"Profile lookup failed for {user_id}: {extract_supabase_error(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to verify access right now. Please retry.",
        )

    if result is None or not result.data:
        return {}
    return result.data


# ============================================================
# AUTH DECODING (Supabase: validates JWT + fetches profile)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    token = credentials.credentials

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
        if not auth_resp or not auth_resp.user:
            raise unauthorized
        auth_user = auth_resp.user
    except HTTPException:
        raise
    except Exception:
        raise unauthorized

    user_id = auth_user.id
    email = auth_user.email
    metadata = auth_user.user_metadata or {}

    if not email:
        raise unauthorized

    # ---------------------------------------------------------
    # Role comes from the profiles row only. user_metadata is
    # writable by the user, so it never supplies a role.
    # Missing / unknown codes degrade to viewer.
    # ---------------------------------------------------------
    profile = _load_profile(client, user_id)

    return CurrentUser(
        id=user_id,
        email=email,
        role=to_internal(profile.get("role")),
        full_name=profile.get("full_name") or metadata.get("full_name"),
        facility_id=profile.get("facility_id"),
    )
