# core/facility_roles.py

"""
Facility-specific role lifecycle.

Rows in facility_specific_roles are never deleted: revoking flips
is_active to false so the grant stays visible to audits. Every grant or
revoke is paired with one role_audit_log entry written through the
log_role_change RPC; a failed audit write is logged and does not undo
the role change.
"""

import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException

from core.config import settings
from core.errors import extract_supabase_error, handle_supabase_error, is_unique_violation
from core.logging_config import logger
from core.roles import to_external
from core.supabase_client import get_supabase_client
from models.enums import Role, RoleChangeAction, RoleType
from models.facility_role import FacilityRoleRead


TABLE = "facility_specific_roles"


def _client():
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# ============================================================
# Audit
# ============================================================
def log_role_change(
    actor_id: str,
    target_user_id: str,
    action: RoleChangeAction,
    role_type: RoleType = RoleType.facility_specific,
    old_role: Optional[Role] = None,
    new_role: Optional[Role] = None,
    facility_id: Optional[str] = None,
    reason: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> bool:
    """
    Append one role_audit_log entry. Returns False when every attempt
    failed (degraded audit). Never raises.
    """
    client = get_supabase_client()
    if client is None:
        logger.warning("Degraded audit: Supabase client not configured, role change not logged")
        return False

    params = {
        "_user_id": actor_id,
        "_target_user_id": target_user_id,
        "_action": str(action),
        "_role_type": str(role_type),
        "_old_role": str(to_external(old_role)) if old_role else None,
        "_new_role": str(to_external(new_role)) if new_role else None,
        "_facility_id": facility_id,
        "_reason": reason,
        "_metadata": {
            **(metadata or {}),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": "facility_role_service",
        },
    }

    last_error = None
    for attempt in range(1, settings.AUDIT_LOG_MAX_ATTEMPTS + 1):
        try:
            client.rpc("log_role_change", params).execute()
            return True
        except Exception as e:
            last_error = extract_supabase_error(e)
            logger.warning(
                f"log_role_change attempt {attempt}/{settings.AUDIT_LOG_MAX_ATTEMPTS} failed: {last_error}"
            )
            if attempt < settings.AUDIT_LOG_MAX_ATTEMPTS:
                time.sleep(settings.RPC_RETRY_BACKOFF_SECONDS * (2 ** (attempt - 1)))

    logger.warning(
        f"Degraded audit: {action} of {new_role or old_role} for {target_user_id} "
        f"at facility {facility_id} not recorded: {last_error}"
    )
    return False


# ============================================================
# Writes
# ============================================================
def assign_facility_role(
    user_id: str,
    facility_id: str,
    role: Role,
    granted_by: str,
) -> FacilityRoleRead:
    client = _client()

    try:
        result = (
            client.table(TABLE)
            .insert({
                "user_id": user_id,
                "facility_id": facility_id,
                "role": str(to_external(role)),
                "granted_by": granted_by,
            })
            .execute()
        )
    except Exception as e:
        if is_unique_violation(e):
            raise HTTPException(409, "User already has this role for this facility")
        raise handle_supabase_error(e, "Failed to assign facility role")

    if not result.data:
        raise HTTPException(500, "Insert returned no data")

    assignment = FacilityRoleRead(**result.data[0])

    log_role_change(
        granted_by,
        user_id,
        RoleChangeAction.assign,
        new_role=role,
        facility_id=facility_id,
    )

    logger.info(f"Facility role {role} granted to {user_id} at {facility_id} by {granted_by}")
    return assignment


def get_facility_role(role_id: str) -> FacilityRoleRead:
    """One grant by id, active or not."""
    client = _client()

    try:
        current = (
            client.table(TABLE)
            .select("*")
            .eq("id", role_id)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load facility role")

    if current is None or not current.data:
        raise HTTPException(404, "Facility role not found")

    return FacilityRoleRead(**current.data)


def revoke_facility_role(role_id: str, revoked_by: str) -> FacilityRoleRead:
    """Soft-delete one grant. The row stays readable for the audit trail."""
    existing = get_facility_role(role_id)
    client = _client()

    try:
        (
            client.table(TABLE)
            .update({"is_active": False})
            .eq("id", role_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to revoke facility role")

    if existing.is_active:
        log_role_change(
            revoked_by,
            existing.user_id,
            RoleChangeAction.revoke,
            old_role=existing.role,
            facility_id=existing.facility_id,
        )

    logger.info(f"Facility role {role_id} revoked by {revoked_by}")
    return existing.model_copy(update={"is_active": False})


def revoke_user_facility_role(
    user_id: str,
    facility_id: str,
    role: Role,
    revoked_by: str,
) -> FacilityRoleRead:
    """Revoke by (user, facility, role) instead of row id."""
    client = _client()

    try:
        result = (
            client.table(TABLE)
            .select("id")
            .eq("user_id", user_id)
            .eq("facility_id", facility_id)
            .eq("role", str(to_external(role)))
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load facility role")

    if not result.data:
        raise HTTPException(404, "No active facility role matches")

    return revoke_facility_role(result.data[0]["id"], revoked_by)


def bulk_assign_facility_roles(
    user_ids: List[str],
    facility_id: str,
    role: Role,
    granted_by: str,
) -> int:
    """Database-side bulk grant; one audit entry covers the whole batch."""
    if not user_ids:
        return 0

    client = _client()

    try:
        result = client.rpc(
            "bulk_assign_facility_roles",
            {
                "_user_ids": user_ids,
                "_facility_id": facility_id,
                "_role": str(to_external(role)),
                "_granted_by": granted_by,
            },
        ).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to bulk assign roles")

    assigned = int(result.data or 0)

    log_role_change(
        granted_by,
        user_ids[0],
        RoleChangeAction.bulk_assign,
        new_role=role,
        facility_id=facility_id,
        reason=f"Bulk assigned to {len(user_ids)} users",
        metadata={"user_ids": user_ids, "total_users": len(user_ids)},
    )
    return assigned


# ============================================================
# Reads
# ============================================================
def _select_roles(filters: dict, active_only: bool = True) -> List[FacilityRoleRead]:
    client = _client()

    try:
        query = client.table(TABLE).select("*")
        for key, val in filters.items():
            query = query.eq(key, val)
        if active_only:
            query = query.eq("is_active", True)
        result = query.order("granted_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch facility roles")

    return [FacilityRoleRead(**row) for row in (result.data or [])]


def get_facility_roles(facility_id: str) -> List[FacilityRoleRead]:
    return _select_roles({"facility_id": facility_id})


def get_user_facility_roles(user_id: str) -> List[FacilityRoleRead]:
    return _select_roles({"user_id": user_id})


def get_role_history(
    facility_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> List[FacilityRoleRead]:
    """Active and revoked grants, newest first."""
    filters = {}
    if facility_id:
        filters["facility_id"] = facility_id
    if user_id:
        filters["user_id"] = user_id
    return _select_roles(filters, active_only=False)
