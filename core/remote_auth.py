# core/remote_auth.py

"""
Server-side authorization checks (Supabase RPCs).

Facility-scoped and conditional permissions depend on rows this API does not
hold, so the database answers them. Every check resolves to allowed, denied
or unknown. Timeouts, network failures and server errors are reported as
unknown; callers gate on `AccessDecision.is_allowed`, so unknown never grants.

The Supabase client is blocking; each call runs in a worker thread under
asyncio.wait_for. Independent checks can be awaited concurrently.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Set

from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.roles import to_internal
from core.supabase_client import get_supabase_client
from models.enums import AccessMethod, LookupStatus
from models.permissions import (
    AccessDecision,
    ConditionalCheckRequest,
    EffectiveRoleResult,
)


class RemoteCallError(Exception):
    """An RPC could not be completed (timeout, transport, server error)."""


# ============================================================
# RPC transport
# ============================================================
def _execute_rpc(client, function_name: str, params: dict):
    return client.rpc(function_name, params).execute()


async def call_rpc(
    function_name: str,
    params: Optional[dict] = None,
    *,
    attempts: Optional[int] = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    Run a Supabase RPC with a per-attempt timeout and bounded retries.

    Returns the RPC's `data`. Raises RemoteCallError after the last failed
    attempt. Cancellation of the awaiting task propagates untouched.
    """
    attempts = attempts or settings.RPC_MAX_ATTEMPTS
    timeout = timeout if timeout is not None else settings.RPC_TIMEOUT_SECONDS
    params = params or {}

    last_error = f"{function_name} was not attempted"

    for attempt in range(1, attempts + 1):
        client = get_supabase_client()
        if client is None:
            raise RemoteCallError("Supabase client not configured")

        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(_execute_rpc, client, function_name, params),
                timeout=timeout,
            )
            return result.data

        except asyncio.TimeoutError:
            last_error = f"{function_name} timed out after {timeout}s"
        except Exception as e:
            last_error = f"{function_name} failed: {extract_supabase_error(e)}"

        logger.warning(f"RPC attempt {attempt}/{attempts}: {last_error}")

        if attempt < attempts:
            await asyncio.sleep(settings.RPC_RETRY_BACKOFF_SECONDS * (2 ** (attempt - 1)))

    raise RemoteCallError(last_error)


def _decision_from_data(function_name: str, data: Any) -> AccessDecision:
    if isinstance(data, bool):
        return AccessDecision.from_bool(data)
    logger.warning(f"{function_name} returned a non-boolean result: {data!r}")
    return AccessDecision.unknown(f"{function_name} returned an unexpected result")


# ============================================================
# Bootstrap: does any national administrator exist?
# ============================================================
async def check_has_elevated_users() -> AccessDecision:
    """
    allowed  -> at least one national user exists
    denied   -> none yet (first-admin setup is open)
    unknown  -> could not tell
    """
    try:
        data = await call_rpc("has_national_users")
    except RemoteCallError as e:
        return AccessDecision.unknown(str(e))
    return _decision_from_data("has_national_users", data)


# ============================================================
# Effective role at a facility
# ============================================================
async def get_effective_role_for_facility(user_id: str, facility_id: str) -> EffectiveRoleResult:
    """
    Resolve the role a user holds at a facility. Not cached: a grant
    revoked by another worker or directly in SQL must stop counting at once.
    """
    try:
        data = await call_rpc(
            "get_effective_role_for_facility",
            {"_user_id": user_id, "_facility_id": facility_id},
        )
    except RemoteCallError as e:
        return EffectiveRoleResult(
            status=LookupStatus.unknown,
            user_id=user_id,
            facility_id=facility_id,
            detail=str(e),
        )

    return EffectiveRoleResult(
        status=LookupStatus.resolved,
        user_id=user_id,
        facility_id=facility_id,
        role=to_internal(data) if data else None,
    )


# ============================================================
# Conditional (time / location gated) permissions
# ============================================================
async def check_conditional_permission(
    user_id: str,
    facility_id: str,
    permission_name: str,
    context: Optional[dict] = None,
    *,
    audit: bool = True,
) -> AccessDecision:
    context = context or {}

    try:
        data = await call_rpc(
            "check_conditional_permissions",
            {
                "_user_id": user_id,
                "_facility_id": facility_id,
                "_permission_name": permission_name,
                "_user_location": context,
            },
        )
    except RemoteCallError as e:
        return AccessDecision.unknown(str(e))

    decision = _decision_from_data("check_conditional_permissions", data)

    if audit and not decision.is_unknown:
        schedule_permission_usage_log(
            user_id=user_id,
            permission_name=permission_name,
            resource_type="conditional_permission",
            facility_id=facility_id,
            granted=decision.is_allowed,
            method=AccessMethod.conditional,
            conditions_met=context,
        )

    return decision


async def check_conditional_permissions_many(
    requests: Iterable[ConditionalCheckRequest],
    *,
    audit: bool = True,
) -> List[AccessDecision]:
    """Independent checks issued concurrently; results follow input order."""
    return list(await asyncio.gather(*(
        check_conditional_permission(
            r.user_id,
            r.facility_id,
            r.permission_name,
            r.context,
            audit=audit,
        )
        for r in requests
    )))


# ============================================================
# Who may manage roles at a facility
# ============================================================
async def can_manage_facility_roles(user_id: str, facility_id: str) -> AccessDecision:
    """Super admins, or users holding owner access to the facility."""
    try:
        is_super_admin = await call_rpc("is_super_admin", {"user_uuid": user_id})
        if is_super_admin is True:
            return AccessDecision.from_bool(True)

        has_access = await call_rpc(
            "user_has_facility_access",
            {
                "_user_id": user_id,
                "_facility_id": facility_id,
                "_required_type": "owner",
            },
        )
    except RemoteCallError as e:
        return AccessDecision.unknown(str(e))

    return AccessDecision.from_bool(has_access is True)


# ============================================================
# Permission usage audit (best-effort)
# ============================================================
_pending_audits: Set[asyncio.Task] = set()


async def log_permission_usage(
    user_id: str,
    permission_name: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    facility_id: Optional[str] = None,
    granted: bool = True,
    method: AccessMethod = AccessMethod.facility_role,
    conditions_met: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Write one permission_usage_log row. Returns False when the write
    ultimately failed (degraded audit); never raises RemoteCallError.
    """
    try:
        await call_rpc(
            "log_permission_usage",
            {
                "_user_id": user_id,
                "_permission_name": permission_name,
                "_resource_type": resource_type,
                "_resource_id": resource_id,
                "_facility_id": facility_id,
                "_access_granted": granted,
                "_access_method": str(method),
                "_conditions_met": conditions_met or {},
                "_session_id": None,
            },
            attempts=settings.AUDIT_LOG_MAX_ATTEMPTS,
        )
    except RemoteCallError as e:
        logger.warning(
            f"Degraded audit: permission usage not recorded "
            f"(user={user_id}, permission={permission_name}, granted={granted}): {e}"
        )
        return False

    return True


def schedule_permission_usage_log(**kwargs) -> asyncio.Task:
    """Fire-and-forget wrapper around log_permission_usage."""
    task = asyncio.get_running_loop().create_task(log_permission_usage(**kwargs))
    _pending_audits.add(task)
    task.add_done_callback(_pending_audits.discard)
    return task


async def wait_for_pending_audits():
    """Await audit writes still in flight (shutdown / tests)."""
    if _pending_audits:
        await asyncio.gather(*list(_pending_audits), return_exceptions=True)
