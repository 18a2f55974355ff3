# core/supabase_client.py

import time
from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Supabase client authenticated with the SERVICE ROLE KEY.

    Used for:
        - auth.get_user (bearer token validation)
        - authorization RPCs (has_national_users, get_effective_role_for_facility,
          check_conditional_permissions, log_role_change, ...)
        - reads/writes on facility_specific_roles, conditional_permissions,
          health_facilities, pharmaceutical_products

    Returns None when credentials are missing or the client cannot be built;
    callers turn that into a 500 or an `unknown` authorization outcome.
    """
    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error(
            "Missing Supabase credentials "
            f"(URL: {'SET' if supabase_url else 'MISSING'}, "
            f"SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'})"
        )
        return None

    try:
        return create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Connectivity probe for /health/db
# ============================================================

HEALTH_TABLES = [
    "health_facilities",
    "pharmaceutical_products",
    "facility_specific_roles",
    "conditional_permissions",
]


def _probe_table(client: Client, table: str) -> dict:
    started = time.perf_counter()
    try:
        res = client.table(table).select("id").limit(1).execute()
    except Exception as err:
        return {"status": "error", "detail": str(err)}

    return {
        "status": "ok",
        "rows_found": len(res.data or []),
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
    }


def ping_supabase() -> dict:
    """
    One-row read from each table the API depends on.

    status: ok | degraded (some tables failed) | not_configured
    Auth tables are not queried.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    tables = {t: _probe_table(client, t) for t in HEALTH_TABLES}
    failing = sorted(t for t, result in tables.items() if result["status"] != "ok")

    if failing:
        logger.warning(f"Supabase health check failing for: {', '.join(failing)}")

    return {
        "service": "Supabase",
        "status": "degraded" if failing else "ok",
        "tables": tables,
    }
