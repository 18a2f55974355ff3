# tests/fake_supabase.py

"""
In-memory stand-in for the parts of the Supabase client the API uses:
table query builder, rpc() and auth.get_user(). Test-only.
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Callable, Dict, List


class FakeAPIError(Exception):
    """Shaped like postgrest.APIError (message + code)."""

    def __init__(self, message: str, code: str = None):
        super().__init__({"message": message, "code": code})
        self.message = message
        self.code = code


class FakeResponse:
    def __init__(self, data):
        self.data = data


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


TABLE_DEFAULTS: Dict[str, Callable[[], dict]] = {
    "facility_specific_roles": lambda: {"is_active": True, "granted_at": _now()},
    "conditional_permissions": lambda: {"is_active": True, "created_at": _now(), "updated_at": _now()},
    "role_audit_log": lambda: {"created_at": _now()},
    "permission_usage_log": lambda: {"created_at": _now()},
}


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters: List[Callable[[dict], bool]] = []
        self._limit = None
        self._order = None
        self._single = False

    # builders
    def select(self, *args, **kwargs):
        self.op = "select"
        return self

    def insert(self, payload, **kwargs):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in str(row.get(column) or "").lower())
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def maybe_single(self):
        self._single = True
        return self

    def single(self):
        self._single = True
        return self

    # execution
    def execute(self):
        self.db.queries.append((self.table, self.op))
        failure = self.db.table_failures.get((self.table, self.op))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db.insert_row(self.table, item) for item in items]
            return FakeResponse(created)

        matched = [row for row in rows if all(f(row) for f in self.filters)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.op == "delete":
            for row in matched:
                rows.remove(row)
            return FakeResponse([dict(row) for row in matched])

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]

        data = [dict(row) for row in matched]
        if self._single:
            return FakeResponse(data[0] if data else None)
        return FakeResponse(data)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, dict(self.params)))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise FakeAPIError(f"function {self.name} does not exist", code="42883")
        return FakeResponse(handler(self.params))


class FakeAuth:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def get_user(self, token):
        user = self.db.auth_users.get(token)
        if user is None:
            raise FakeAPIError("invalid JWT")
        return SimpleNamespace(user=user)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.auth_users: Dict[str, SimpleNamespace] = {}
        self.rpc_calls: List[tuple] = []
        self.queries: List[tuple] = []
        self.table_failures: Dict[tuple, Exception] = {}
        self.auth = FakeAuth(self)
        self.rpc_handlers: Dict[str, Callable[[dict], object]] = {
            "has_national_users": self._has_national_users,
            "get_effective_role_for_facility": self._effective_role,
            "check_conditional_permissions": self._check_conditional,
            "log_permission_usage": self._log_permission_usage,
            "log_role_change": self._log_role_change,
            "is_super_admin": lambda params: False,
            "user_has_facility_access": lambda params: False,
            "bulk_assign_facility_roles": self._bulk_assign,
        }

    # client surface
    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})

    # helpers
    def rows(self, table) -> List[dict]:
        return self.tables.setdefault(table, [])

    def rpc_count(self, name) -> int:
        return sum(1 for call, _ in self.rpc_calls if call == name)

    def insert_row(self, table, item) -> dict:
        if table == "facility_specific_roles":
            for row in self.rows(table):
                if (
                    row["is_active"]
                    and row["user_id"] == item["user_id"]
                    and row["facility_id"] == item["facility_id"]
                    and row["role"] == item["role"]
                ):
                    raise FakeAPIError(
                        "duplicate key value violates unique constraint", code="23505"
                    )

        row = {"id": str(uuid.uuid4()), **TABLE_DEFAULTS.get(table, dict)(), **item}
        self.rows(table).append(row)
        return dict(row)

    def add_user(self, token, user_id, role, email=None, facility_id=None, metadata=None):
        self.auth_users[token] = SimpleNamespace(
            id=user_id,
            email=email or f"{user_id}@example.org",
            user_metadata=metadata or {},
        )
        self.rows("profiles").append({
            "id": user_id,
            "role": role,
            "full_name": user_id.title(),
            "facility_id": facility_id,
        })

    # default RPC implementations
    def _has_national_users(self, params):
        return any(p.get("role") in ("national", "admin") for p in self.rows("profiles"))

    def _effective_role(self, params):
        grants = [
            row for row in self.rows("facility_specific_roles")
            if row["is_active"]
            and row["user_id"] == params["_user_id"]
            and row["facility_id"] == params["_facility_id"]
        ]
        if grants:
            return sorted(grants, key=lambda r: r["granted_at"])[-1]["role"]
        for profile in self.rows("profiles"):
            if profile["id"] == params["_user_id"]:
                return profile["role"]
        return None

    def _check_conditional(self, params):
        return any(
            row["is_active"]
            and row["user_id"] == params["_user_id"]
            and row["facility_id"] == params["_facility_id"]
            and row["permission_name"] == params["_permission_name"]
            for row in self.rows("conditional_permissions")
        )

    def _log_permission_usage(self, params):
        row = self.insert_row("permission_usage_log", {
            "user_id": params["_user_id"],
            "permission_name": params["_permission_name"],
            "resource_type": params["_resource_type"],
            "resource_id": params.get("_resource_id"),
            "facility_id": params.get("_facility_id"),
            "access_granted": params.get("_access_granted", True),
            "access_method": params.get("_access_method"),
            "conditions_met": params.get("_conditions_met"),
        })
        return row["id"]

    def _log_role_change(self, params):
        row = self.insert_row("role_audit_log", {
            "user_id": params["_user_id"],
            "target_user_id": params["_target_user_id"],
            "action": params["_action"],
            "role_type": params["_role_type"],
            "old_role": params.get("_old_role"),
            "new_role": params.get("_new_role"),
            "facility_id": params.get("_facility_id"),
            "reason": params.get("_reason"),
            "metadata": params.get("_metadata"),
        })
        return row["id"]

    def _bulk_assign(self, params):
        count = 0
        for user_id in params["_user_ids"]:
            try:
                self.insert_row("facility_specific_roles", {
                    "user_id": user_id,
                    "facility_id": params["_facility_id"],
                    "role": params["_role"],
                    "granted_by": params["_granted_by"],
                })
                count += 1
            except FakeAPIError:
                pass
        return count
