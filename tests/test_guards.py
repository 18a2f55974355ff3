# tests/test_guards.py

"""
Tests for the FastAPI role guards (enforcing vs audit-only) and the
mapping of remote decisions to HTTP errors.
"""

import logging

import pytest
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient

from core.config import settings
from core.permission_helpers import (
    raise_for_decision,
    requires_minimum_role,
    requires_permission,
    requires_role,
    resolve_guard_mode,
)
from dependencies.auth import CurrentUser, get_current_user
from models.enums import AccessOutcome, GuardMode, Role
from models.permissions import AccessDecision


def make_user(role: Role) -> CurrentUser:
    return CurrentUser(id=f"{role.value}-1", email=f"{role.value}@example.org", role=role)


def guarded_app(user: CurrentUser) -> TestClient:
    app = FastAPI()

    @app.get("/zonal-or-above")
    def zonal_or_above(current_user: CurrentUser = Depends(requires_minimum_role(Role.zonal))):
        return {"user": current_user.id}

    @app.get("/audited", dependencies=[Depends(requires_minimum_role(Role.zonal, mode=GuardMode.audit_only))])
    def audited():
        return {"ok": True}

    @app.get("/national-only", dependencies=[Depends(requires_role([Role.national]))])
    def national_only():
        return {"ok": True}

    @app.get("/delete", dependencies=[Depends(requires_permission("delete_products"))])
    def delete():
        return {"ok": True}

    app.dependency_overrides[get_current_user] = lambda: user
    return TestClient(app)


def test_minimum_role_guard_passes_higher_roles():
    client = guarded_app(make_user(Role.regional))
    response = client.get("/zonal-or-above")
    assert response.status_code == 200
    assert response.json() == {"user": "regional-1"}


def test_minimum_role_guard_rejects_lower_roles():
    client = guarded_app(make_user(Role.facility_manager))
    response = client.get("/zonal-or-above")
    assert response.status_code == 403
    assert "zonal" in response.json()["detail"]


def test_requires_role_exact_membership():
    assert guarded_app(make_user(Role.national)).get("/national-only").status_code == 200
    assert guarded_app(make_user(Role.regional)).get("/national-only").status_code == 403


def test_audit_only_guard_lets_request_through_and_logs(caplog):
    client = guarded_app(make_user(Role.viewer))

    with caplog.at_level(logging.WARNING, logger="pharmachain"):
        response = client.get("/audited")

    assert response.status_code == 200
    assert any("audit-only" in record.getMessage() for record in caplog.records)


def test_guard_mode_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "ROLE_GUARD_MODE", "audit_only")
    client = guarded_app(make_user(Role.viewer))

    assert client.get("/zonal-or-above").status_code == 200
    # Permission guards never switch to audit-only
    assert client.get("/delete").status_code == 403


def test_invalid_guard_mode_setting_enforces(monkeypatch):
    monkeypatch.setattr(settings, "ROLE_GUARD_MODE", "whatever")
    assert resolve_guard_mode() == GuardMode.enforcing
    assert guarded_app(make_user(Role.viewer)).get("/zonal-or-above").status_code == 403


def test_permission_guard():
    assert guarded_app(make_user(Role.national)).get("/delete").status_code == 200

    response = guarded_app(make_user(Role.facility_manager)).get("/delete")
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions: 'delete_products' required"


def test_raise_for_decision_allowed_is_silent():
    raise_for_decision(AccessDecision(outcome=AccessOutcome.allowed))


def test_raise_for_decision_denied_is_403():
    with pytest.raises(HTTPException) as exc:
        raise_for_decision(AccessDecision.from_bool(False), "facility fac-1")
    assert exc.value.status_code == 403


def test_raise_for_decision_unknown_is_503():
    with pytest.raises(HTTPException) as exc:
        raise_for_decision(AccessDecision.unknown("timed out"), "facility fac-1")
    assert exc.value.status_code == 503
    assert "retry" in exc.value.detail


def test_unknown_decision_is_never_allowed():
    decision = AccessDecision.unknown("network down")
    assert decision.is_unknown
    assert not decision.is_allowed
