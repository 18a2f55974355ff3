# tests/test_permissions.py

"""
Tests for the permission catalog, derived flags and advisory role checks.
"""

import pytest

from core.permission_helpers import RoleValidation
from core.permissions import (
    ROLE_PERMISSIONS,
    base_permissions,
    check_permission,
    enhance_permissions,
    get_permissions,
    has_minimum_role,
)
from core.roles import has_higher_or_equal_rank
from models.enums import Role
from models.permissions import EnhancedPermissionSet, PermissionSet


@pytest.mark.parametrize("role", list(Role))
def test_every_role_has_a_complete_permission_set(role):
    perms = base_permissions(role)
    assert isinstance(perms, PermissionSet)
    assert set(perms.model_dump()) == set(PermissionSet.model_fields)
    assert all(isinstance(v, bool) for v in perms.model_dump().values())


def test_permission_sets_cannot_be_built_partially():
    with pytest.raises(ValueError):
        PermissionSet(view_products=True)


def test_unknown_role_falls_back_to_viewer_set():
    assert base_permissions("hacker") == ROLE_PERMISSIONS[Role.viewer]
    assert base_permissions(None) == ROLE_PERMISSIONS[Role.viewer]


def test_national_has_every_flag_and_viewer_only_reads():
    assert all(get_permissions(Role.national).model_dump().values())

    viewer = base_permissions(Role.viewer)
    granted = {name for name, value in viewer.model_dump().items() if value}
    assert granted == {"view_products", "view_reports"}


@pytest.mark.parametrize("role", list(Role))
def test_admin_access_iff_zonal_or_above(role):
    perms = get_permissions(role)
    assert perms.has_admin_access == has_higher_or_equal_rank(role, Role.zonal)


@pytest.mark.parametrize("role", list(Role))
def test_derived_flags_follow_the_hierarchy(role):
    perms = get_permissions(role)
    assert perms.has_manager_access == has_higher_or_equal_rank(role, Role.facility_manager)
    assert perms.has_analyst_access == has_higher_or_equal_rank(role, Role.data_analyst)


@pytest.mark.parametrize("role, expected", [
    (Role.national, True),
    (Role.regional, True),
    (Role.zonal, True),
    (Role.facility_manager, False),
    (Role.data_analyst, False),
    (Role.viewer, False),
])
def test_can_create_facilities(role, expected):
    assert get_permissions(role).can_create_facilities is expected
    assert RoleValidation(role).can_create_facilities() is expected


def test_enhance_does_not_mutate_base():
    base = base_permissions(Role.finance)
    before = base.model_dump()

    enhanced = enhance_permissions(base, Role.finance)

    assert isinstance(enhanced, EnhancedPermissionSet)
    assert enhanced is not base
    assert base.model_dump() == before
    assert not hasattr(base, "has_admin_access")


def test_enhance_with_unknown_role_derives_as_viewer():
    enhanced = enhance_permissions(base_permissions(Role.viewer), "nonsense")
    assert enhanced == get_permissions(Role.viewer)


def test_check_permission_by_name():
    perms = get_permissions(Role.procurement)
    assert check_permission(perms, "create_products") is True
    assert check_permission(perms, "delete_products") is False
    assert check_permission(perms, "can_export_sensitive_data") is False
    assert check_permission(get_permissions(Role.finance), "can_export_sensitive_data") is True


def test_check_permission_unknown_name_is_denied():
    perms = get_permissions(Role.national)
    assert check_permission(perms, "launch_rockets") is False
    assert check_permission(perms, "model_dump") is False


def test_check_permission_on_base_set_ignores_derived_names():
    assert check_permission(base_permissions(Role.national), "has_admin_access") is False


def test_has_minimum_role():
    assert has_minimum_role(Role.regional, Role.zonal)
    assert not has_minimum_role(Role.qa, Role.finance)


# -----------------------------------------------------
# RoleValidation
# -----------------------------------------------------
def test_role_validation_administrators():
    for role in (Role.national, Role.regional, Role.zonal):
        v = RoleValidation(role)
        assert v.can_manage_roles()
        assert v.can_approve_associations()
        assert v.is_administrator()

    assert RoleValidation(Role.national).is_system_level()
    assert not RoleValidation(Role.zonal).is_system_level()


def test_role_validation_facility_manager():
    v = RoleValidation(Role.facility_manager)
    assert not v.can_manage_roles()
    assert v.can_approve_associations()
    assert v.is_facility_level()
    assert v.can_assign_role(Role.facility_officer)
    assert not v.can_assign_role(Role.facility_manager)
    assert not v.can_assign_role(Role.zonal)


def test_role_validation_specialists_and_viewer():
    assert RoleValidation(Role.qa).is_specialist()
    assert not RoleValidation(Role.qa).can_view_system_analytics()
    assert RoleValidation(Role.data_analyst).can_view_system_analytics()

    viewer = RoleValidation(Role.viewer)
    assert viewer.get_assignable_roles() == []
    assert not viewer.can_manage_users()
    assert not viewer.can_access_admin_dashboard()


def test_role_validation_comparisons():
    v = RoleValidation(Role.regional)
    assert v.has_role(Role.regional)
    assert v.has_minimum_role(Role.zonal)
    assert v.is_higher_role_than(Role.zonal)
    assert not v.is_higher_role_than(Role.national)
    assert v.is_same_role_as(Role.regional)
    assert v.can_modify_system_settings()
    assert not RoleValidation(Role.zonal).can_modify_system_settings()


def test_role_validation_is_valid_role():
    assert RoleValidation.is_valid_role("qa")
    assert not RoleValidation.is_valid_role("manager")
