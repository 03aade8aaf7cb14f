"""Tests for role permissions and company scoping"""

from __future__ import annotations

import pytest

from maritime_tracking.users import (
    UserProfile,
    UserRole,
    can_delete,
    can_edit,
    can_manage_users,
    can_view,
    is_admin,
    is_manager,
)
from maritime_tracking.users.tenancy import TenancyViolationError, enforce_company_scope


def _profile(role: UserRole, active: bool = True) -> UserProfile:
    return UserProfile(id=f"u-{role.value}", company_id="c1", email="a@b.com", full_name="A", role=role, active=active)


@pytest.mark.parametrize(
    ("role", "admin", "manager", "edit"),
    [
        (UserRole.ADMIN, True, True, True),
        (UserRole.MANAGER, False, True, True),
        (UserRole.OPERATOR, False, False, True),
        (UserRole.VIEWER, False, False, False),
    ],
)
def test_role_hierarchy(role, admin, manager, edit):
    profile = _profile(role)
    assert is_admin(profile) is admin
    assert can_manage_users(profile) is admin
    assert is_manager(profile) is manager
    assert can_delete(profile) is manager
    assert can_edit(profile) is edit
    assert can_view(profile)


def test_anonymous_has_no_permissions():
    assert not is_admin(None)
    assert not can_edit(None)
    assert not can_view(None)


def test_inactive_user_cannot_view():
    assert not can_view(_profile(UserRole.ADMIN, active=False))


def test_role_parse():
    assert UserRole.parse("operator") is UserRole.OPERATOR
    assert UserRole.parse("root") is None
    assert UserRole.parse(None) is None


def test_admin_and_anonymous_read_requested_company():
    assert enforce_company_scope(_profile(UserRole.ADMIN), "WCB", "UNIVAR") == "WCB"
    assert enforce_company_scope(None, "WCB", None) == "WCB"
    assert enforce_company_scope(None, "", None) is None


def test_non_admin_pinned_to_own_company():
    viewer = _profile(UserRole.VIEWER)
    assert enforce_company_scope(viewer, None, "UNIVAR") == "UNIVAR"
    assert enforce_company_scope(viewer, "univar", "UNIVAR") == "UNIVAR"


def test_non_admin_other_company_rejected():
    with pytest.raises(TenancyViolationError):
        enforce_company_scope(_profile(UserRole.MANAGER), "WCB", "UNIVAR")


def test_non_admin_without_company_rejected():
    with pytest.raises(TenancyViolationError):
        enforce_company_scope(_profile(UserRole.OPERATOR), None, None)
