"""Integration tests for user administration against a temporary database"""

from __future__ import annotations

import pytest

from maritime_tracking.companies import CompanyRepository
from maritime_tracking.users import (
    CompanyNotFoundError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidUserDataError,
    LastAdminDeletionError,
    UserAdminService,
    UserNotFoundError,
    UserRole,
)
from maritime_tracking.users.repository import UserProfileRepository, UserSessionRepository


@pytest.fixture
def company(db):
    return CompanyRepository.create("UNIVAR")


def _create(company, email="ana@univar.com", role="viewer", password="segredo1"):
    return UserAdminService.create_user(
        email=email, password=password, full_name="Ana Souza", company_id=company.id, role=role
    ).user


def test_create_user(company):
    result = UserAdminService.create_user(
        email=" Ana@Univar.com ",
        password="segredo1",
        full_name=" Ana Souza ",
        company_id=company.id,
        role="operator",
    )

    assert result.user.email == "ana@univar.com"
    assert result.user.full_name == "Ana Souza"
    assert result.user.role is UserRole.OPERATOR
    assert result.user.active
    assert UserProfileRepository.get_by_id(result.user.id) == result.user
    assert "password" not in str(result.to_dict())


@pytest.mark.parametrize(
    ("overrides", "error"),
    [
        ({"email": ""}, InvalidUserDataError),
        ({"password": "123"}, InvalidUserDataError),
        ({"email": "sem-arroba"}, InvalidUserDataError),
        ({"role": "root"}, InvalidUserDataError),
        ({"company_id": "missing"}, CompanyNotFoundError),
    ],
)
def test_create_user_validation(company, overrides, error):
    data = {
        "email": "ana@univar.com",
        "password": "segredo1",
        "full_name": "Ana",
        "company_id": company.id,
        "role": "viewer",
        **overrides,
    }
    with pytest.raises(error):
        UserAdminService.create_user(**data)
    assert UserProfileRepository.list_all() == []


def test_create_user_duplicate_email(company):
    _create(company)
    with pytest.raises(DuplicateEmailError):
        _create(company, email="ANA@univar.com")


def test_edit_user_updates_and_rejects_email_clash(company):
    user = _create(company)
    other = _create(company, email="bia@univar.com")

    result = UserAdminService.edit_user(
        user_id=user.id,
        email="ana.souza@univar.com",
        full_name="Ana S.",
        role="manager",
        company_id=company.id,
    )
    assert result.user.email == "ana.souza@univar.com"
    assert result.user.role is UserRole.MANAGER

    with pytest.raises(DuplicateEmailError):
        UserAdminService.edit_user(
            user_id=other.id,
            email="ana.souza@univar.com",
            full_name="Bia",
            role="viewer",
            company_id=company.id,
        )


def test_edit_unknown_user(company):
    with pytest.raises(UserNotFoundError) as exc_info:
        UserAdminService.edit_user(
            user_id="missing", email="x@y.com", full_name="X", role="viewer", company_id=company.id
        )
    assert exc_info.value.status_code == 404


def test_deactivation_revokes_sessions(company):
    user = _create(company)
    token = UserSessionRepository.create(user.id)

    result = UserAdminService.edit_user(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role="viewer",
        company_id=company.id,
        active=False,
    )

    assert not result.user.active
    assert UserSessionRepository.get_user_id(token) is None
    assert any("desativado" in action for action in result.actions)


def test_last_admin_cannot_be_deleted(company):
    admin = _create(company, role="admin")

    with pytest.raises(LastAdminDeletionError, match="último administrador"):
        UserAdminService.delete_user(admin.id)

    assert UserProfileRepository.get_by_id(admin.id) is not None


def test_deactivated_sole_admin_cannot_be_deleted(company):
    admin = _create(company, role="admin")
    UserAdminService.edit_user(
        user_id=admin.id,
        email=admin.email,
        full_name=admin.full_name,
        role="admin",
        company_id=company.id,
        active=False,
    )

    with pytest.raises(LastAdminDeletionError):
        UserAdminService.delete_user(admin.id)

    assert UserProfileRepository.get_by_id(admin.id) is not None


def test_delete_admin_when_another_exists(company):
    admin = _create(company, role="admin")
    _create(company, email="root@univar.com", role="admin")
    token = UserSessionRepository.create(admin.id)

    result = UserAdminService.delete_user(admin.id)

    assert result.user.id == admin.id
    assert result.actions == ["Sessões ativas invalidadas", "Profile de usuário excluído"]
    assert UserProfileRepository.get_by_id(admin.id) is None
    assert UserSessionRepository.get_user_id(token) is None


def test_delete_requires_existing_user(company):
    with pytest.raises(InvalidUserDataError):
        UserAdminService.delete_user("  ")
    with pytest.raises(UserNotFoundError):
        UserAdminService.delete_user("missing")


def test_validate_active(company):
    user = _create(company)

    status = UserAdminService.validate_active(user.id)
    assert status.status_code == 200
    assert not status.should_logout

    UserAdminService.edit_user(
        user_id=user.id, email=user.email, full_name="Ana", role="viewer", company_id=company.id, active=False
    )
    status = UserAdminService.validate_active(user.id)
    assert (status.status_code, status.reason, status.should_logout) == (403, "USER_INACTIVE", True)

    status = UserAdminService.validate_active("missing")
    assert (status.status_code, status.reason, status.should_logout) == (404, "USER_DELETED", True)


def test_login_issues_session(company):
    user = _create(company)

    profile, token = UserAdminService.login("ANA@univar.com", "segredo1")

    assert profile.id == user.id
    assert UserSessionRepository.get_user_id(token) == user.id
    with pytest.raises(InvalidCredentialsError):
        UserAdminService.login("ana@univar.com", "errada")
