"""
User administration - create/edit/delete accounts and session validity.

Orchestrates between:
- UserProfileRepository / UserSessionRepository (persistence)
- CompanyRepository (tenant existence)
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from maritime_tracking.companies.repository import CompanyRepository
from maritime_tracking.config import MIN_PASSWORD_LENGTH
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter, log_event
from maritime_tracking.users.errors import (
    CompanyNotFoundError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidUserDataError,
    UserNotFoundError,
)
from maritime_tracking.users.models import UserProfile, UserRole
from maritime_tracking.users.repository import UserProfileRepository, UserSessionRepository
from maritime_tracking.utils.validators import ValidationError, require_fields, validate_email

logger = get_logger(__name__)


@dataclass
class UserChangeResult:
    """Profile after a mutation plus the side actions performed."""

    user: UserProfile
    message: str
    actions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user.to_public_dict(), "message": self.message, "actions": self.actions}


@dataclass
class ActiveStatus:
    """Outcome of validate_active(); status_code is the HTTP status to return."""

    status_code: int
    should_logout: bool
    reason: str | None = None
    user: UserProfile | None = None

    @property
    def success(self) -> bool:
        return self.status_code == 200

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success, "should_logout": self.should_logout}
        if self.reason:
            body["reason"] = self.reason
        if self.user is not None:
            body["user"] = self.user.to_public_dict()
        return body


def _parse_role(role: str | None) -> UserRole:
    parsed = UserRole.parse(role)
    if parsed is None:
        allowed = ", ".join(r.value for r in UserRole)
        raise InvalidUserDataError(f"Role inválido. Use um de: {allowed}")
    return parsed


def _validated_email(email: str | None) -> str:
    try:
        return validate_email(email)
    except ValidationError as e:
        raise InvalidUserDataError(str(e)) from None


def _require(**fields: str | None) -> dict[str, str]:
    try:
        return require_fields(**fields)
    except ValidationError as e:
        raise InvalidUserDataError(str(e)) from None


def _require_company(company_id: str) -> None:
    if CompanyRepository.get_by_id(company_id) is None:
        raise CompanyNotFoundError()


class UserAdminService:
    """Business rules for the admin user endpoints."""

    @staticmethod
    def create_user(
        email: str | None,
        password: str | None,
        full_name: str | None,
        company_id: str | None,
        role: str | None,
    ) -> UserChangeResult:
        """
        Create an active profile.

        Raises:
            InvalidUserDataError: Missing field, bad email, short password or role
            CompanyNotFoundError: Unknown company
            DuplicateEmailError: Email already registered
        """
        values = _require(email=email, password=password, full_name=full_name, company_id=company_id, role=role)
        password, full_name, company_id = values["password"], values["full_name"], values["company_id"]

        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidUserDataError(f"Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres")

        normalized_email = _validated_email(email)
        parsed_role = _parse_role(role)
        _require_company(company_id)

        if UserProfileRepository.get_by_email(normalized_email):
            raise DuplicateEmailError("Email já cadastrado")

        try:
            profile = UserProfileRepository.create(
                company_id=company_id,
                email=normalized_email,
                full_name=full_name.strip(),
                role=parsed_role,
                password_hash=generate_password_hash(password),
            )
        except sqlite3.IntegrityError:
            raise DuplicateEmailError("Email já cadastrado") from None

        counter("users.created")
        log_event("users.created", user_id=profile.id, role=parsed_role.value)
        return UserChangeResult(
            user=profile,
            message=f"Usuário {profile.email} criado com sucesso",
            actions=["Perfil de usuário criado"],
        )

    @staticmethod
    def edit_user(
        user_id: str | None,
        email: str | None,
        full_name: str | None,
        role: str | None,
        company_id: str | None,
        active: bool = True,
    ) -> UserChangeResult:
        """
        Update a profile; deactivating it revokes its sessions.

        Raises:
            InvalidUserDataError, CompanyNotFoundError, UserNotFoundError, DuplicateEmailError
        """
        values = _require(user_id=user_id, email=email, full_name=full_name, role=role, company_id=company_id)
        user_id, full_name, company_id = values["user_id"], values["full_name"], values["company_id"]

        normalized_email = _validated_email(email)
        parsed_role = _parse_role(role)
        _require_company(company_id)

        existing = UserProfileRepository.get_by_id(user_id)
        if existing is None:
            raise UserNotFoundError()

        clash = UserProfileRepository.get_by_email(normalized_email)
        if clash is not None and clash.id != user_id:
            raise DuplicateEmailError()

        try:
            updated = UserProfileRepository.update(
                user_id=user_id,
                email=normalized_email,
                full_name=full_name.strip(),
                role=parsed_role,
                company_id=company_id,
                active=active,
            )
        except sqlite3.IntegrityError:
            raise DuplicateEmailError() from None

        actions = ["Perfil atualizado"]
        if existing.active and not updated.active:
            revoked = UserSessionRepository.revoke_all(user_id)
            actions.append(f"Usuário desativado - {revoked} sessões invalidadas")
            log_event("users.deactivated", user_id=user_id, sessions_revoked=revoked)

        counter("users.updated")
        return UserChangeResult(
            user=updated,
            message=f"Usuário {updated.email} atualizado com sucesso",
            actions=actions,
        )

    @staticmethod
    def delete_user(user_id: str | None) -> UserChangeResult:
        """
        Delete a profile and its sessions.

        Raises:
            InvalidUserDataError: Missing id
            UserNotFoundError: Unknown id
            LastAdminDeletionError: Target is the only admin (no mutation)
        """
        if not user_id or not user_id.strip():
            raise InvalidUserDataError("ID do usuário é obrigatório")

        deleted = UserProfileRepository.delete_guarding_last_admin(user_id)

        counter("users.deleted")
        log_event("users.deleted", user_id=deleted.id, role=deleted.role.value)
        return UserChangeResult(
            user=deleted,
            message=f"Usuário {deleted.email} foi completamente removido do sistema",
            actions=["Sessões ativas invalidadas", "Profile de usuário excluído"],
        )

    @staticmethod
    def validate_active(user_id: str | None) -> ActiveStatus:
        """
        Whether the session of ``user_id`` may continue.

        Raises:
            InvalidUserDataError: Missing id
        """
        if not user_id or not user_id.strip():
            raise InvalidUserDataError("ID do usuário é obrigatório")

        profile = UserProfileRepository.get_by_id(user_id)
        if profile is None:
            return ActiveStatus(status_code=404, should_logout=True, reason="USER_DELETED")
        if not profile.active:
            return ActiveStatus(status_code=403, should_logout=True, reason="USER_INACTIVE", user=profile)
        return ActiveStatus(status_code=200, should_logout=False, user=profile)

    @staticmethod
    def login(email: str | None, password: str | None) -> tuple[UserProfile, str]:
        """
        Check credentials and issue a session token.

        Raises:
            InvalidUserDataError: Missing email or password
            InvalidCredentialsError: Wrong email/password or inactive account
        """
        password = _require(email=email, password=password)["password"]
        profile = UserProfileRepository.get_by_email(_validated_email(email))
        password_hash = UserProfileRepository.get_password_hash(profile.id) if profile else None
        if profile is None or not password_hash or not check_password_hash(password_hash, password):
            counter("users.login_failed")
            raise InvalidCredentialsError()
        if not profile.active:
            raise InvalidCredentialsError("Usuário inativo")

        token = UserSessionRepository.create(profile.id)
        log_event("users.login", user_id=profile.id)
        return profile, token
