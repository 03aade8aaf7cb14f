"""
User Repository - CRUD for user_profiles and user_sessions.
"""

from __future__ import annotations

import secrets
import uuid

from maritime_tracking.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.tracking.models import utc_now
from maritime_tracking.users.errors import LastAdminDeletionError, UserNotFoundError
from maritime_tracking.users.models import UserProfile, UserRole

logger = get_logger(__name__)


class UserProfileRepository:
    """
    Repository for UserProfile CRUD operations.

    All methods use connection pooling and proper transaction handling.
    """

    @staticmethod
    @retry_on_db_lock()
    def create(
        company_id: str,
        email: str,
        full_name: str,
        role: UserRole,
        password_hash: str | None = None,
    ) -> UserProfile:
        """
        Insert an active profile.

        Side Effects:
            - Inserts row into user_profiles table
            - Commits transaction
        """
        now = utc_now()
        profile = UserProfile(
            id=str(uuid.uuid4()),
            company_id=company_id,
            email=email,
            full_name=full_name,
            role=role,
            active=True,
            created_at=now,
            updated_at=now,
        )
        with db_transaction() as conn:
            conn.execute(
                """
                INSERT INTO user_profiles (
                    id, company_id, email, full_name, role, active, password_hash,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, 1, ?, ?, ?)
                """,
                (
                    profile.id,
                    company_id,
                    email,
                    full_name,
                    role.value,
                    password_hash,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        logger.info("Created user profile %s (role=%s)", profile.id, role.value)
        return profile

    @staticmethod
    def get_by_id(user_id: str) -> UserProfile | None:
        with get_db_connection() as conn:
            row = conn.execute("SELECT * FROM user_profiles WHERE id = ?", (user_id,)).fetchone()
        return UserProfile.from_db_row(dict(row)) if row else None

    @staticmethod
    def get_by_email(email: str) -> UserProfile | None:
        with get_db_connection() as conn:
            row = conn.execute(
                "SELECT * FROM user_profiles WHERE email = ?", (email.lower(),)
            ).fetchone()
        return UserProfile.from_db_row(dict(row)) if row else None

    @staticmethod
    def get_password_hash(user_id: str) -> str | None:
        with get_db_connection() as conn:
            row = conn.execute(
                "SELECT password_hash FROM user_profiles WHERE id = ?", (user_id,)
            ).fetchone()
        return row["password_hash"] if row else None

    @staticmethod
    def list_all(company_id: str | None = None) -> list[UserProfile]:
        with get_db_connection() as conn:
            if company_id:
                rows = conn.execute(
                    "SELECT * FROM user_profiles WHERE company_id = ? ORDER BY created_at DESC",
                    (company_id,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM user_profiles ORDER BY created_at DESC").fetchall()
        return [UserProfile.from_db_row(dict(row)) for row in rows]

    @staticmethod
    @retry_on_db_lock()
    def update(
        user_id: str,
        email: str,
        full_name: str,
        role: UserRole,
        company_id: str,
        active: bool,
    ) -> UserProfile:
        """
        Overwrite the editable fields of a profile.

        Raises:
            UserNotFoundError: If no row was updated
        """
        now = utc_now()
        with db_transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE user_profiles
                SET email = ?, full_name = ?, role = ?, company_id = ?, active = ?, updated_at = ?
                WHERE id = ?
                """,
                (email, full_name, role.value, company_id, 1 if active else 0, now.isoformat(), user_id),
            )
            if cursor.rowcount == 0:
                raise UserNotFoundError()
            row = conn.execute("SELECT * FROM user_profiles WHERE id = ?", (user_id,)).fetchone()
        return UserProfile.from_db_row(dict(row))

    @staticmethod
    @retry_on_db_lock()
    def delete_guarding_last_admin(user_id: str) -> UserProfile:
        """
        Delete a profile (and its sessions) unless it is the last admin.

        The admin count and the delete run in one transaction.

        Raises:
            UserNotFoundError: If the profile does not exist
            LastAdminDeletionError: If it is the only admin, active or not (nothing is deleted)
        """
        with db_transaction() as conn:
            row = conn.execute("SELECT * FROM user_profiles WHERE id = ?", (user_id,)).fetchone()
            if row is None:
                raise UserNotFoundError()
            profile = UserProfile.from_db_row(dict(row))

            if profile.role is UserRole.ADMIN:
                admins = conn.execute(
                    "SELECT COUNT(*) AS n FROM user_profiles WHERE role = 'admin'"
                ).fetchone()["n"]
                if admins <= 1:
                    raise LastAdminDeletionError()

            conn.execute("DELETE FROM user_sessions WHERE user_id = ?", (user_id,))
            conn.execute("DELETE FROM user_profiles WHERE id = ?", (user_id,))

        logger.info("Deleted user profile %s", user_id)
        return profile


class UserSessionRepository:
    """Opaque session tokens issued per login; revoked on deactivation/deletion."""

    @staticmethod
    @retry_on_db_lock()
    def create(user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        with db_transaction() as conn:
            conn.execute(
                "INSERT INTO user_sessions (token, user_id, created_at) VALUES (?, ?, ?)",
                (token, user_id, utc_now().isoformat()),
            )
        return token

    @staticmethod
    def get_user_id(token: str) -> str | None:
        with get_db_connection() as conn:
            row = conn.execute(
                "SELECT user_id FROM user_sessions WHERE token = ?", (token,)
            ).fetchone()
        return row["user_id"] if row else None

    @staticmethod
    @retry_on_db_lock()
    def revoke_all(user_id: str) -> int:
        """Delete every session of a user; returns how many were revoked."""
        with db_transaction() as conn:
            cursor = conn.execute("DELETE FROM user_sessions WHERE user_id = ?", (user_id,))
        return cursor.rowcount
