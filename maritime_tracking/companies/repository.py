"""
Company Repository - CRUD operations for the companies table.
"""

from __future__ import annotations

import uuid

from maritime_tracking.companies.models import Company
from maritime_tracking.config import (
    DEFAULT_COMPANY_DISPLAY_NAME,
    DEFAULT_COMPANY_NAME,
    DEFAULT_COMPANY_SLUG,
)
from maritime_tracking.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.tracking.models import utc_now
from maritime_tracking.tracking.title_parser import company_slug, format_display_name

logger = get_logger(__name__)


class CompanyRepository:
    """
    Repository for Company CRUD operations.

    All methods use connection pooling and proper transaction handling.
    """

    @staticmethod
    @retry_on_db_lock()
    def create(name: str, display_name: str | None = None, slug: str | None = None) -> Company:
        """
        Insert a new active company.

        Side Effects:
            - Inserts row into companies table
            - Commits transaction
        """
        company = Company(
            id=str(uuid.uuid4()),
            name=name,
            display_name=display_name or format_display_name(name),
            slug=slug or company_slug(name),
        )
        with db_transaction() as conn:
            conn.execute(
                """
                INSERT INTO companies (id, name, display_name, slug, active, created_at, updated_at)
                VALUES (:id, :name, :display_name, :slug, :active, :created_at, :updated_at)
                """,
                company.to_db_dict(),
            )
        logger.info("Created company %s (%s)", company.name, company.id)
        return company

    @staticmethod
    def get_by_id(company_id: str) -> Company | None:
        with get_db_connection() as conn:
            row = conn.execute("SELECT * FROM companies WHERE id = ?", (company_id,)).fetchone()
        return Company.from_db_row(dict(row)) if row else None

    @staticmethod
    def get_by_name(name: str) -> Company | None:
        with get_db_connection() as conn:
            row = conn.execute("SELECT * FROM companies WHERE name = ?", (name,)).fetchone()
        return Company.from_db_row(dict(row)) if row else None

    @staticmethod
    def list_active() -> list[Company]:
        with get_db_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM companies WHERE active = 1 ORDER BY name"
            ).fetchall()
        return [Company.from_db_row(dict(row)) for row in rows]

    @staticmethod
    @retry_on_db_lock()
    def upsert_by_name(name: str) -> tuple[Company, bool]:
        """
        Create the company or refresh its display fields.

        Returns:
            (company, created) - created is False when the name already existed

        Side Effects:
            - Inserts or updates one row in companies (reactivates it)
            - Commits transaction
        """
        now = utc_now()
        with db_transaction() as conn:
            row = conn.execute("SELECT * FROM companies WHERE name = ?", (name,)).fetchone()
            if row is None:
                company = Company(
                    id=str(uuid.uuid4()),
                    name=name,
                    display_name=format_display_name(name),
                    slug=company_slug(name),
                    created_at=now,
                    updated_at=now,
                )
                conn.execute(
                    """
                    INSERT INTO companies (id, name, display_name, slug, active, created_at, updated_at)
                    VALUES (:id, :name, :display_name, :slug, :active, :created_at, :updated_at)
                    """,
                    company.to_db_dict(),
                )
                return company, True

            company = Company.from_db_row(dict(row))
            company.display_name = format_display_name(name)
            company.active = True
            company.updated_at = now
            conn.execute(
                "UPDATE companies SET display_name = ?, active = 1, updated_at = ? WHERE id = ?",
                (company.display_name, now.isoformat(), company.id),
            )
            return company, False

    @staticmethod
    def ensure_default() -> Company:
        """Return the default company, creating it on first use."""
        existing = CompanyRepository.get_by_name(DEFAULT_COMPANY_NAME)
        if existing:
            return existing
        logger.info("No active companies - creating default company")
        return CompanyRepository.create(
            DEFAULT_COMPANY_NAME,
            display_name=DEFAULT_COMPANY_DISPLAY_NAME,
            slug=DEFAULT_COMPANY_SLUG,
        )
