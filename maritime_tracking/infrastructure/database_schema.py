"""
Database schema initialization.

Tables mirror the hosted backend the dashboard used: a tenant table, a user
profile table and a generic tracking snapshot table, plus revocable sessions.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from maritime_tracking.observability.logging import get_logger

logger = get_logger(__name__)

EXPECTED_TABLES = ("companies", "user_profiles", "user_sessions", "tracking_data")


def init_database(db_path: Path) -> None:
    """
    Initialize database with schema (idempotent)

    Side Effects:
    - Creates the parent directory if needed
    - Creates tables and indexes that do not exist yet
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS companies (
                id TEXT PRIMARY KEY,
                name TEXT UNIQUE NOT NULL,
                display_name TEXT NOT NULL,
                slug TEXT UNIQUE NOT NULL,
                active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS user_profiles (
                id TEXT PRIMARY KEY,
                company_id TEXT NOT NULL REFERENCES companies(id),
                email TEXT UNIQUE NOT NULL,
                full_name TEXT NOT NULL,
                role TEXT NOT NULL DEFAULT 'viewer'
                    CHECK (role IN ('admin', 'manager', 'operator', 'viewer')),
                active INTEGER NOT NULL DEFAULT 1,
                password_hash TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS user_sessions (
                token TEXT PRIMARY KEY,
                user_id TEXT NOT NULL REFERENCES user_profiles(id) ON DELETE CASCADE,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS tracking_data (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                company_id TEXT,
                tracking_id TEXT NOT NULL,
                payload TEXT NOT NULL,
                synced_at TEXT NOT NULL,
                UNIQUE(company_id, tracking_id)
            );

            CREATE INDEX IF NOT EXISTS idx_user_profiles_company
                ON user_profiles(company_id);
            CREATE INDEX IF NOT EXISTS idx_user_sessions_user
                ON user_sessions(user_id);
            CREATE INDEX IF NOT EXISTS idx_tracking_data_company
                ON tracking_data(company_id);
        """)
        conn.commit()
    finally:
        conn.close()

    logger.info("Database schema ready at %s", db_path)


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Check that every expected table exists.

    Raises:
        ValueError: If tables are missing
    """
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    present = {row[0] for row in rows}
    missing = [table for table in EXPECTED_TABLES if table not in present]
    if missing:
        raise ValueError(f"Missing tables: {', '.join(missing)}")
    return True
