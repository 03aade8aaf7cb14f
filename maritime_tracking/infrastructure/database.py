"""Central SQLite database for companies, user profiles and tracking snapshots.

All repositories go through get_db_connection() / db_transaction() so the
service keeps ONE database file and one connection pool.

Provides:
- Connection pooling (reuses connections, WAL mode)
- Single source of truth for the database path (TRACKING_DB_PATH override)
- Lock-contention retry decorator for writes
"""

from __future__ import annotations

import atexit
import os
import random
import sqlite3
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from functools import lru_cache, wraps
from pathlib import Path
from queue import Empty, Full, Queue
from threading import Lock
from typing import Any, TypeVar

from maritime_tracking.config import (
    DB_CONNECT_TIMEOUT,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DB_RETRY_BASE_DELAY,
    DB_RETRY_JITTER,
    DB_RETRY_MAX,
    DB_RETRY_MAX_DELAY,
    DB_TEMP_CONN_MAX,
    PACKAGE_ROOT,
)
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter, log_event

F = TypeVar("F", bound=Callable[..., Any])

DB_PATH = PACKAGE_ROOT / "data" / "tracking.db"

logger = get_logger(__name__)


def retry_on_db_lock(
    max_retries: int = DB_RETRY_MAX,
    base_delay: float = DB_RETRY_BASE_DELAY,
    max_delay: float = DB_RETRY_MAX_DELAY,
) -> Callable[[F], F]:
    """
    Decorator to retry database operations on SQLITE_BUSY errors.

    Uses exponential backoff with jitter. Any other OperationalError is
    re-raised immediately.

    Usage:
        @retry_on_db_lock()
        def upsert_company(...):
            with db_transaction() as conn:
                conn.execute("INSERT INTO companies ...")
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except sqlite3.OperationalError as e:
                    message = str(e).lower()
                    if "locked" not in message and "busy" not in message:
                        raise

                    if attempt >= max_retries:
                        logger.error(
                            "Database lock retry exhausted after %d attempts: %s",
                            max_retries,
                            e,
                        )
                        raise

                    delay = min(base_delay * (2**attempt), max_delay)
                    sleep_time = delay + random.uniform(0, delay * DB_RETRY_JITTER)
                    logger.warning(
                        "Database locked (attempt %d/%d), retrying in %.2fs: %s",
                        attempt + 1,
                        max_retries,
                        sleep_time,
                        e,
                    )
                    counter("database.lock_retries")
                    time.sleep(sleep_time)
            raise RuntimeError("unreachable")  # pragma: no cover

        return wrapper  # type: ignore[return-value]

    return decorator


class DatabaseConnectionPool:
    """
    Thread-safe connection pool for SQLite.

    When the pool is empty a bounded number of temporary connections is
    handed out and closed on return.
    """

    def __init__(self, db_path: Path, pool_size: int = DB_POOL_SIZE):
        self.db_path = db_path
        self.pool_size = pool_size
        self.pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self.lock = Lock()
        self.closed = False
        self.temp_conn_count = 0
        self.temp_conn_max = DB_TEMP_CONN_MAX
        # sqlite3.Connection rejects new attributes, so temporaries are tracked by id
        self._temp_ids: set[int] = set()
        self._initialize_pool()

        atexit.register(self.close_all)

    def _create_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=DB_CONNECT_TIMEOUT,
            check_same_thread=False,
        )
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_pool(self) -> None:
        for _ in range(self.pool_size):
            try:
                self.pool.put(self._create_connection())
            except sqlite3.Error as e:
                logger.warning("Failed to create pooled connection: %s", e)

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a connection from the pool, or a temporary one if it is exhausted.

        Raises:
            RuntimeError: If the pool is closed or the temporary limit is reached
        """
        if self.closed:
            raise RuntimeError("Connection pool has been closed")

        try:
            return self.pool.get(block=True, timeout=DB_POOL_TIMEOUT)
        except Empty:
            with self.lock:
                if self.temp_conn_count >= self.temp_conn_max:
                    logger.critical(
                        "Temporary connection limit reached: %d/%d (pool_size=%d)",
                        self.temp_conn_count,
                        self.temp_conn_max,
                        self.pool_size,
                    )
                    raise RuntimeError(
                        "Database connection pool exhausted and temporary connection limit reached"
                    ) from None
                self.temp_conn_count += 1
                temp_count = self.temp_conn_count

            logger.error(
                "Connection pool exhausted (pool_size=%d). Creating temporary connection %d/%d.",
                self.pool_size,
                temp_count,
                self.temp_conn_max,
            )
            log_event("database.pool_exhausted", pool_size=self.pool_size, temp_conn_count=temp_count)

            conn = self._create_connection()
            with self.lock:
                self._temp_ids.add(id(conn))
            return conn

    def return_connection(self, conn: sqlite3.Connection) -> None:
        """Return a connection to the pool, closing temporary ones."""
        with self.lock:
            is_temp = id(conn) in self._temp_ids
            if is_temp:
                self._temp_ids.discard(id(conn))
                self.temp_conn_count -= 1

        if self.closed or is_temp:
            conn.close()
            return

        try:
            self.pool.put_nowait(conn)
        except Full:
            logger.warning("Failed to return connection to pool (pool full), closing")
            conn.close()

    def close_all(self) -> None:
        """Close every pooled connection."""
        self.closed = True
        while not self.pool.empty():
            try:
                self.pool.get_nowait().close()
            except Empty:
                break


def get_db_path() -> Path:
    """Database path; TRACKING_DB_PATH overrides the packaged default."""
    if env_path := os.getenv("TRACKING_DB_PATH"):
        return Path(env_path)
    return DB_PATH


@lru_cache(maxsize=1)
def get_pool() -> DatabaseConnectionPool:
    """Process-wide connection pool (created on first use)."""
    return DatabaseConnectionPool(get_db_path(), pool_size=DB_POOL_SIZE)


def reset_pool() -> None:
    """Close and forget the pool so the next call re-reads TRACKING_DB_PATH."""
    if get_pool.cache_info().currsize:
        get_pool().close_all()
    get_pool.cache_clear()


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Pooled database connection (context manager).

    Raises:
        FileNotFoundError: If the database was never initialized
    """
    db_path = get_db_path()
    if not db_path.exists():
        raise FileNotFoundError(f"Database not found: {db_path}. Call init_database() first.")

    pool = get_pool()
    conn = pool.get_connection()
    try:
        yield conn
    finally:
        pool.return_connection(conn)


@contextmanager
def db_transaction() -> Generator[sqlite3.Connection, None, None]:
    """Commit on success, roll back on error."""
    with get_db_connection() as conn:
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise


def get_pool_stats() -> dict[str, Any]:
    """Pool health metrics for the health endpoint."""
    pool = get_pool()
    available = pool.pool.qsize()
    in_use = pool.pool_size - available
    return {
        "pool_size": pool.pool_size,
        "available": available,
        "in_use": in_use,
        "usage_percent": round((in_use / pool.pool_size) * 100, 1) if pool.pool_size else 0,
        "closed": pool.closed,
    }


def init_database() -> None:
    """Create the schema if needed (idempotent)."""
    from maritime_tracking.infrastructure.database_schema import init_database as _init_database

    _init_database(get_db_path())
