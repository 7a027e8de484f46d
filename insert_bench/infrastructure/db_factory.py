"""
Database connection factory utilities for the Insert Throughput Benchmark.

Provides centralized management of synchronous PostgreSQL connections and the
shared connection pool. The PoolManager singleton ensures the pool is closed
on application exit.

Connection acquisition is retried with tenacity for transient failures;
statements issued on an acquired connection are never retried.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from insert_bench.config import Settings, get_settings
from insert_bench.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


class PoolManager:
    """
    Thread-safe singleton owning the shared synchronous connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._sync_pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(self, min_size: int = 1, max_size: int = 4) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        min_size : int
            Minimum number of idle connections to keep.
        max_size : int
            Maximum total connections in the pool.

        Returns
        -------
        ConnectionPool
            The managed sync pool instance.
        """
        with self._lock:
            if self._sync_pool is None:
                self._sync_pool = ConnectionPool(
                    conninfo=build_dsn(), min_size=min_size, max_size=max_size, open=True
                )
            return self._sync_pool

    def close_all(self) -> None:
        """
        Close the managed pool and release its connections.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._sync_pool is not None:
                try:
                    self._sync_pool.close()
                except psycopg.Error as exc:
                    log.warning("Failed to close connection pool", extra={"error": str(exc)})
                finally:
                    self._sync_pool = None


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Parameters
    ----------
    dsn : str, optional
        Connection string; defaults to the one built from settings.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


def get_sync_pool(min_size: Optional[int] = None, max_size: Optional[int] = None) -> ConnectionPool:
    """
    Get or create the shared synchronous connection pool via PoolManager.

    Sizes default to `DB_POOL_MIN_SIZE` / `DB_POOL_MAX_SIZE`.
    """
    settings = get_settings()
    manager = PoolManager()
    return manager.get_sync_pool(
        min_size=min_size or settings.pool_min_size,
        max_size=max_size or settings.pool_max_size,
    )


__all__ = [
    "PoolManager",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
]
