"""
Pooled single-row strategy: one INSERT per record on a connection borrowed
from a psycopg ConnectionPool.

The connection is held for the whole call; the pool commits when the block
exits cleanly and rolls back when it raises.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg
from psycopg import Cursor
from psycopg_pool import ConnectionPool

from insert_bench.exceptions import StoreAccessError
from insert_bench.infrastructure.db_factory import get_sync_pool
from insert_bench.strategies.single_insert import SingleRowInsertStrategy


class PooledSingleInsertStrategy(SingleRowInsertStrategy):
    """
    Row-at-a-time inserts through a connection pool.

    Designed to compare the impact of pooling vs. a dedicated connection.
    """

    name: str = "pooled_single"
    label: str = "Pooled-Single"
    description: str = "cursor.execute per row on a pooled connection."

    def __init__(
        self,
        pool_min_size: Optional[int] = None,
        pool_max_size: Optional[int] = None,
        dsn_override: Optional[str] = None,
        pool: Optional[ConnectionPool] = None,
    ) -> None:
        super().__init__(dsn_override=dsn_override)
        self.pool_min_size = pool_min_size
        self.pool_max_size = pool_max_size
        self._pool_instance: Optional[ConnectionPool] = pool
        self._owns_pool = False

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is not None:
            return self._pool_instance
        if self._dsn_override:
            self._pool_instance = ConnectionPool(
                conninfo=self._dsn_override,
                min_size=self.pool_min_size or 1,
                max_size=self.pool_max_size or 1,
                open=True,
            )
            self._owns_pool = True
        else:
            self._pool_instance = get_sync_pool(
                min_size=self.pool_min_size, max_size=self.pool_max_size
            )
        return self._pool_instance

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Cursor]:
        try:
            with self._get_pool().connection() as conn:
                with conn.cursor() as cur:
                    yield cur
        except psycopg.Error as exc:
            raise StoreAccessError(
                f"{self.label}: {action} failed: {exc}", strategy=self.label
            ) from exc

    def close(self) -> None:
        # The shared pool belongs to PoolManager and is closed at exit.
        if self._owns_pool and self._pool_instance is not None:
            self._pool_instance.close()
        self._pool_instance = None
        self._owns_pool = False


__all__ = ["PooledSingleInsertStrategy"]
