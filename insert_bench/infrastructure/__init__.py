"""
Infrastructure package for the Insert Throughput Benchmark.

Centralizes database connectivity concerns (connection factory, pooling).
Keep this layer focused on I/O and resource management, decoupled from
strategy/orchestrator logic.
"""

from insert_bench.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_sync_connection,
    get_sync_pool,
)

__all__ = [
    "PoolManager",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
]
