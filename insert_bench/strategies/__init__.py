"""
Strategies package for the Insert Throughput Benchmark.

This module re-exports the capability contracts and the concrete strategy
classes so downstream code can import from `insert_bench.strategies` directly.
"""

from insert_bench.strategies.abstract import (
    AbstractBatchInsertStrategy,
    AbstractInsertStrategy,
    BatchInsertStrategy,
    SingleInsertStrategy,
)
from insert_bench.strategies.executemany_batch import ExecutemanyBatchStrategy
from insert_bench.strategies.multirow_batch import MultiRowBatchStrategy
from insert_bench.strategies.pooled_single import PooledSingleInsertStrategy
from insert_bench.strategies.single_insert import SingleRowInsertStrategy

__all__ = [
    # Contracts
    "AbstractBatchInsertStrategy",
    "AbstractInsertStrategy",
    "BatchInsertStrategy",
    "SingleInsertStrategy",
    # Concrete strategies
    "ExecutemanyBatchStrategy",
    "MultiRowBatchStrategy",
    "PooledSingleInsertStrategy",
    "SingleRowInsertStrategy",
]
