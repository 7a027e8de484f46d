"""
Utilities package for the Insert Throughput Benchmark.

Exports shared helpers for logging, timing, and synthetic data generation.
Keep this package free of database access.
"""

from insert_bench.utils.data_generator import (
    RecordGenerator,
    generate_default,
    generate_with_seed,
)
from insert_bench.utils.logging import configure_logging, get_logger
from insert_bench.utils.profiler import ProfileStats, profile_block, profile_function

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
    "profile_function",
    "RecordGenerator",
    "generate_default",
    "generate_with_seed",
]
