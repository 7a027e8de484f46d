"""
Insert Throughput Benchmark - compares bulk-insertion strategies against PostgreSQL.

This package measures how fast different psycopg insertion strategies load a
freshly generated record set, including:

- Chunked `executemany` batches
- Chunked multi-row `INSERT ... VALUES` statements
- One statement per row on a dedicated connection
- One statement per row on a pooled connection

Each strategy runs several timed trials; the samples are aggregated into mean,
min, max, standard deviation and throughput, printed as a summary and saved as
CSV.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from insert_bench.config import Settings, get_settings
from insert_bench.domain import BenchmarkResult, Record, RecordStatus
from insert_bench.exceptions import (
    BenchmarkError,
    InvalidInputError,
    ReportSinkError,
    StoreAccessError,
)
from insert_bench.orchestrator import (
    BenchmarkRunner,
    RunConfig,
    RunPhase,
    available_strategies,
    run_benchmark,
)
from insert_bench.reporter import BenchmarkReporter
from insert_bench.strategies.abstract import BatchInsertStrategy, SingleInsertStrategy
from insert_bench.utils.data_generator import RecordGenerator, generate_with_seed
from insert_bench.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "BenchmarkResult",
    "Record",
    "RecordStatus",
    # Errors
    "BenchmarkError",
    "InvalidInputError",
    "ReportSinkError",
    "StoreAccessError",
    # Orchestration
    "BenchmarkRunner",
    "RunConfig",
    "RunPhase",
    "available_strategies",
    "run_benchmark",
    "BenchmarkReporter",
    # Strategy contracts
    "BatchInsertStrategy",
    "SingleInsertStrategy",
    # Data generation
    "RecordGenerator",
    "generate_with_seed",
    # Logging
    "configure_logging",
    "get_logger",
]
