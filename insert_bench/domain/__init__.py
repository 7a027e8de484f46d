"""
Domain package for the Insert Throughput Benchmark.

Exports the record inserted by strategies and the per-configuration result
model. Keep this package focused on data definitions and validation concerns.
"""

from insert_bench.domain.models import Record, RecordStatus
from insert_bench.domain.result import BenchmarkResult

__all__ = [
    "BenchmarkResult",
    "Record",
    "RecordStatus",
]
