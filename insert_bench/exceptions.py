"""
Error types for the Insert Throughput Benchmark.

`InvalidInputError` marks caller mistakes and is never retried or swallowed.
`StoreAccessError` wraps driver failures raised while inserting, truncating or
counting; the orchestrator aborts the current configuration on it but keeps
running the remaining strategies. `ReportSinkError` is only ever logged.
"""

from __future__ import annotations


class BenchmarkError(Exception):
    """Base class for all benchmark errors."""


class InvalidInputError(BenchmarkError, ValueError):
    """Raised for absent record collections, chunk sizes below 1 or negative counts."""


class StoreAccessError(BenchmarkError):
    """Raised when the underlying insert/truncate/count operation fails."""

    def __init__(self, message: str, strategy: str | None = None) -> None:
        super().__init__(message)
        self.strategy = strategy


class ReportSinkError(BenchmarkError):
    """Raised when a report cannot be persisted."""


__all__ = [
    "BenchmarkError",
    "InvalidInputError",
    "StoreAccessError",
    "ReportSinkError",
]
