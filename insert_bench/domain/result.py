"""
Benchmark result model and derived statistics.

A `BenchmarkResult` is built once per (strategy, record count, chunk size,
iterations) configuration after its trial loop finishes and is never mutated
afterwards. Only the raw samples are stored; every statistic is computed on
access.
"""
from __future__ import annotations

import statistics
from datetime import datetime, timezone
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BenchmarkResult(BaseModel):
    """
    Immutable sample set for one strategy/configuration.

    Durations are milliseconds in execution order. The engine keeps
    `len(durations_ms) == iterations`; the model does not enforce it so that
    aborted configurations can still be reported with the samples they have.
    """

    strategy: str = Field(..., min_length=1, description="Strategy label.")
    record_count: int = Field(..., ge=0)
    chunk_size: int = Field(..., ge=1)
    iterations: int = Field(..., ge=0)
    durations_ms: Tuple[float, ...] = Field(default_factory=tuple)
    executed_at: datetime = Field(default_factory=_utcnow)
    error: Optional[str] = Field(None, description="Set when trials were aborted.")

    model_config = {"frozen": True}

    @field_validator("durations_ms")
    @classmethod
    def _non_negative(cls, value: Tuple[float, ...]) -> Tuple[float, ...]:
        if any(sample < 0 for sample in value):
            raise ValueError("durations must be non-negative")
        return value

    @property
    def average_duration_ms(self) -> float:
        if not self.durations_ms:
            return 0.0
        return statistics.fmean(self.durations_ms)

    @property
    def min_duration_ms(self) -> float:
        return min(self.durations_ms, default=0.0)

    @property
    def max_duration_ms(self) -> float:
        return max(self.durations_ms, default=0.0)

    @property
    def standard_deviation_ms(self) -> float:
        # Sample (n-1) deviation; fewer than two samples report 0.
        if len(self.durations_ms) < 2:
            return 0.0
        return statistics.stdev(self.durations_ms)

    @property
    def throughput(self) -> float:
        """Records per second at the average duration."""
        avg = self.average_duration_ms
        if avg <= 0:
            return 0.0
        return self.record_count * 1000.0 / avg

    @property
    def total_duration_ms(self) -> float:
        return float(sum(self.durations_ms))

    @property
    def failed(self) -> bool:
        return self.error is not None

    def __str__(self) -> str:
        return (
            f"BenchmarkResult(strategy={self.strategy!r}, records={self.record_count}, "
            f"chunk_size={self.chunk_size}, iterations={self.iterations}, "
            f"avg={self.average_duration_ms:.2f}ms, tps={self.throughput:.2f})"
        )


__all__ = ["BenchmarkResult"]
