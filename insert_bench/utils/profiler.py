"""
Timing utilities for the Insert Throughput Benchmark.

`profile_block` measures wall-clock time with `time.perf_counter` and
snapshots process RSS with psutil before and after the block. There is no
background sampler: trials run strictly single-threaded so that nothing
competes with the insert being measured.

Usage example:
    from insert_bench.utils.profiler import profile_block

    with profile_block("Executemany-Batch") as stats:
        strategy.insert_batch(records)

    print(stats.duration_ms, stats.rss_delta_bytes)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    rss_before_bytes: Optional[int] = field(default=None)
    rss_after_bytes: Optional[int] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000.0

    @property
    def rss_delta_bytes(self) -> Optional[int]:
        if self.rss_before_bytes is None or self.rss_after_bytes is None:
            return None
        return self.rss_after_bytes - self.rss_before_bytes


def _current_rss(process: Optional[psutil.Process]) -> Optional[int]:
    if process is None:
        return None
    try:
        return process.memory_info().rss
    except psutil.Error:
        return None


@contextlib.contextmanager
def profile_block(label: str, track_memory: bool = True) -> Generator[ProfileStats, None, None]:
    """
    Context manager to time a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    track_memory : bool
        Whether to snapshot RSS before and after the block. The snapshots are
        taken outside the timed window.

    Notes
    -----
    The duration is recorded even when the block raises, so callers can log
    how long a failed insert ran before the driver gave up.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process() if track_memory else None
    stats.rss_before_bytes = _current_rss(process)

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stats.rss_after_bytes = _current_rss(process)


def profile_function(
    label: Optional[str] = None, track_memory: bool = True
) -> Callable[[Callable[..., Any]], Callable[..., ProfileStats]]:
    """
    Decorator to time a function call and return ProfileStats.

    Example
    -------
        @profile_function("warmup")
        def run():
            ...

        stats = run()
        print(f"Took {stats.duration_ms:.2f} ms")
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., ProfileStats]:
        def wrapper(*args: Any, **kwargs: Any) -> ProfileStats:
            tag = label or func.__name__
            with profile_block(tag, track_memory=track_memory) as stats:
                stats.extra["return_value"] = func(*args, **kwargs)
            return stats

        return wrapper

    return decorator


__all__ = ["ProfileStats", "profile_block", "profile_function"]
