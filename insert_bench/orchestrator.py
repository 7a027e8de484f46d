"""
Orchestrator for running insert benchmarks and handing results to the reporter.

Usage (example from CLI):
    from insert_bench.orchestrator import RunConfig, run_benchmark

    results = run_benchmark(
        strategy_names=["executemany_batch", "single_insert"],
        config=RunConfig(record_count=10_000, chunk_size=500, iterations=3, warmup_count=100),
    )

A run moves through IDLE -> WARMUP -> BATCH_TRIALS -> SINGLE_TRIALS ->
REPORTING -> DONE. Trials are strictly sequential; every trial truncates the
shared table before inserting, and every configuration truncates once more
when its trials end.

CSV reports are saved to `benchmark-results/` by default:
- `benchmark-results/benchmark_result_<timestamp>.csv`
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from insert_bench.config import Settings, get_settings
from insert_bench.domain.result import BenchmarkResult
from insert_bench.exceptions import InvalidInputError, StoreAccessError
from insert_bench.reporter import BenchmarkReporter
from insert_bench.strategies.abstract import BatchInsertStrategy, SingleInsertStrategy
from insert_bench.strategies.executemany_batch import ExecutemanyBatchStrategy
from insert_bench.strategies.multirow_batch import MultiRowBatchStrategy
from insert_bench.strategies.pooled_single import PooledSingleInsertStrategy
from insert_bench.strategies.single_insert import SingleRowInsertStrategy
from insert_bench.utils.data_generator import RecordGenerator
from insert_bench.utils.logging import get_logger
from insert_bench.utils.profiler import profile_block, profile_function

log = get_logger(__name__)

SINGLE_INSERT_RECORD_CAP = 1000
BANNER = "=" * 60
RULE = "-" * 60

InsertStrategy = Union[BatchInsertStrategy, SingleInsertStrategy]


@dataclass(frozen=True)
class RunConfig:
    """Options for one benchmark run."""

    record_count: int = 100_000
    chunk_size: int = 1000
    iterations: int = 3
    warmup_count: int = 1000

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise InvalidInputError(f"chunk_size must be at least 1, but was: {self.chunk_size}")
        if self.record_count < 0:
            raise InvalidInputError(
                f"record_count must be non-negative, but was: {self.record_count}"
            )
        if self.iterations < 0:
            raise InvalidInputError(f"iterations must be non-negative, but was: {self.iterations}")

    @property
    def single_record_count(self) -> int:
        return min(self.record_count, SINGLE_INSERT_RECORD_CAP)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Optional[int]) -> "RunConfig":
        """Build a config from settings; `None` overrides are ignored."""
        settings = settings or get_settings()
        values = {
            "record_count": settings.benchmark_record_count,
            "chunk_size": settings.benchmark_chunk_size,
            "iterations": settings.benchmark_iterations,
            "warmup_count": settings.benchmark_warmup_count,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


class RunPhase(str, Enum):
    IDLE = "idle"
    WARMUP = "warmup"
    BATCH_TRIALS = "batch_trials"
    SINGLE_TRIALS = "single_trials"
    REPORTING = "reporting"
    DONE = "done"


_PHASE_ORDER = list(RunPhase)


class BenchmarkRunner:
    """
    Benchmark execution engine.

    Parameters
    ----------
    config : RunConfig
        Record count, chunk size, iterations and warm-up size.
    batch_strategies : sequence
        Batch-capable strategies, measured in this order.
    single_strategies : sequence
        Single-capable strategies, measured after the batch ones.
    reporter : BenchmarkReporter, optional
        Receives the ordered result list. Reporting is skipped when omitted.
    generator : RecordGenerator, optional
        Source of fresh records for every trial.
    """

    def __init__(
        self,
        config: RunConfig,
        batch_strategies: Sequence[BatchInsertStrategy] = (),
        single_strategies: Sequence[SingleInsertStrategy] = (),
        reporter: Optional[BenchmarkReporter] = None,
        generator: Optional[RecordGenerator] = None,
    ) -> None:
        self.config = config
        self.batch_strategies = list(batch_strategies)
        self.single_strategies = list(single_strategies)
        self.reporter = reporter
        self.generator = generator or RecordGenerator()
        self.phase = RunPhase.IDLE

    def _enter(self, phase: RunPhase) -> None:
        if _PHASE_ORDER.index(phase) < _PHASE_ORDER.index(self.phase):
            raise RuntimeError(f"cannot move from {self.phase.value} back to {phase.value}")
        log.debug("Run phase changed", extra={"from": self.phase.value, "to": phase.value})
        self.phase = phase

    def run(self) -> List[BenchmarkResult]:
        """
        Execute warm-up, batch trials and single trials, then report.

        Returns
        -------
        List[BenchmarkResult]
            Batch results in registration order followed by single results.
        """
        if self.phase is not RunPhase.IDLE:
            raise RuntimeError("BenchmarkRunner instances are single-use")

        log.info(BANNER)
        log.info("[BENCHMARK START] Insert throughput benchmark")
        log.info(BANNER)
        log.info(
            "Configuration",
            extra={
                "record_count": self.config.record_count,
                "chunk_size": self.config.chunk_size,
                "iterations": self.config.iterations,
                "warmup_count": self.config.warmup_count,
                "batch_strategies": [s.label for s in self.batch_strategies],
                "single_strategies": [s.label for s in self.single_strategies],
            },
        )

        self._enter(RunPhase.WARMUP)
        self._warmup()

        results: List[BenchmarkResult] = []
        self._enter(RunPhase.BATCH_TRIALS)
        for strategy in self.batch_strategies:
            results.append(self._run_batch(strategy))

        self._enter(RunPhase.SINGLE_TRIALS)
        for strategy in self.single_strategies:
            results.append(self._run_single(strategy))

        self._enter(RunPhase.REPORTING)
        if self.reporter is not None:
            self.reporter.generate_report(results)

        self._enter(RunPhase.DONE)
        log.info(BANNER)
        log.info(
            f"[BENCHMARK COMPLETE] {len(results)} result(s)",
            extra={"results": len(results), "aborted": sum(r.failed for r in results)},
        )
        log.info(BANNER)
        return results

    def _warmup(self) -> None:
        warmup_count = self.config.warmup_count
        if warmup_count <= 0:
            log.info("[WARMUP] Skipping warmup (warmup_count <= 0)")
            return

        log.info(RULE)
        log.info(f"[WARMUP] Warming up with {warmup_count} records")

        @profile_function("warmup", track_memory=False)
        def _warm(strategy: BatchInsertStrategy) -> None:
            strategy.chunk_size = self.config.chunk_size
            strategy.truncate()
            strategy.insert_batch(self.generator.generate(warmup_count))
            strategy.truncate()

        for strategy in self.batch_strategies:
            try:
                stats = _warm(strategy)
            except StoreAccessError as exc:
                log.warning(
                    f"[WARMUP] Failed for {strategy.label}",
                    extra={"strategy": strategy.label, "error": str(exc)},
                )
                continue
            log.info(
                f"[WARMUP] Completed for {strategy.label}",
                extra={"strategy": strategy.label, "duration_ms": round(stats.duration_ms, 2)},
            )
        log.info(RULE)

    def _run_batch(self, strategy: BatchInsertStrategy) -> BenchmarkResult:
        log.info(RULE)
        log.info(f"[BATCH] {strategy.label}", extra={"strategy": strategy.label})
        log.info(RULE)

        strategy.chunk_size = self.config.chunk_size
        return self._run_trials(
            strategy,
            insert=strategy.insert_batch,
            record_count=self.config.record_count,
            chunk_size=self.config.chunk_size,
        )

    def _run_single(self, strategy: SingleInsertStrategy) -> BenchmarkResult:
        record_count = self.config.single_record_count
        log.info(RULE)
        log.info(
            f"[SINGLE] {strategy.label} (limited to {record_count} records)",
            extra={"strategy": strategy.label, "records": record_count},
        )
        log.info(RULE)

        return self._run_trials(
            strategy,
            insert=strategy.insert_single,
            record_count=record_count,
            chunk_size=1,
        )

    def _run_trials(
        self,
        strategy: InsertStrategy,
        insert: Callable[..., int],
        record_count: int,
        chunk_size: int,
    ) -> BenchmarkResult:
        iterations = self.config.iterations
        durations: List[float] = []
        error: Optional[str] = None

        try:
            for iteration in range(1, iterations + 1):
                strategy.truncate()
                records = self.generator.generate(record_count)

                with profile_block(strategy.label) as stats:
                    insert(records)

                durations.append(stats.duration_ms)
                log.info(
                    f"[ITERATION {iteration}/{iterations}] {strategy.label}",
                    extra={
                        "strategy": strategy.label,
                        "iteration": iteration,
                        "duration_ms": round(stats.duration_ms, 2),
                        "tps": _tps(record_count, stats.duration_ms),
                        "rss_delta_bytes": stats.rss_delta_bytes,
                    },
                )
            strategy.truncate()
        except StoreAccessError as exc:
            error = str(exc)
            log.error(
                f"[ABORTED] {strategy.label} after {len(durations)}/{iterations} iteration(s)",
                extra={"strategy": strategy.label, "error": error},
            )

        result = BenchmarkResult(
            strategy=strategy.label,
            record_count=record_count,
            chunk_size=chunk_size,
            iterations=iterations,
            durations_ms=tuple(durations),
            executed_at=datetime.now(timezone.utc),
            error=error,
        )
        log.info(f"[RESULT] {result}", extra={"strategy": strategy.label})
        return result


def _tps(record_count: int, duration_ms: float) -> Optional[float]:
    if duration_ms <= 0:
        return None
    return round(record_count * 1000.0 / duration_ms, 2)


def _strategy_factories() -> Dict[str, Callable[[], InsertStrategy]]:
    """Registry of available strategies."""
    return {
        "executemany_batch": lambda: ExecutemanyBatchStrategy(),
        "multirow_batch": lambda: MultiRowBatchStrategy(),
        "single_insert": lambda: SingleRowInsertStrategy(),
        "pooled_single": lambda: PooledSingleInsertStrategy(),
    }


def available_strategies() -> List[str]:
    """List available strategy names."""
    return sorted(_strategy_factories().keys())


def _expand_strategy_names(strategy_names: Optional[Iterable[str]]) -> List[str]:
    """Replace every "all" with the registry order and drop repeats, keeping first occurrence."""
    requested = list(strategy_names) if strategy_names is not None else ["all"]
    if not requested:
        requested = ["all"]
    names: List[str] = []
    for name in requested:
        expanded = list(_strategy_factories()) if name == "all" else [name]
        for item in expanded:
            if item not in names:
                names.append(item)
    return names


def _check_strategy_name(name: str) -> None:
    factories = _strategy_factories()
    if name not in factories:
        raise InvalidInputError(f"Unknown strategy '{name}'. Available: {', '.join(factories)}")


def _resolve_strategy(name: str) -> InsertStrategy:
    _check_strategy_name(name)
    return _strategy_factories()[name]()


def split_by_capability(
    strategies: Iterable[InsertStrategy],
) -> tuple[List[BatchInsertStrategy], List[SingleInsertStrategy]]:
    """Partition strategies into batch-capable and single-capable lists, keeping order."""
    batch: List[BatchInsertStrategy] = []
    single: List[SingleInsertStrategy] = []
    for strategy in strategies:
        if isinstance(strategy, BatchInsertStrategy):
            batch.append(strategy)
        elif isinstance(strategy, SingleInsertStrategy):
            single.append(strategy)
        else:
            raise InvalidInputError(f"{strategy!r} implements neither insert capability")
    return batch, single


def run_benchmark(
    strategy_names: Optional[Iterable[str]] = None,
    config: Optional[RunConfig] = None,
    results_dir: Path | str | None = None,
    persist: bool = True,
    seed: Optional[int] = None,
    reporter: Optional[BenchmarkReporter] = None,
) -> List[BenchmarkResult]:
    """
    Build the named strategies, run the benchmark and report the results.

    Parameters
    ----------
    strategy_names : iterable[str] | None
        Strategy names to execute. If None or ["all"], executes all available.
    config : RunConfig | None
        Run options. Defaults to values from settings.
    results_dir : Path | str | None
        Directory for CSV reports. Defaults to settings.results_dir.
    persist : bool
        Whether to write the CSV report.
    seed : int | None
        Seed for record generation. Defaults to settings.benchmark_seed.
    reporter : BenchmarkReporter | None
        Custom reporter; overrides `results_dir` and `persist`.

    Returns
    -------
    List[BenchmarkResult]
        Batch results in registration order followed by single results.
    """
    settings = get_settings()
    config = config or RunConfig.from_settings(settings)

    names = _expand_strategy_names(strategy_names)
    for name in names:
        _check_strategy_name(name)

    strategies = [_resolve_strategy(name) for name in names]
    try:
        batch, single = split_by_capability(strategies)
        runner = BenchmarkRunner(
            config=config,
            batch_strategies=batch,
            single_strategies=single,
            reporter=reporter
            or BenchmarkReporter(results_dir=results_dir or settings.results_dir, persist=persist),
            generator=RecordGenerator(seed if seed is not None else settings.benchmark_seed),
        )
        return runner.run()
    finally:
        for strategy in strategies:
            strategy.close()


__all__ = [
    "BenchmarkRunner",
    "RunConfig",
    "RunPhase",
    "SINGLE_INSERT_RECORD_CAP",
    "available_strategies",
    "run_benchmark",
    "split_by_capability",
]
