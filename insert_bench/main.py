from __future__ import annotations

import json
import sys
from typing import List, Optional

import typer

from insert_bench.config import get_settings
from insert_bench.exceptions import InvalidInputError
from insert_bench.orchestrator import (
    RunConfig,
    _strategy_factories,
    available_strategies,
    run_benchmark,
)
from insert_bench.strategies.abstract import BatchInsertStrategy
from insert_bench.utils.data_generator import RecordGenerator
from insert_bench.utils.logging import configure_logging

app = typer.Typer(help="Insert Throughput Benchmark CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"records={settings.benchmark_record_count} chunk={settings.benchmark_chunk_size} "
        f"iterations={settings.benchmark_iterations} warmup={settings.benchmark_warmup_count} "
        f"results_dir={settings.results_dir}"
    )


@app.command("list")
def list_strategies() -> None:
    """
    List registered strategies and their insert capability.
    """
    factories = _strategy_factories()
    for name in available_strategies():
        strategy = factories[name]()
        try:
            kind = "batch" if isinstance(strategy, BatchInsertStrategy) else "single"
            typer.echo(f"{name:<20} {kind:<7} {strategy.description}")
        finally:
            strategy.close()


@app.command()
def run(
    strategy: Optional[List[str]] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Strategy to run; repeat for several (default: all). See `list`.",
    ),
    record_count: Optional[int] = typer.Option(
        None, "--record-count", "-n", help="Records per batch trial (default from settings)."
    ),
    chunk_size: Optional[int] = typer.Option(
        None, "--chunk-size", "-c", help="Chunk size for batch strategies."
    ),
    iterations: Optional[int] = typer.Option(
        None, "--iterations", "-i", help="Timed trials per strategy."
    ),
    warmup_count: Optional[int] = typer.Option(
        None, "--warmup-count", "-w", help="Warm-up records per batch strategy (0 disables)."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Deterministic RNG seed."),
    results_dir: Optional[str] = typer.Option(
        None, "--results-dir", help="Directory for the CSV report."
    ),
    no_persist: bool = typer.Option(False, "--no-persist", help="Skip writing the CSV report."),
    json_logs: Optional[bool] = typer.Option(
        None, "--json-logs/--text-logs", help="Emit logs as JSON."
    ),
) -> None:
    """
    Run the insert benchmark and report the results.
    """
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_logs=settings.log_json if json_logs is None else json_logs,
    )

    names = strategy or ["all"]
    unknown = [name for name in names if name != "all" and name not in available_strategies()]
    if unknown:
        typer.echo(
            f"Unknown strategy: {', '.join(unknown)}. "
            f"Available: {', '.join(available_strategies())}",
            err=True,
        )
        raise typer.Exit(code=2)

    try:
        config = RunConfig.from_settings(
            settings,
            record_count=record_count,
            chunk_size=chunk_size,
            iterations=iterations,
            warmup_count=warmup_count,
        )
    except InvalidInputError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)

    typer.echo(
        f"Running strategies={','.join(names)} records={config.record_count} "
        f"chunk={config.chunk_size} iterations={config.iterations} warmup={config.warmup_count}"
    )
    try:
        results = run_benchmark(
            strategy_names=names,
            config=config,
            results_dir=results_dir,
            persist=not no_persist,
            seed=seed,
        )
    except InvalidInputError as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        raise typer.Exit(code=2)

    aborted = [result.strategy for result in results if result.failed]
    if aborted:
        typer.echo(f"Aborted configurations: {', '.join(aborted)}", err=True)
        raise typer.Exit(code=1)


@app.command()
def sample(
    count: int = typer.Option(3, "--count", "-n", help="Number of records to generate."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Deterministic RNG seed."),
) -> None:
    """
    Print generated records as JSON.
    """
    try:
        records = RecordGenerator(seed).generate(count)
    except InvalidInputError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps([record.model_dump(mode="json") for record in records], indent=2))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
