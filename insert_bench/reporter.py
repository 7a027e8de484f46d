from __future__ import annotations

import csv
import math
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from insert_bench.domain.result import BenchmarkResult
from insert_bench.exceptions import ReportSinkError
from insert_bench.utils.logging import get_logger

log = get_logger(__name__)

CSV_HEADER = [
    "Type",
    "RecordCount",
    "BatchSize",
    "Iterations",
    "AvgDuration(ms)",
    "MinDuration(ms)",
    "MaxDuration(ms)",
    "StdDev",
    "AvgTPS",
]
FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
MAX_NAME_ATTEMPTS = 1000


def find_fastest(results: Sequence[BenchmarkResult]) -> BenchmarkResult:
    """
    Return the result with the strictly highest throughput.

    Ties resolve to the first result in list order.
    """
    fastest = results[0]
    for result in results[1:]:
        if result.throughput > fastest.throughput:
            fastest = result
    return fastest


def compare_results(
    results: Sequence[BenchmarkResult],
) -> Tuple[BenchmarkResult, List[Tuple[BenchmarkResult, float]]]:
    """
    Rank results against the fastest one.

    Returns the fastest result and `(result, fastest.throughput / result.throughput)`
    for every other result, in list order. A result with zero throughput gets
    an infinite ratio.
    """
    fastest = find_fastest(results)
    ratios: List[Tuple[BenchmarkResult, float]] = []
    for result in results:
        if result is fastest:
            continue
        ratio = fastest.throughput / result.throughput if result.throughput > 0 else math.inf
        ratios.append((result, ratio))
    return fastest, ratios


def _format_ratio(ratio: float) -> str:
    return "n/a" if math.isinf(ratio) else f"{ratio:.2f}x"


def csv_row(result: BenchmarkResult) -> List[str]:
    return [
        result.strategy,
        str(result.record_count),
        str(result.chunk_size),
        str(result.iterations),
        f"{result.average_duration_ms:.2f}",
        f"{result.min_duration_ms:.2f}",
        f"{result.max_duration_ms:.2f}",
        f"{result.standard_deviation_ms:.2f}",
        f"{result.throughput:.2f}",
    ]


class BenchmarkReporter:
    """
    Render benchmark results to the console and persist them as CSV.

    Parameters
    ----------
    results_dir : Path | str
        Directory receiving `benchmark_result_<timestamp>.csv`.
    persist : bool
        Whether to write the CSV file at all.
    console : Console, optional
        Rich console to print to; defaults to stdout.
    """

    def __init__(
        self,
        results_dir: Path | str = "benchmark-results",
        persist: bool = True,
        console: Optional[Console] = None,
    ) -> None:
        self.results_dir = Path(results_dir)
        self.persist = persist
        self.console = console or Console()
        self.last_report_path: Optional[Path] = None

    def generate_report(self, results: Optional[Sequence[BenchmarkResult]]) -> Optional[Path]:
        """
        Print the summary and, when enabled, save the CSV report.

        Persistence failures are logged and never raised. Returns the CSV path
        when one was written.
        """
        if not results:
            log.warning("No benchmark results to report")
            return None

        self.print_results(results)
        if not self.persist:
            return None

        try:
            path = self.save_csv(results)
        except ReportSinkError as exc:
            log.warning(f"CSV report not saved: {exc}", extra={"results_dir": str(self.results_dir)})
            return None
        self.last_report_path = path
        return path

    def print_results(self, results: Sequence[BenchmarkResult]) -> None:
        self.console.print(self._summary_table(results))
        self._print_details(results)
        self._print_comparison(results)

    def _summary_table(self, results: Sequence[BenchmarkResult]) -> Table:
        table = Table(title="Insert Benchmark Results", box=box.ROUNDED)

        table.add_column("Type", style="cyan", no_wrap=True)
        table.add_column("Records", justify="right", style="magenta")
        table.add_column("Chunk Size", justify="right", style="blue")
        table.add_column("Iterations", justify="right", style="blue")
        table.add_column("Avg TPS", justify="right", style="bold green")
        table.add_column("Std Dev (ms)", justify="right", style="green")
        table.add_column("Min (ms)", justify="right", style="yellow")
        table.add_column("Max (ms)", justify="right", style="yellow")

        for res in results:
            label = escape(res.strategy)
            if res.failed:
                label = f"{label} [red](aborted)[/red]"
            table.add_row(
                label,
                f"{res.record_count:,}",
                str(res.chunk_size),
                str(res.iterations),
                f"{res.throughput:,.2f}",
                f"{res.standard_deviation_ms:.2f}",
                f"{res.min_duration_ms:.2f}",
                f"{res.max_duration_ms:.2f}",
            )
        return table

    def _print_details(self, results: Sequence[BenchmarkResult]) -> None:
        self.console.print("[bold]DETAILED RESULTS[/bold]")
        for res in results:
            durations = ", ".join(f"{d:.2f}" for d in res.durations_ms)
            self.console.print(f"\n[cyan]\\[{escape(res.strategy)}][/cyan]")
            self.console.print(
                f"  Records: {res.record_count}, ChunkSize: {res.chunk_size}, "
                f"Iterations: {res.iterations}"
            )
            self.console.print(f"  Durations: [{durations}] ms")
            self.console.print(f"  Average Duration: {res.average_duration_ms:.2f} ms")
            self.console.print(f"  Average TPS: {res.throughput:.2f}")
            self.console.print(f"  Std Deviation: {res.standard_deviation_ms:.2f} ms")
            self.console.print(
                f"  Min/Max: {res.min_duration_ms:.2f} / {res.max_duration_ms:.2f} ms"
            )
            if res.failed:
                self.console.print(f"  [red]Aborted: {escape(res.error or '')}[/red]")
        self.console.print()

    def _print_comparison(self, results: Sequence[BenchmarkResult]) -> None:
        if len(results) < 2:
            return

        fastest, ratios = compare_results(results)
        self.console.print("[bold]PERFORMANCE COMPARISON[/bold]")
        self.console.print(
            f"Fastest: [bold green]{escape(fastest.strategy)}[/bold green] "
            f"with {fastest.throughput:.2f} TPS"
        )
        for result, ratio in ratios:
            self.console.print(f"  vs {escape(result.strategy)}: {_format_ratio(ratio)} faster")
        self.console.print()

    def save_csv(self, results: Sequence[BenchmarkResult]) -> Path:
        timestamp = datetime.now().strftime(FILE_TIMESTAMP_FORMAT)
        path = self.results_dir / f"benchmark_result_{timestamp}.csv"
        try:
            self.results_dir.mkdir(parents=True, exist_ok=True)
            f, path = self._open_new_file(timestamp)
            with f:
                writer = csv.writer(f)
                writer.writerow(CSV_HEADER)
                writer.writerows(csv_row(result) for result in results)
        except OSError as exc:
            raise ReportSinkError(f"unable to write {path}: {exc}") from exc

        log.info("CSV report saved", extra={"path": str(path.resolve())})
        return path

    def _open_new_file(self, timestamp: str) -> Tuple[TextIO, Path]:
        # Reports within the same second get a numeric suffix instead of overwriting.
        for attempt in range(MAX_NAME_ATTEMPTS):
            suffix = f"_{attempt}" if attempt else ""
            path = self.results_dir / f"benchmark_result_{timestamp}{suffix}.csv"
            try:
                return path.open("x", newline="", encoding="utf-8"), path
            except FileExistsError:
                continue
        raise FileExistsError(f"no free report name for timestamp {timestamp} in {self.results_dir}")


__all__ = [
    "BenchmarkReporter",
    "CSV_HEADER",
    "compare_results",
    "csv_row",
    "find_fastest",
]
