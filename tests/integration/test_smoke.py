"""
Integration tests for the insert strategies.

These tests run against a real PostgreSQL instance and verify that:
1. Each strategy inserts exactly the records it is given
2. Truncate leaves the table empty
3. A full benchmark run produces one result per strategy with timing samples

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import io
import os

import pytest
from rich.console import Console

from insert_bench.orchestrator import BenchmarkRunner, RunConfig
from insert_bench.reporter import BenchmarkReporter
from insert_bench.strategies import (
    ExecutemanyBatchStrategy,
    MultiRowBatchStrategy,
    PooledSingleInsertStrategy,
    SingleRowInsertStrategy,
)
from insert_bench.utils.data_generator import RecordGenerator, generate_with_seed

# Test configuration constants
DEFAULT_CHUNK_SIZE = 25
DEFAULT_RECORDS = 60
DEFAULT_SEED = 123
CHUNK_SIZES = [1, 7, 100]
RUN_ITERATIONS = 2

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


def _count_rows(db_connection) -> int:
    with db_connection.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM public.test_record;")
        (count,) = cur.fetchone()
    db_connection.commit()
    return int(count)


class TestBatchStrategies:
    """Chunked batch insertion against Postgres."""

    @pytest.mark.parametrize("cls", [ExecutemanyBatchStrategy, MultiRowBatchStrategy])
    @pytest.mark.parametrize("chunk_size", CHUNK_SIZES)
    def test_batch_insert_stores_every_record(
        self, cls, chunk_size: int, clean_records_table, db_connection, test_dsn: str
    ):
        records = generate_with_seed(DEFAULT_RECORDS, DEFAULT_SEED)
        with cls(chunk_size=chunk_size, dsn_override=test_dsn) as strategy:
            inserted = strategy.insert_batch(records)

            assert inserted == DEFAULT_RECORDS
            assert strategy.count() == DEFAULT_RECORDS
        assert _count_rows(db_connection) == DEFAULT_RECORDS

    def test_inserted_values_round_trip(self, clean_records_table, db_connection, test_dsn: str):
        record = generate_with_seed(1, DEFAULT_SEED)[0]
        with MultiRowBatchStrategy(chunk_size=DEFAULT_CHUNK_SIZE, dsn_override=test_dsn) as strategy:
            strategy.insert_batch([record])

        with db_connection.cursor() as cur:
            cur.execute("SELECT data1, data2, amount, status FROM public.test_record;")
            row = cur.fetchone()
        db_connection.commit()

        assert row == (record.data1, record.data2, record.amount, record.status.value)

    def test_truncate_empties_table(self, clean_records_table, db_connection, test_dsn: str):
        with ExecutemanyBatchStrategy(chunk_size=DEFAULT_CHUNK_SIZE, dsn_override=test_dsn) as strategy:
            strategy.insert_batch(generate_with_seed(DEFAULT_RECORDS, DEFAULT_SEED))
            strategy.truncate()
            assert strategy.count() == 0
        assert _count_rows(db_connection) == 0


class TestSingleStrategies:
    """Row-at-a-time insertion against Postgres."""

    @pytest.mark.parametrize("cls", [SingleRowInsertStrategy, PooledSingleInsertStrategy])
    def test_single_insert_stores_every_record(
        self, cls, clean_records_table, db_connection, test_dsn: str
    ):
        strategy = cls(dsn_override=test_dsn)
        try:
            assert strategy.insert_single(generate_with_seed(DEFAULT_RECORDS, DEFAULT_SEED)) == (
                DEFAULT_RECORDS
            )
            assert strategy.count() == DEFAULT_RECORDS
        finally:
            strategy.close()
        assert _count_rows(db_connection) == DEFAULT_RECORDS


class TestBenchmarkRunner:
    """Full benchmark run with real strategies."""

    def test_run_all_strategies(self, clean_records_table, db_connection, test_dsn: str, tmp_path):
        batch = [
            ExecutemanyBatchStrategy(dsn_override=test_dsn),
            MultiRowBatchStrategy(dsn_override=test_dsn),
        ]
        single = [
            SingleRowInsertStrategy(dsn_override=test_dsn),
            PooledSingleInsertStrategy(dsn_override=test_dsn),
        ]
        reporter = BenchmarkReporter(results_dir=tmp_path, console=Console(file=io.StringIO()))
        runner = BenchmarkRunner(
            RunConfig(
                record_count=DEFAULT_RECORDS,
                chunk_size=DEFAULT_CHUNK_SIZE,
                iterations=RUN_ITERATIONS,
                warmup_count=10,
            ),
            batch_strategies=batch,
            single_strategies=single,
            reporter=reporter,
            generator=RecordGenerator(DEFAULT_SEED),
        )
        try:
            results = runner.run()
        finally:
            for strategy in [*batch, *single]:
                strategy.close()

        assert [r.strategy for r in results] == [
            "Executemany-Batch",
            "MultiValues-Batch",
            "Single-Insert",
            "Pooled-Single",
        ]
        for result in results:
            assert not result.failed
            assert len(result.durations_ms) == RUN_ITERATIONS
            assert result.throughput > 0
        assert [r.chunk_size for r in results] == [DEFAULT_CHUNK_SIZE, DEFAULT_CHUNK_SIZE, 1, 1]
        assert reporter.last_report_path is not None and reporter.last_report_path.exists()
        assert _count_rows(db_connection) == 0
