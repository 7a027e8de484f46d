"""
Pytest configuration for the Insert Throughput Benchmark.

Provides fixtures for:
- An in-memory fake of the psycopg connection/pool surface used by strategies
- Database connection management for integration tests
- Settings override for integration tests
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterator, List, Optional, Sequence

import psycopg
import pytest

from insert_bench.config import Settings

PARAMS_PER_ROW = 5


class FakeStore:
    """
    In-memory stand-in for the `test_record` table.

    Committed rows live in `rows`; each connection works on a private copy
    until it commits. Counters record how strategies talk to the store.
    """

    def __init__(self) -> None:
        self.rows: List[tuple] = []
        self.insert_statements = 0
        self.commits = 0
        self.rollbacks = 0
        self.connections: List[FakeConnection] = []
        self.unknown_rowcount = False
        self.fail_on_insert_statement: Optional[int] = None
        self.fail_on_truncate = False

    def connect(self) -> "FakeConnection":
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def check_insert_failure(self) -> None:
        self.insert_statements += 1
        if self.fail_on_insert_statement == self.insert_statements:
            raise psycopg.OperationalError("simulated insert failure")


class FakeCursor:
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._result: Optional[tuple] = None
        self.rowcount = -1

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> None:
        working = self._conn.working()
        statement = sql.lstrip().upper()
        if statement.startswith("INSERT"):
            self._conn.store.check_insert_failure()
            values = list(params or [])
            rows = [
                tuple(values[i : i + PARAMS_PER_ROW]) for i in range(0, len(values), PARAMS_PER_ROW)
            ]
            working.extend(rows)
            self.rowcount = -1 if self._conn.store.unknown_rowcount else len(rows)
        elif statement.startswith("DELETE"):
            if self._conn.store.fail_on_truncate:
                raise psycopg.OperationalError("simulated truncate failure")
            self.rowcount = len(working)
            working.clear()
        elif statement.startswith("SELECT COUNT"):
            self._result = (len(working),)
            self.rowcount = 1
        else:
            raise AssertionError(f"unexpected statement: {sql}")

    def executemany(self, sql: str, params_seq: Sequence[Sequence[Any]]) -> None:
        assert sql.lstrip().upper().startswith("INSERT")
        self._conn.store.check_insert_failure()
        rows = [tuple(params) for params in params_seq]
        self._conn.working().extend(rows)
        self.rowcount = -1 if self._conn.store.unknown_rowcount else len(rows)

    def fetchone(self) -> Optional[tuple]:
        return self._result


class FakeConnection:
    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.closed = False
        self._working: Optional[List[tuple]] = None

    def working(self) -> List[tuple]:
        if self._working is None:
            self._working = list(self.store.rows)
        return self._working

    def cursor(self) -> FakeCursor:
        assert not self.closed, "connection is closed"
        return FakeCursor(self)

    def commit(self) -> None:
        if self._working is not None:
            self.store.rows = self._working
        self._working = None
        self.store.commits += 1

    def rollback(self) -> None:
        self._working = None
        self.store.rollbacks += 1

    def close(self) -> None:
        self.closed = True


class FakePool:
    """Mimics `psycopg_pool.ConnectionPool.connection()` commit/rollback semantics."""

    def __init__(self, store: FakeStore) -> None:
        self.store = store
        self.checkouts = 0
        self.closed = False

    @contextmanager
    def connection(self) -> Iterator[FakeConnection]:
        self.checkouts += 1
        conn = self.store.connect()
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_pool(fake_store: FakeStore) -> FakePool:
    return FakePool(fake_store)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "insert_benchmark"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the test_record table exists, creating it from db/init.sql.
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_records_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the test_record table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.test_record RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.test_record RESTART IDENTITY;")
    db_connection.commit()
