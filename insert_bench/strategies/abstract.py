"""
Insert strategy contracts for the Insert Throughput Benchmark.

Two capability variants exist: batch-capable strategies (`insert_batch`,
configurable `chunk_size`) and single-capable strategies (`insert_single`).
Both are `runtime_checkable` Protocols so the orchestrator can sort plain
objects by capability. `AbstractInsertStrategy` and
`AbstractBatchInsertStrategy` are optional ABC helpers that own connection
handling, transactions and error translation for psycopg-backed strategies.
"""

from __future__ import annotations

import abc
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Protocol, Sequence, runtime_checkable

import psycopg
from psycopg import Connection, Cursor

from insert_bench.domain.models import Record
from insert_bench.exceptions import InvalidInputError, StoreAccessError
from insert_bench.infrastructure.db_factory import get_sync_connection
from insert_bench.utils.logging import get_logger

log = get_logger(__name__)

TABLE_NAME = "test_record"
INSERT_COLUMNS = ("data1", "data2", "amount", "status", "created_at")
INSERT_PREFIX = f"INSERT INTO {TABLE_NAME} ({', '.join(INSERT_COLUMNS)}) VALUES "
ROW_PLACEHOLDER = "(" + ", ".join(["%s"] * len(INSERT_COLUMNS)) + ")"
INSERT_SQL = INSERT_PREFIX + ROW_PLACEHOLDER
TRUNCATE_SQL = f"DELETE FROM {TABLE_NAME}"
COUNT_SQL = f"SELECT COUNT(*) FROM {TABLE_NAME}"

DEFAULT_CHUNK_SIZE = 1000

ConnectionFactory = Callable[[], Connection]


def acknowledged_rows(rowcount: int, submitted: int) -> int:
    """
    Rows to credit for a statement that submitted `submitted` rows.

    psycopg reports -1 when the row count is unknown; each submitted row then
    counts as one so the total is never undercounted.
    """
    return submitted if rowcount < 0 else rowcount


def iter_chunks(records: Sequence[Record], size: int) -> Iterator[Sequence[Record]]:
    """Yield consecutive slices of at most `size` records."""
    for start in range(0, len(records), size):
        yield records[start : start + size]


@runtime_checkable
class BatchInsertStrategy(Protocol):
    """
    Chunked insertion backend.

    Attributes
    ----------
    name : str
        Registry key used by the CLI.
    label : str
        Display label used in logs and reports.
    chunk_size : int
        Maximum records per flush; setting a value below 1 raises InvalidInputError.
    """

    name: str
    label: str
    chunk_size: int

    def insert_batch(self, records: Optional[Sequence[Record]]) -> int:
        """Insert `records` in chunks and return the acknowledged row count."""
        ...

    def truncate(self) -> None: ...

    def count(self) -> int: ...

    def close(self) -> None: ...


@runtime_checkable
class SingleInsertStrategy(Protocol):
    """
    Row-at-a-time insertion backend.
    """

    name: str
    label: str

    def insert_single(self, records: Optional[Sequence[Record]]) -> int:
        """Insert `records` one statement per row and return the acknowledged row count."""
        ...

    def truncate(self) -> None: ...

    def count(self) -> int: ...

    def close(self) -> None: ...


class AbstractInsertStrategy(abc.ABC):
    """
    Connection and transaction plumbing shared by the psycopg strategies.

    Subclasses set `name`, `label` and `description`. A strategy keeps one
    connection open between calls and releases it in `close()`.

    Parameters
    ----------
    dsn_override : str, optional
        Connect to this DSN instead of the one built from settings.
    connection_factory : callable, optional
        Zero-argument callable returning a connection; takes precedence over
        `dsn_override`.
    """

    name: str
    label: str
    description: str

    def __init__(
        self,
        dsn_override: Optional[str] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        self._dsn_override = dsn_override
        self._connection_factory = connection_factory
        self._conn: Optional[Connection] = None

    def _connect(self) -> Connection:
        if self._connection_factory is not None:
            return self._connection_factory()
        return get_sync_connection(self._dsn_override)

    def _get_connection(self) -> Connection:
        if self._conn is None or self._conn.closed:
            try:
                self._conn = self._connect()
            except psycopg.Error as exc:
                raise StoreAccessError(
                    f"{self.label}: unable to connect: {exc}", strategy=self.label
                ) from exc
        return self._conn

    def _rollback_quietly(self, conn: Connection) -> None:
        try:
            conn.rollback()
        except psycopg.Error as exc:
            log.warning(
                f"Rollback failed for {self.label}",
                extra={"strategy": self.label, "error": str(exc)},
            )

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Cursor]:
        """
        Yield a cursor inside one transaction.

        Commits on success. On failure rolls back and re-raises, translating
        driver errors into StoreAccessError.
        """
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except psycopg.Error as exc:
            self._rollback_quietly(conn)
            raise StoreAccessError(
                f"{self.label}: {action} failed: {exc}", strategy=self.label
            ) from exc
        except BaseException:
            self._rollback_quietly(conn)
            raise

    @staticmethod
    def _require_records(records: Optional[Sequence[Record]]) -> Sequence[Record]:
        if records is None:
            raise InvalidInputError("records must not be None")
        return records

    def truncate(self) -> None:
        """Delete every row from the benchmark table."""
        log.info(f"Truncating {TABLE_NAME} table", extra={"strategy": self.label})
        with self._transaction("truncate") as cur:
            cur.execute(TRUNCATE_SQL)

    def count(self) -> int:
        with self._transaction("count") as cur:
            cur.execute(COUNT_SQL)
            row = cur.fetchone()
        return int(row[0]) if row else 0

    def close(self) -> None:
        if self._conn is not None:
            if not self._conn.closed:
                self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class AbstractBatchInsertStrategy(AbstractInsertStrategy):
    """
    Template for chunked inserts.

    `insert_batch` splits the records into chunks of at most `chunk_size`,
    hands each chunk to `_flush_chunk` (one flush per complete chunk plus one
    for the remainder) and commits once at the end.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, **kwargs) -> None:
        super().__init__(**kwargs)
        self._chunk_size = DEFAULT_CHUNK_SIZE
        self.chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @chunk_size.setter
    def chunk_size(self, value: int) -> None:
        if value < 1:
            raise InvalidInputError(f"chunk_size must be at least 1, but was: {value}")
        self._chunk_size = value
        log.debug("Chunk size set", extra={"strategy": self.label, "chunk_size": value})

    def insert_batch(self, records: Optional[Sequence[Record]]) -> int:
        records = self._require_records(records)
        if not records:
            log.debug("Empty record list, nothing to insert", extra={"strategy": self.label})
            return 0

        log.info(
            f"Starting batch insert: {self.label}",
            extra={"strategy": self.label, "records": len(records), "chunk_size": self._chunk_size},
        )
        start = time.perf_counter()
        total_inserted = 0
        flushes = 0

        with self._transaction("insert_batch") as cur:
            for chunk in iter_chunks(records, self._chunk_size):
                total_inserted += self._flush_chunk(cur, chunk)
                flushes += 1
                log.debug(
                    "Flushed chunk",
                    extra={"strategy": self.label, "flushes": flushes, "inserted": total_inserted},
                )

        log.info(
            f"Batch insert completed: {self.label}",
            extra={
                "strategy": self.label,
                "inserted": total_inserted,
                "flushes": flushes,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return total_inserted

    @abc.abstractmethod
    def _flush_chunk(self, cur: Cursor, chunk: Sequence[Record]) -> int:  # pragma: no cover
        """Send one chunk to the store and return the acknowledged row count."""
        raise NotImplementedError


__all__ = [
    "AbstractBatchInsertStrategy",
    "AbstractInsertStrategy",
    "BatchInsertStrategy",
    "SingleInsertStrategy",
    "acknowledged_rows",
    "iter_chunks",
    "COUNT_SQL",
    "INSERT_SQL",
    "TRUNCATE_SQL",
]
