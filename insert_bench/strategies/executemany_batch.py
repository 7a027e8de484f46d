"""
Executemany batch strategy: one `cursor.executemany` call per chunk.

psycopg 3 pipelines the statements of an `executemany` call, so each chunk
costs a single network round trip. This is the closest equivalent of a JDBC
`addBatch`/`executeBatch` loop.
"""

from __future__ import annotations

from typing import Sequence

from psycopg import Cursor

from insert_bench.domain.models import Record
from insert_bench.strategies.abstract import (
    INSERT_SQL,
    AbstractBatchInsertStrategy,
    acknowledged_rows,
)


class ExecutemanyBatchStrategy(AbstractBatchInsertStrategy):
    """
    Prepared INSERT executed once per record, flushed chunk by chunk.
    """

    name: str = "executemany_batch"
    label: str = "Executemany-Batch"
    description: str = "cursor.executemany per chunk, single transaction per call."

    def _flush_chunk(self, cur: Cursor, chunk: Sequence[Record]) -> int:
        cur.executemany(INSERT_SQL, [record.as_params() for record in chunk])
        return acknowledged_rows(cur.rowcount, len(chunk))


__all__ = ["ExecutemanyBatchStrategy"]
