"""
Multi-row VALUES batch strategy: one `INSERT ... VALUES (...), (...)` per chunk.

PostgreSQL accepts at most 65535 bind parameters per statement, so chunks
larger than `MAX_ROWS_PER_STATEMENT` are sent as several statements inside the
same flush.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from psycopg import Cursor

from insert_bench.domain.models import Record
from insert_bench.strategies.abstract import (
    INSERT_COLUMNS,
    INSERT_PREFIX,
    ROW_PLACEHOLDER,
    AbstractBatchInsertStrategy,
    acknowledged_rows,
    iter_chunks,
)

MAX_BIND_PARAMETERS = 65535
MAX_ROWS_PER_STATEMENT = MAX_BIND_PARAMETERS // len(INSERT_COLUMNS)


class MultiRowBatchStrategy(AbstractBatchInsertStrategy):
    """
    Single multi-row INSERT statement per chunk.
    """

    name: str = "multirow_batch"
    label: str = "MultiValues-Batch"
    description: str = "One multi-row INSERT ... VALUES statement per chunk."

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._statements: Dict[int, str] = {}

    def _statement(self, rows: int) -> str:
        sql = self._statements.get(rows)
        if sql is None:
            sql = INSERT_PREFIX + ", ".join([ROW_PLACEHOLDER] * rows)
            self._statements[rows] = sql
        return sql

    def _flush_chunk(self, cur: Cursor, chunk: Sequence[Record]) -> int:
        inserted = 0
        for part in iter_chunks(chunk, MAX_ROWS_PER_STATEMENT):
            params: List[object] = []
            for record in part:
                params.extend(record.as_params())
            cur.execute(self._statement(len(part)), params)
            inserted += acknowledged_rows(cur.rowcount, len(part))
        return inserted


__all__ = ["MultiRowBatchStrategy", "MAX_ROWS_PER_STATEMENT"]
