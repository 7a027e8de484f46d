"""
Single-row strategy: one INSERT statement per record on a dedicated connection.

Every statement is a separate round trip, but all of them run in one
transaction per call so the comparison with the batch strategies measures
statement overhead rather than commit overhead.
"""

from __future__ import annotations

import time
from typing import Optional, Sequence

from insert_bench.domain.models import Record
from insert_bench.strategies.abstract import (
    INSERT_SQL,
    AbstractInsertStrategy,
    acknowledged_rows,
)
from insert_bench.utils.logging import get_logger

log = get_logger(__name__)

PROGRESS_LOG_INTERVAL = 1000


class SingleRowInsertStrategy(AbstractInsertStrategy):
    """
    Row-at-a-time baseline.
    """

    name: str = "single_insert"
    label: str = "Single-Insert"
    description: str = "cursor.execute per row on one connection, single transaction per call."

    def insert_single(self, records: Optional[Sequence[Record]]) -> int:
        records = self._require_records(records)
        if not records:
            log.debug("Empty record list, nothing to insert", extra={"strategy": self.label})
            return 0

        log.info(
            f"Starting single insert: {self.label}",
            extra={"strategy": self.label, "records": len(records)},
        )
        start = time.perf_counter()
        total_inserted = 0

        with self._transaction("insert_single") as cur:
            for index, record in enumerate(records, start=1):
                cur.execute(INSERT_SQL, record.as_params())
                total_inserted += acknowledged_rows(cur.rowcount, 1)
                if index % PROGRESS_LOG_INTERVAL == 0:
                    log.debug(
                        "Single insert progress",
                        extra={"strategy": self.label, "processed": index},
                    )

        log.info(
            f"Single insert completed: {self.label}",
            extra={
                "strategy": self.label,
                "inserted": total_inserted,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return total_inserted


__all__ = ["SingleRowInsertStrategy"]
