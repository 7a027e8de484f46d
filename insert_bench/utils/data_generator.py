"""
Synthetic record generation for insert benchmarks.

Each generator carries its own `random.Random`, so a seeded generator is fully
reproducible: the same seed and count always yield the same field values.
All records produced by one `generate` call share a single creation
timestamp.
"""

from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from insert_bench.domain.models import Record, RecordStatus
from insert_bench.exceptions import InvalidInputError
from insert_bench.utils.logging import get_logger

log = get_logger(__name__)

DATA1_LENGTH = 50
DATA2_LENGTH = 100
MAX_AMOUNT = 1_000_000.0
CHARACTERS = string.ascii_uppercase + string.ascii_lowercase + string.digits
STATUSES = tuple(RecordStatus)

_CENT = Decimal("0.01")
_AMOUNT_CEILING = Decimal("999999.99")


class RecordGenerator:
    """
    Produce fresh `Record` batches.

    Parameters
    ----------
    seed : int, optional
        Seed for the private random source. When omitted the source is seeded
        from system entropy and output is not reproducible.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._random = random.Random(seed)
        if seed is not None:
            log.debug("RecordGenerator initialized with seed", extra={"seed": seed})

    def generate(self, count: int) -> List[Record]:
        if count < 0:
            raise InvalidInputError(f"count must be non-negative, but was: {count}")

        start = time.perf_counter()
        created_at = datetime.now(timezone.utc)
        records = [self._generate_record(created_at) for _ in range(count)]
        log.debug(
            f"Generated {count} records",
            extra={"records": count, "duration_ms": (time.perf_counter() - start) * 1000},
        )
        return records

    def _generate_record(self, created_at: datetime) -> Record:
        return Record(
            data1=self._random_string(DATA1_LENGTH),
            data2=self._random_string(DATA2_LENGTH) if self._random.random() < 0.5 else None,
            amount=self._random_amount(),
            status=self._random.choice(STATUSES),
            created_at=created_at,
        )

    def _random_string(self, length: int) -> str:
        return "".join(self._random.choices(CHARACTERS, k=length))

    def _random_amount(self) -> Decimal:
        value = Decimal(repr(self._random.random() * MAX_AMOUNT))
        return min(value.quantize(_CENT, rounding=ROUND_HALF_UP), _AMOUNT_CEILING)


def generate_with_seed(count: int, seed: int) -> List[Record]:
    """Generate `count` records from a fresh generator seeded with `seed`."""
    return RecordGenerator(seed).generate(count)


def generate_default(count: int) -> List[Record]:
    """Generate `count` non-reproducible records."""
    return RecordGenerator().generate(count)


__all__ = ["RecordGenerator", "generate_with_seed", "generate_default"]
