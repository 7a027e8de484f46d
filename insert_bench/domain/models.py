"""
Domain models for the Insert Throughput Benchmark.

Defines the record inserted by every strategy, aligned with `db/init.sql`.
Records are immutable; `with_id` derives a copy carrying the identity the
store assigned.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class RecordStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class Record(BaseModel):
    """
    Representation of a single row in the `test_record` table.
    """

    id: Optional[int] = Field(None, description="Identity assigned by the store.")
    data1: str = Field(..., description="Required primary text field.")
    data2: Optional[str] = Field(None, description="Optional secondary text field.")
    amount: Optional[Decimal] = Field(None, description="Optional decimal amount.")
    status: RecordStatus = Field(RecordStatus.ACTIVE, description="Record status.")
    created_at: datetime = Field(..., description="Row creation timestamp.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        return RecordStatus.ACTIVE if value is None else value

    def with_id(self, new_id: Optional[int]) -> "Record":
        """Return a copy of this record carrying `new_id`."""
        return self.model_copy(update={"id": new_id})

    def as_params(self) -> Tuple[Any, ...]:
        """Bind parameters in `INSERT_COLUMNS` order."""
        return (self.data1, self.data2, self.amount, self.status.value, self.created_at)


__all__ = ["Record", "RecordStatus"]
