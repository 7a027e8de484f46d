from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from insert_bench.domain.models import Record, RecordStatus

CREATED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_status_defaults_to_active_when_unset_or_none():
    assert Record(data1="a", created_at=CREATED_AT).status is RecordStatus.ACTIVE
    assert Record(data1="a", status=None, created_at=CREATED_AT).status is RecordStatus.ACTIVE


def test_status_accepts_enum_value_strings():
    record = Record(data1="a", status="PENDING", created_at=CREATED_AT)
    assert record.status is RecordStatus.PENDING


@pytest.mark.parametrize("missing", ["data1", "created_at"])
def test_required_fields(missing):
    values = {"data1": "a", "created_at": CREATED_AT}
    del values[missing]
    with pytest.raises(ValidationError):
        Record(**values)


def test_record_is_immutable():
    record = Record(data1="a", created_at=CREATED_AT)
    with pytest.raises(ValidationError):
        record.data1 = "b"


def test_with_id_returns_copy_and_leaves_original_untouched():
    original = Record(
        data1="a", data2="b", amount=Decimal("1.50"), status="COMPLETED", created_at=CREATED_AT
    )
    derived = original.with_id(42)

    assert derived.id == 42
    assert original.id is None
    assert derived.model_dump(exclude={"id"}) == original.model_dump(exclude={"id"})
    assert derived != original


def test_as_params_follows_insert_column_order():
    record = Record(data1="a", amount=Decimal("2.00"), created_at=CREATED_AT)
    assert record.as_params() == ("a", None, Decimal("2.00"), "ACTIVE", CREATED_AT)
