from __future__ import annotations

import pytest

from logictest.conditions import should_execute_for_engine
from logictest.domain.models import Condition, Record, RecordType


def _only(engine: str) -> Condition:
    return Condition(is_only=True, engine=engine)


def _skip(engine: str) -> Condition:
    return Condition(is_skip=True, engine=engine)


@pytest.mark.parametrize(
    ("conditions", "engine", "expected"),
    [
        ((), "mysql", True),
        ((_only("mysql"),), "mysql", True),
        ((_only("mysql"),), "postgresql", False),
        ((_skip("mysql"),), "mysql", False),
        ((_skip("mysql"),), "sqlite", True),
        # a lone onlyif is the only case where onlyif counts
        ((_only("mysql"), _skip("oracle")), "mysql", True),
        ((_only("mysql"), _skip("oracle")), "sqlite", True),
        ((_only("mysql"), _skip("oracle")), "oracle", False),
        ((_only("mysql"), _only("mssql")), "sqlite", True),
        ((_skip("mysql"), _skip("mssql"), _skip("oracle")), "mssql", False),
        ((_skip("mysql"), _skip("mssql"), _skip("oracle")), "sqlite", True),
    ],
)
def test_should_execute_for_engine(conditions, engine, expected) -> None:
    assert should_execute_for_engine(conditions, engine) is expected


def test_record_delegates_to_condition_rules() -> None:
    record = Record(
        record_type=RecordType.STATEMENT,
        query="SELECT 1",
        conditions=(_only("postgresql"),),
        hash_threshold=8,
    )

    assert record.should_execute_for_engine("postgresql")
    assert not record.should_execute_for_engine("sqlite")
