"""Shared test helpers for schemaport tests."""

from typing import Optional
from unittest.mock import MagicMock

from schemaport.config import Config
from schemaport.schema.loader import FactsSnapshot, TableFacts
from schemaport.schema.models import ColumnFact, ConstraintFact, IndexFact


class FakeRow:
    """Mock row from DatabricksClient.fetchall().

    Supports dict-like access via __getitem__, .get(), and .asDict().
    """

    def __init__(self, data: dict):
        self._data = data

    def __getitem__(self, key):
        return self._data[key]

    def get(self, key, default=None):
        return self._data.get(key, default)

    def asDict(self):
        return self._data


def make_test_config(
    catalog: str = "test_catalog",
    schema: str = "test_schema",
    **kwargs,
) -> Config:
    """Create a Config for tests with sensible defaults."""
    return Config(catalog=catalog, schema=schema, **kwargs)


def make_mock_client(
    tables_data: list[dict] | None = None,
    columns_data: dict[str, list[dict]] | None = None,
    pk_constraints_data: dict[str, list[dict]] | None = None,
    check_constraints_data: dict[str, list[dict]] | None = None,
) -> MagicMock:
    """Create a mock DatabricksClient with information_schema data.

    Args:
        tables_data: List of table metadata dicts
        columns_data: Dict mapping table_name -> list of column dicts
        pk_constraints_data: Dict mapping table_name -> list of PK column dicts
        check_constraints_data: Dict mapping table_name -> list of CHECK constraint dicts
    """
    client = MagicMock()
    columns_data = columns_data or {}
    pk_constraints_data = pk_constraints_data or {}
    check_constraints_data = check_constraints_data or {}

    def rows_for(data: dict[str, list[dict]], sql_lower: str) -> list[FakeRow]:
        for table_name, rows in data.items():
            if f"'{table_name}'" in sql_lower:
                return [FakeRow(r) for r in rows]
        return []

    def fetchall_side_effect(sql: str):
        sql_lower = sql.lower()

        if "constraint_column_usage" in sql_lower:
            return rows_for(pk_constraints_data, sql_lower)

        if "check_constraints" in sql_lower:
            return rows_for(check_constraints_data, sql_lower)

        if "information_schema.columns" in sql_lower:
            return rows_for(columns_data, sql_lower)

        if "information_schema.tables" in sql_lower:
            return [FakeRow(t) for t in (tables_data or [])]

        return []

    client.fetchall.side_effect = fetchall_side_effect
    return client


def make_snapshot(
    tables: dict[str, list[ColumnFact]],
    *,
    engine: str = "generic",
    indexes: Optional[dict[str, Optional[list[IndexFact]]]] = None,
    constraints: Optional[dict[str, list[ConstraintFact]]] = None,
) -> FactsSnapshot:
    """Build an in-memory facts source.

    A table mapped to None in indexes has no index listing capability.
    """
    indexes = indexes or {}
    constraints = constraints or {}
    return FactsSnapshot(
        engine=engine,
        table_facts={
            name: TableFacts(
                name=name,
                columns=columns,
                indexes=indexes.get(name, []),
                constraints=constraints.get(name, []),
            )
            for name, columns in tables.items()
        },
    )
