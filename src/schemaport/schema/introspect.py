"""Schema facts sources: the protocol the assembler reads from, and an
information_schema-backed implementation for Unity Catalog."""

from typing import Any, Protocol

from schemaport.exceptions import IntrospectionError, UnsupportedIntrospectionError
from schemaport.schema.models import ColumnFact, ConstraintFact, IndexFact
from schemaport.types import ConstraintKind


class SchemaSource(Protocol):
    """Raw schema facts for one database.

    indexes() and constraints() raise UnsupportedIntrospectionError when the
    engine can't list them.
    """

    engine: str

    def tables(self) -> list[str]: ...

    def schema(self, table: str) -> list[ColumnFact]: ...

    def indexes(self, table: str) -> list[IndexFact]: ...

    def constraints(self, table: str) -> list[ConstraintFact]: ...


class SQLClient(Protocol):
    """Protocol for SQL client used by the introspector."""

    def fetchall(self, sql: str) -> list: ...


def _row_get(row: Any, key: str, default: Any = None) -> Any:
    """Get a value from a row, supporting dict-like and pyspark Row."""
    if hasattr(row, "get"):
        return row.get(key, default)
    if hasattr(row, "asDict"):
        return row.asDict().get(key, default)
    try:
        return row[key]
    except (KeyError, IndexError, TypeError):
        return default


def _is_yes(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().upper() in ("YES", "TRUE", "ALWAYS", "BY DEFAULT")


class InformationSchemaSource:
    """Read schema facts from a Unity Catalog schema's information_schema.

    Delta tables have no secondary indexes, so indexes() always reports the
    capability as missing.
    """

    engine = "databricks"

    VALID_TABLE_TYPES = {"MANAGED", "EXTERNAL"}

    def __init__(self, client: SQLClient, catalog: str, schema: str) -> None:
        self._client = client
        self._catalog = catalog
        self._schema = schema

    def _fetch(self, sql: str) -> list:
        try:
            return self._client.fetchall(sql)
        except Exception as e:
            raise IntrospectionError(f"Catalog query failed: {e}") from e

    def tables(self) -> list[str]:
        """List base tables in the schema (views and other objects are skipped)."""
        sql = f"""
            SELECT table_name, table_type
            FROM {self._catalog}.information_schema.tables
            WHERE table_schema = '{self._schema}'
        """
        names = []
        for row in self._fetch(sql):
            table_type = (_row_get(row, "table_type") or "").upper()
            if table_type in self.VALID_TABLE_TYPES:
                names.append(_row_get(row, "table_name"))
        return names

    def schema(self, table: str) -> list[ColumnFact]:
        """Columns in ordinal order, with primary key membership resolved."""
        sql = f"""
            SELECT column_name, full_data_type, data_type, is_nullable,
                   column_default, is_identity
            FROM {self._catalog}.information_schema.columns
            WHERE table_schema = '{self._schema}'
              AND table_name = '{table}'
            ORDER BY ordinal_position
        """
        rows = self._fetch(sql)
        pk_columns = set(self._primary_key_columns(table))

        columns = []
        for row in rows:
            name = _row_get(row, "column_name")
            db_type = _row_get(row, "full_data_type") or _row_get(row, "data_type")
            columns.append(
                ColumnFact(
                    name=name,
                    db_type=db_type,
                    default=_row_get(row, "column_default"),
                    nullable=_row_get(row, "is_nullable") != "NO",
                    primary_key=name in pk_columns,
                    auto_increment=_is_yes(_row_get(row, "is_identity")),
                )
            )
        return columns

    def _primary_key_columns(self, table: str) -> list[str]:
        sql = f"""
            SELECT ccu.column_name
            FROM {self._catalog}.information_schema.table_constraints tc
            JOIN {self._catalog}.information_schema.constraint_column_usage ccu
              ON tc.constraint_name = ccu.constraint_name
            WHERE tc.table_schema = '{self._schema}'
              AND tc.table_name = '{table}'
              AND tc.constraint_type = 'PRIMARY KEY'
        """
        return [_row_get(row, "column_name") for row in self._fetch(sql)]

    def indexes(self, table: str) -> list[IndexFact]:
        raise UnsupportedIntrospectionError("Delta tables have no secondary indexes")

    def constraints(self, table: str) -> list[ConstraintFact]:
        """CHECK constraints of the table."""
        sql = f"""
            SELECT tc.constraint_name, cc.check_clause
            FROM {self._catalog}.information_schema.table_constraints tc
            JOIN {self._catalog}.information_schema.check_constraints cc
              ON tc.constraint_name = cc.constraint_name
            WHERE tc.table_schema = '{self._schema}'
              AND tc.table_name = '{table}'
              AND tc.constraint_type = 'CHECK'
        """
        return [
            ConstraintFact(
                kind=ConstraintKind.CHECK,
                name=_row_get(row, "constraint_name"),
                conditions=(_row_get(row, "check_clause"),),
            )
            for row in self._fetch(sql)
        ]
