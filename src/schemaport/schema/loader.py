"""Load schema facts snapshots from YAML files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from schemaport.exceptions import SchemaLoadError, UnsupportedIntrospectionError
from schemaport.schema.models import ColumnFact, ConstraintFact, IndexFact
from schemaport.types import ConstraintKind

VALID_SNAPSHOT_FIELDS = {"engine", "tables"}

VALID_TABLE_FIELDS = {"table", "columns", "indexes", "constraints", "comment"}

VALID_COLUMN_FIELDS = {
    "name",
    "type",
    "default",
    "nullable",
    "primary_key",
    "auto_increment",
}

VALID_INDEX_FIELDS = {"name", "columns", "unique"}

VALID_CONSTRAINT_FIELDS = {"kind", "name", "columns", "conditions", "options"}

UNSUPPORTED = "unsupported"


@dataclass
class TableFacts:
    """Facts for one table. indexes is None when the engine can't list them."""

    name: str
    columns: list[ColumnFact]
    indexes: Optional[list[IndexFact]] = field(default_factory=list)
    constraints: list[ConstraintFact] = field(default_factory=list)


@dataclass
class FactsSnapshot:
    """In-memory schema facts, usable wherever a SchemaSource is expected."""

    engine: str
    table_facts: dict[str, TableFacts]

    def tables(self) -> list[str]:
        return list(self.table_facts)

    def _get(self, table: str) -> TableFacts:
        try:
            return self.table_facts[table]
        except KeyError:
            raise SchemaLoadError(f"Unknown table '{table}'") from None

    def schema(self, table: str) -> list[ColumnFact]:
        return list(self._get(table).columns)

    def indexes(self, table: str) -> list[IndexFact]:
        facts = self._get(table)
        if facts.indexes is None:
            raise UnsupportedIntrospectionError(f"Index listing unsupported for '{table}'")
        return list(facts.indexes)

    def constraints(self, table: str) -> list[ConstraintFact]:
        return list(self._get(table).constraints)


def load_facts(path: Path) -> FactsSnapshot:
    """Load a facts snapshot from a YAML file."""
    if not path.is_file():
        raise SchemaLoadError(f"Facts file does not exist: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise SchemaLoadError(f"Empty YAML file: {path}")
    return parse_facts(data)


def parse_facts(data: dict) -> FactsSnapshot:
    """Parse a facts snapshot from a dictionary."""
    if not isinstance(data, dict):
        raise SchemaLoadError("Facts snapshot must be a mapping")
    _check_fields(data, VALID_SNAPSHOT_FIELDS, "snapshot")

    tables: dict[str, TableFacts] = {}
    for table_data in _as_list(data.get("tables"), "tables"):
        table = _parse_table(table_data)
        if table.name in tables:
            raise SchemaLoadError(f"Duplicate table name '{table.name}' in snapshot")
        tables[table.name] = table

    return FactsSnapshot(engine=str(data.get("engine") or "generic"), table_facts=tables)


def _as_list(value: Any, what: str) -> list:
    """Return a YAML sequence field as a list; absent means empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise SchemaLoadError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _check_fields(data: Any, valid: set[str], what: str) -> None:
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Each {what} definition must be a mapping, got {data!r}")
    unknown_fields = set(data.keys()) - valid
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in {what} definition: {', '.join(sorted(unknown_fields))}"
        )


def _parse_table(data: dict) -> TableFacts:
    _check_fields(data, VALID_TABLE_FIELDS, "table")

    name = data.get("table")
    if not name:
        raise SchemaLoadError("Table definition missing 'table' field")

    columns = [
        _parse_column(col)
        for col in _as_list(data.get("columns"), f"Columns of table '{name}'")
    ]
    seen = set()
    for col in columns:
        if col.name in seen:
            raise SchemaLoadError(f"Duplicate column name '{col.name}' in table '{name}'")
        seen.add(col.name)

    raw_indexes = data.get("indexes", [])
    indexes: Optional[list[IndexFact]]
    if raw_indexes == UNSUPPORTED:
        indexes = None
    else:
        indexes = [
            _parse_index(name, idx)
            for idx in _as_list(raw_indexes, f"Indexes of table '{name}'")
        ]

    constraints = [
        _parse_constraint(name, c)
        for c in _as_list(data.get("constraints"), f"Constraints of table '{name}'")
    ]

    return TableFacts(name=name, columns=columns, indexes=indexes, constraints=constraints)


def _parse_column(data: dict) -> ColumnFact:
    _check_fields(data, VALID_COLUMN_FIELDS, "column")

    name = data.get("name")
    if not name:
        raise SchemaLoadError("Column definition missing 'name' field")

    col_type = data.get("type")
    if not col_type:
        raise SchemaLoadError(f"Column '{name}' missing 'type' field")

    default = data.get("default")
    return ColumnFact(
        name=name,
        db_type=str(col_type),
        default=None if default is None else str(default),
        nullable=data.get("nullable", True),
        primary_key=bool(data.get("primary_key", False)),
        auto_increment=bool(data.get("auto_increment", False)),
    )


def _parse_index(table: str, data: dict) -> IndexFact:
    _check_fields(data, VALID_INDEX_FIELDS, "index")

    name = data.get("name")
    if not name:
        raise SchemaLoadError(f"Index on table '{table}' missing 'name' field")
    columns = _as_list(data.get("columns"), f"Columns of index '{name}'")
    if not columns:
        raise SchemaLoadError(f"Index '{name}' on table '{table}' has no columns")

    return IndexFact(name=name, columns=tuple(columns), unique=bool(data.get("unique", False)))


def _parse_constraint(table: str, data: dict) -> ConstraintFact:
    _check_fields(data, VALID_CONSTRAINT_FIELDS, "constraint")

    kind_value = data.get("kind")
    try:
        kind = ConstraintKind(kind_value)
    except ValueError:
        raise SchemaLoadError(
            f"Constraint on table '{table}' has unknown kind {kind_value!r}"
        ) from None

    options: Any = data.get("options") or {}
    if not isinstance(options, dict):
        raise SchemaLoadError(f"Constraint options on table '{table}' must be a mapping")

    return ConstraintFact(
        kind=kind,
        name=data.get("name"),
        columns=tuple(_as_list(data.get("columns"), f"Constraint columns on table '{table}'")),
        conditions=tuple(
            _as_list(data.get("conditions"), f"Constraint conditions on table '{table}'")
        ),
        options=options,
    )
