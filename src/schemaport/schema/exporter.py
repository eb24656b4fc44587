"""Export migration descriptions as plain data / YAML."""

from typing import Any, Mapping

import yaml

from schemaport.exceptions import CodegenError
from schemaport.schema.codegen import check_static_conditions
from schemaport.schema.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    IndexDescriptor,
    MigrationDescription,
    PortableType,
    PortableValue,
    TableSchemaDescription,
)
from schemaport.types import ConstraintKind, ValueKind


def _plain(obj: Any) -> Any:
    """Reduce tuples and mappings to YAML-safe lists and dicts.

    Raises:
        CodegenError: If a value has no static data form.
    """
    if isinstance(obj, (list, tuple)):
        return [_plain(x) for x in obj]
    if isinstance(obj, Mapping):
        return {str(k): _plain(v) for k, v in obj.items()}
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    try:
        return value_to_dict(PortableValue.of(obj))
    except TypeError as e:
        raise CodegenError(f"Cannot export {obj!r} as a static value") from e


def type_to_dict(ptype: PortableType) -> dict[str, Any]:
    if ptype.is_raw:
        return {"raw": ptype.raw}
    data: dict[str, Any] = {"name": ptype.kind.value}
    data.update(_plain(ptype.modifiers()))
    return data


def value_to_dict(value: PortableValue) -> dict[str, Any]:
    """Convert a default value to {kind, value}, with text forms for non-scalars."""
    raw = value.value
    if value.kind in (ValueKind.DATE, ValueKind.DATETIME, ValueKind.TIME):
        raw = raw.isoformat()
    elif value.kind is ValueKind.DECIMAL:
        raw = str(raw)
    elif value.kind is ValueKind.BLOB:
        raw = raw.hex()
    return {"kind": value.kind.value, "value": raw}


def _column_to_dict(col: ColumnDescriptor) -> dict[str, Any]:
    data: dict[str, Any] = {"name": col.name, "type": type_to_dict(col.type)}

    if col.default is not None:
        data["default"] = value_to_dict(col.default)

    if not col.nullable:
        data["nullable"] = False

    return data


def _constraint_to_dict(table: str, constraint: ConstraintDescriptor) -> dict[str, Any]:
    if constraint.kind is ConstraintKind.CHECK:
        check_static_conditions(table, constraint)

    data: dict[str, Any] = {"kind": constraint.kind.value}
    if constraint.name:
        data["name"] = constraint.name
    if constraint.columns:
        data["columns"] = list(constraint.columns)
    if constraint.conditions:
        data["conditions"] = _plain(constraint.conditions)
    if constraint.options:
        data["options"] = _plain(dict(constraint.options))
    return data


def _index_to_dict(index: IndexDescriptor) -> dict[str, Any]:
    data: dict[str, Any] = {"columns": list(index.columns)}
    if index.name:
        data["name"] = index.name
    if index.unique:
        data["unique"] = True
    return data


def table_to_dict(table: TableSchemaDescription) -> dict[str, Any]:
    """Convert a table description to a dictionary suitable for YAML export."""
    data: dict[str, Any] = {"table": table.name}

    if table.primary_key is not None:
        pk: dict[str, Any] = {"name": table.primary_key.name}
        if table.primary_key.type is not None:
            pk["type"] = type_to_dict(table.primary_key.type)
        data["primary_key"] = pk

    if table.columns:
        data["columns"] = [_column_to_dict(c) for c in table.columns]

    if table.composite_primary_key:
        data["composite_primary_key"] = list(table.composite_primary_key)

    if table.constraints:
        data["constraints"] = [_constraint_to_dict(table.name, c) for c in table.constraints]

    if table.indexes:
        data["indexes"] = [_index_to_dict(i) for i in table.indexes]

    if table.ignore_index_errors:
        data["ignore_index_errors"] = True

    return data


def migration_to_dict(migration: MigrationDescription) -> dict[str, Any]:
    """Convert a migration description to {up, down} plain data."""
    if migration.indexes_only:
        up = [
            {"table": t.name, "indexes": [_index_to_dict(i) for i in t.indexes]}
            for t in migration.up
            if t.indexes
        ]
        data: dict[str, Any] = {"kind": "indexes", "up": up, "down": list(migration.down)}
        if migration.ignore_index_errors:
            data["ignore_errors"] = True
        return data

    return {
        "kind": "schema",
        "up": [table_to_dict(t) for t in migration.up],
        "down": list(migration.down),
    }


def export_migration_yaml(migration: MigrationDescription) -> str:
    """Export a migration description to a YAML string."""
    return yaml.dump(
        migration_to_dict(migration),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
