"""Render schema descriptions as migration source."""

import keyword
import logging
import math
import textwrap
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from schemaport.exceptions import CodegenError, NonStaticConstraintError
from schemaport.schema.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    IndexDescriptor,
    MigrationDescription,
    PortableType,
    PortableValue,
    TableSchemaDescription,
)
from schemaport.types import ConstraintKind, IndexRenderMode, ValueKind

__all__ = [
    "GeneratorState",
    "SchemaGenerator",
    "check_static_conditions",
    "format_literal",
    "format_options",
    "format_value",
    "render_migration",
]

logger = logging.getLogger(__name__)

INDENT = "    "


def _format_float(value: float) -> str:
    if math.isfinite(value):
        return repr(value)
    return f"float({str(value)!r})"


_VALUE_FORMATTERS: dict[ValueKind, Callable[[Any], str]] = {
    ValueKind.NONE: lambda v: "None",
    ValueKind.BOOL: repr,
    ValueKind.INT: repr,
    ValueKind.FLOAT: _format_float,
    ValueKind.STRING: repr,
    ValueKind.DECIMAL: lambda d: f"Decimal({str(d)!r})",
    ValueKind.DATE: lambda d: f"date.fromisoformat({d.isoformat()!r})",
    ValueKind.DATETIME: lambda d: f"datetime.fromisoformat({d.isoformat()!r})",
    ValueKind.TIME: lambda t: f"time.fromisoformat({t.isoformat()!r})",
    ValueKind.BLOB: lambda b: f"bytes.fromhex({b.hex()!r})",
    ValueKind.RAW: lambda s: f"lit({s!r})",
}


def format_value(value: PortableValue) -> str:
    """Render a portable value as an expression the migration can evaluate."""
    return _VALUE_FORMATTERS[value.kind](value.value)


def format_literal(obj: Any) -> str:
    """Render a plain value, container or portable type/value."""
    if isinstance(obj, PortableType):
        return repr(obj.raw) if obj.is_raw else obj.kind.value
    if isinstance(obj, list):
        return "[" + ", ".join(format_literal(x) for x in obj) + "]"
    if isinstance(obj, tuple):
        items = [format_literal(x) for x in obj]
        if len(items) == 1:
            return f"({items[0]},)"
        return "(" + ", ".join(items) + ")"
    if isinstance(obj, Mapping):
        pairs = (f"{format_literal(k)}: {format_literal(v)}" for k, v in obj.items())
        return "{" + ", ".join(pairs) + "}"
    try:
        return format_value(PortableValue.of(obj))
    except TypeError as e:
        raise CodegenError(f"Cannot render {obj!r} as a static value") from e


def _is_keyword_arg(name: Any) -> bool:
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def format_options(opts: Mapping[str, Any]) -> str:
    """Render keyword options as a ", key=value" suffix.

    default always comes first; the rest keep their insertion order.
    """
    if not opts:
        return ""
    ordered = dict(opts)
    parts = []
    if "default" in ordered:
        parts.append(f"default={format_literal(ordered.pop('default'))}")
    for key, value in ordered.items():
        if not _is_keyword_arg(key):
            raise CodegenError(f"Option name {key!r} is not a valid keyword")
        parts.append(f"{key}={format_literal(value)}")
    return ", " + ", ".join(parts)


def check_static_conditions(table: str, constraint: ConstraintDescriptor) -> None:
    """Ensure every check condition is a SQL string or a column mapping.

    Raises:
        NonStaticConstraintError: If a condition is anything else (e.g. a
            callable), since it can't be written out as data.
    """
    for condition in constraint.conditions:
        if not isinstance(condition, (str, Mapping)):
            label = repr(constraint.name) if constraint.name else "(unnamed)"
            raise NonStaticConstraintError(
                table,
                constraint.name,
                f"Cannot dump check constraint {label} on table '{table}': "
                f"condition is {type(condition).__name__}, not a static expression",
            )


def _indent(body: str) -> str:
    return textwrap.indent(body or "pass", INDENT)


class GeneratorState(Enum):
    """Lifecycle of a SchemaGenerator."""

    PENDING = "pending"
    RENDERED = "rendered"
    ERROR = "error"


class SchemaGenerator:
    """Render one table's description as create_table / index statements."""

    def __init__(self, table: TableSchemaDescription) -> None:
        self.table = table
        self.state = GeneratorState.PENDING

    def dump_columns(self) -> str:
        """Primary key slot first, then the other columns in catalog order."""
        lines = []
        columns = self.table.columns
        pk = self.table.primary_key
        if pk is not None:
            columns = [c for c in columns if c.name != pk.name]
            opts = {"type": pk.type} if pk.type is not None else {}
            lines.append(f"t.primary_key({pk.name!r}{format_options(opts)})")
        lines.extend(self._dump_column(col) for col in columns)
        return "\n".join(lines)

    def _dump_column(self, col: ColumnDescriptor) -> str:
        opts: dict[str, Any] = {}
        if col.default is not None:
            opts["default"] = col.default
        opts.update(col.type.modifiers())
        if not col.nullable:
            opts["null"] = False

        if col.type.is_raw:
            return f"t.column({col.name!r}, {col.type.raw!r}{format_options(opts)})"
        return f"t.{col.type.kind.value}({col.name!r}{format_options(opts)})"

    def dump_constraints(self) -> str:
        lines = []
        if self.table.composite_primary_key:
            lines.append(
                f"t.primary_key({format_literal(list(self.table.composite_primary_key))})"
            )
        lines.extend(self._dump_constraint(c) for c in self.table.constraints)
        return "\n".join(lines)

    def _dump_constraint(self, constraint: ConstraintDescriptor) -> str:
        if constraint.kind is ConstraintKind.CHECK:
            return self._dump_check(constraint)

        opts: dict[str, Any] = {}
        if constraint.name:
            opts["name"] = constraint.name
        for key, value in constraint.options.items():
            if key != "name":
                opts[key] = value
        columns = format_literal(list(constraint.columns))
        return f"t.{constraint.kind.value}({columns}{format_options(opts)})"

    def _dump_check(self, constraint: ConstraintDescriptor) -> str:
        check_static_conditions(self.table.name, constraint)
        conditions = constraint.conditions

        if constraint.name is None and len(conditions) == 1 and isinstance(
            conditions[0], Mapping
        ):
            return f"t.check({self._check_shorthand(conditions[0])})"

        args = ", ".join(format_literal(c) for c in conditions)
        if constraint.name:
            return f"t.constraint({constraint.name!r}, {args})"
        return f"t.check({args})"

    def _check_shorthand(self, condition: Mapping) -> str:
        if condition and all(_is_keyword_arg(k) for k in condition):
            return ", ".join(f"{k}={format_literal(v)}" for k, v in condition.items())
        return format_literal(condition)

    def dump_indexes(
        self,
        mode: IndexRenderMode = IndexRenderMode.GENERIC,
        ignore_errors: bool = False,
    ) -> str:
        """Render index declarations.

        GENERIC emits t.index(...) for use inside create_table. ADD and DROP
        emit db.add_index/db.drop_index calls that stand on their own in a
        migration; ignore_errors is only attached in those modes.
        """
        return "\n".join(self._dump_index(idx, mode, ignore_errors) for idx in self.table.indexes)

    def _dump_index(
        self, index: IndexDescriptor, mode: IndexRenderMode, ignore_errors: bool
    ) -> str:
        opts: dict[str, Any] = {}
        if index.name:
            opts["name"] = index.name
        if index.unique:
            opts["unique"] = True
        columns = format_literal(list(index.columns))

        if mode is IndexRenderMode.GENERIC:
            return f"t.index({columns}{format_options(opts)})"

        flag = ", ignore_errors=True" if ignore_errors else ""
        return f"db.{mode.value}({self.table.name!r}, {columns}{flag}{format_options(opts)})"

    def render(self) -> str:
        """Render the create_table block for this table.

        Raises:
            CodegenError: If any part can't be rendered; the generator is left
                in the ERROR state.
        """
        try:
            sections = [self.dump_columns(), self.dump_constraints(), self.dump_indexes()]
        except CodegenError:
            self.state = GeneratorState.ERROR
            raise

        body = "\n\n".join(s for s in sections if s)
        opts = {"ignore_index_errors": True} if self.table.ignore_index_errors else {}
        self.state = GeneratorState.RENDERED
        return f"with db.create_table({self.table.name!r}{format_options(opts)}) as t:\n" + _indent(body)


def _join_blocks(blocks: list[str]) -> str:
    return "\n\n".join(b for b in blocks if b)


def render_migration(migration: MigrationDescription, description: Optional[str] = None) -> str:
    """Render a migration description as up/down functions.

    Args:
        migration: Output of the assembler
        description: Optional text for a leading comment

    Returns:
        Migration source text
    """
    generators = [SchemaGenerator(table) for table in migration.up]

    if migration.indexes_only:
        ignore = migration.ignore_index_errors
        up = _join_blocks([g.dump_indexes(IndexRenderMode.ADD, ignore) for g in generators])
        down = _join_blocks([g.dump_indexes(IndexRenderMode.DROP, ignore) for g in generators])
    else:
        up = _join_blocks([g.render() for g in generators])
        down = ""
        if migration.down:
            down = f"db.drop_table({', '.join(repr(name) for name in migration.down)})"

    logger.debug(f"Rendered migration for {len(generators)} table(s)")

    header = f"# Description: {description}\n\n" if description else ""
    return f"{header}def up(db):\n{_indent(up)}\n\n\ndef down(db):\n{_indent(down)}\n"
