"""Schema representation classes."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from schemaport.types import ConstraintKind, TypeKind, ValueKind

Size = Union[int, tuple[int, ...]]


@dataclass(frozen=True)
class ColumnFact:
    """Column as reported by the catalog layer.

    nullable is None when the catalog doesn't say; only an explicit False
    makes it into the rendered description.
    """

    name: str
    db_type: str
    default: Optional[str] = None
    nullable: Optional[bool] = True
    primary_key: bool = False
    auto_increment: bool = False


@dataclass(frozen=True)
class IndexFact:
    """Index as reported by the catalog layer."""

    name: str
    columns: tuple[str, ...]
    unique: bool = False


@dataclass(frozen=True)
class ConstraintFact:
    """Table-level constraint as reported by the catalog layer.

    Check constraints carry their predicates in conditions: SQL expression
    strings or column-to-value mappings. Other kinds use columns, with any
    extra target-format arguments (e.g. a foreign key's referenced table) in
    options.
    """

    kind: ConstraintKind
    name: Optional[str] = None
    columns: tuple[str, ...] = ()
    conditions: tuple[Any, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PortableType:
    """Engine-independent column type plus its modifiers."""

    kind: TypeKind
    size: Optional[Size] = None
    fixed: bool = False
    text: bool = False
    only_time: bool = False
    raw: Optional[str] = None

    @classmethod
    def raw_vendor(cls, db_type: str) -> "PortableType":
        """Carry a vendor type string through untranslated."""
        return cls(kind=TypeKind.RAW, raw=db_type)

    @property
    def is_raw(self) -> bool:
        return self.kind is TypeKind.RAW

    def modifiers(self) -> dict[str, Any]:
        """Return the type modifiers that are set, in rendering order."""
        mods: dict[str, Any] = {}
        if self.size is not None:
            mods["size"] = self.size
        if self.fixed:
            mods["fixed"] = True
        if self.text:
            mods["text"] = True
        if self.only_time:
            mods["only_time"] = True
        return mods


@dataclass(frozen=True)
class PortableValue:
    """Tagged default value. RAW carries a literal to be replayed verbatim."""

    kind: ValueKind
    value: Any = None

    @property
    def is_none(self) -> bool:
        return self.kind is ValueKind.NONE

    @classmethod
    def raw(cls, literal: str) -> "PortableValue":
        return cls(ValueKind.RAW, literal)

    @classmethod
    def of(cls, obj: Any) -> "PortableValue":
        """Wrap a plain Python value in the matching variant."""
        if isinstance(obj, PortableValue):
            return obj
        if obj is None:
            return NULL_VALUE
        # bool before int, datetime before date: both are subclasses
        if isinstance(obj, bool):
            return cls(ValueKind.BOOL, obj)
        if isinstance(obj, int):
            return cls(ValueKind.INT, obj)
        if isinstance(obj, float):
            return cls(ValueKind.FLOAT, obj)
        if isinstance(obj, Decimal):
            return cls(ValueKind.DECIMAL, obj)
        if isinstance(obj, str):
            return cls(ValueKind.STRING, obj)
        if isinstance(obj, datetime):
            return cls(ValueKind.DATETIME, obj)
        if isinstance(obj, date):
            return cls(ValueKind.DATE, obj)
        if isinstance(obj, time):
            return cls(ValueKind.TIME, obj)
        if isinstance(obj, (bytes, bytearray)):
            return cls(ValueKind.BLOB, bytes(obj))
        raise TypeError(f"No portable value for {type(obj).__name__}")


NULL_VALUE = PortableValue(ValueKind.NONE)


@dataclass(frozen=True)
class DumpOptions:
    """Mode flags for a dump.

    same_db: keep vendor types and unparseable defaults verbatim.
    indexes: emit indexes in the schema dump.
    ignore_index_errors: request ignore_errors on index statements even for
        same-engine dumps.
    convert_tinyint_to_bool: translate tinyint columns to Boolean.
    """

    same_db: bool = False
    indexes: bool = True
    ignore_index_errors: bool = False
    convert_tinyint_to_bool: bool = True


@dataclass(frozen=True)
class ColumnDescriptor:
    """Column definition."""

    name: str
    type: PortableType
    default: Optional[PortableValue] = None
    nullable: bool = True


@dataclass(frozen=True)
class PrimaryKeyDescriptor:
    """Single auto-incrementing primary key, rendered in its dedicated form."""

    name: str
    type: Optional[PortableType] = None


@dataclass(frozen=True)
class IndexDescriptor:
    """Index definition. name is only set when it differs from the convention."""

    columns: tuple[str, ...]
    name: Optional[str] = None
    unique: bool = False


@dataclass(frozen=True)
class ConstraintDescriptor:
    """Constraint definition."""

    kind: ConstraintKind
    name: Optional[str] = None
    columns: tuple[str, ...] = ()
    conditions: tuple[Any, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class TableSchemaDescription:
    """Everything needed to recreate one table."""

    name: str
    columns: list[ColumnDescriptor] = field(default_factory=list)
    primary_key: Optional[PrimaryKeyDescriptor] = None
    composite_primary_key: list[str] = field(default_factory=list)
    constraints: list[ConstraintDescriptor] = field(default_factory=list)
    indexes: list[IndexDescriptor] = field(default_factory=list)
    ignore_index_errors: bool = False

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        """Get a column by name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]


@dataclass
class MigrationDescription:
    """Paired up/down migration.

    up holds table descriptions in lexicographic table order. For a schema
    dump, down is the set of tables to drop; for an index-only dump, the up
    tables only carry indexes and down drops those same indexes.
    """

    up: list[TableSchemaDescription]
    down: list[str]
    indexes_only: bool = False
    ignore_index_errors: bool = False

    def table_names(self) -> list[str]:
        return [table.name for table in self.up]

    def get_table(self, name: str) -> Optional[TableSchemaDescription]:
        """Get a table by name."""
        for table in self.up:
            if table.name == name:
                return table
        return None
