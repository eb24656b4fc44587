"""Core type definitions for schemaport."""

from enum import Enum
from typing import TypeAlias

TableName: TypeAlias = str
ColumnName: TypeAlias = str
IndexName: TypeAlias = str
EngineName: TypeAlias = str

__all__ = [
    "TableName",
    "ColumnName",
    "IndexName",
    "EngineName",
    "TypeKind",
    "ValueKind",
    "ConstraintKind",
    "IndexRenderMode",
]


class TypeKind(Enum):
    """Portable column types. The value is the constructor name used when rendering."""

    INTEGER = "Integer"
    BIG_INTEGER = "BigInteger"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    STRING = "String"
    DATE = "Date"
    DATETIME = "DateTime"
    TIME = "Time"
    BLOB = "Blob"
    RAW = "raw"


class ValueKind(Enum):
    """Variants of a portable default value."""

    NONE = "none"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    STRING = "string"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    BLOB = "blob"
    RAW = "raw"


class ConstraintKind(Enum):
    """Table-level constraint kinds."""

    CHECK = "check"
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    PRIMARY_KEY = "primary_key"


class IndexRenderMode(Enum):
    """How index declarations are emitted."""

    GENERIC = "index"
    ADD = "add_index"
    DROP = "drop_index"
