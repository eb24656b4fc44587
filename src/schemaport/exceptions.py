"""Exception classes for schemaport."""

from typing import Optional

__all__ = [
    "SchemaportError",
    "ConfigError",
    "SchemaLoadError",
    "IntrospectionError",
    "UnsupportedIntrospectionError",
    "CodegenError",
    "NonStaticConstraintError",
]


class SchemaportError(Exception):
    """Base exception for schemaport."""


class ConfigError(SchemaportError):
    """Error in configuration."""


class SchemaLoadError(SchemaportError):
    """Error loading a schema facts snapshot."""


class IntrospectionError(SchemaportError):
    """Error introspecting database schema."""


class UnsupportedIntrospectionError(IntrospectionError):
    """The source cannot list this kind of schema object (e.g. indexes)."""


class CodegenError(SchemaportError):
    """Error rendering a schema description."""


class NonStaticConstraintError(CodegenError):
    """A check constraint condition is code rather than data and can't be dumped."""

    def __init__(self, table: str, constraint_name: Optional[str], message: str):
        self.table = table
        self.constraint_name = constraint_name
        super().__init__(message)
