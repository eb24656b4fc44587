"""Schema facts, portable types/values, translation and rendering."""

from schemaport.schema.builder import DescriptorBuilder, default_index_name
from schemaport.schema.defaults import translate_default
from schemaport.schema.models import (
    ColumnDescriptor,
    ColumnFact,
    ConstraintDescriptor,
    ConstraintFact,
    DumpOptions,
    IndexDescriptor,
    IndexFact,
    MigrationDescription,
    PortableType,
    PortableValue,
    PrimaryKeyDescriptor,
    TableSchemaDescription,
)
from schemaport.schema.typemap import translate_type

__all__ = [
    "ColumnDescriptor",
    "ColumnFact",
    "ConstraintDescriptor",
    "ConstraintFact",
    "DescriptorBuilder",
    "DumpOptions",
    "IndexDescriptor",
    "IndexFact",
    "MigrationDescription",
    "PortableType",
    "PortableValue",
    "PrimaryKeyDescriptor",
    "TableSchemaDescription",
    "default_index_name",
    "translate_default",
    "translate_type",
]
