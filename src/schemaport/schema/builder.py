"""Build column, index and constraint descriptors from catalog facts."""

import logging
from typing import Callable, Iterable, Optional, Sequence

from schemaport.schema.defaults import translate_default
from schemaport.schema.models import (
    ColumnDescriptor,
    ColumnFact,
    ConstraintDescriptor,
    ConstraintFact,
    DumpOptions,
    IndexDescriptor,
    IndexFact,
    PortableType,
    PrimaryKeyDescriptor,
    TableSchemaDescription,
)
from schemaport.schema.typemap import translate_type
from schemaport.types import TypeKind

__all__ = ["DescriptorBuilder", "IndexNamer", "default_index_name"]

logger = logging.getLogger(__name__)

IndexNamer = Callable[[str, Sequence[str]], str]


def default_index_name(table: str, columns: Sequence[str]) -> str:
    """Name an index the way create_table does when none is given."""
    return f"{table}_{'_'.join(columns)}_index"


class DescriptorBuilder:
    """Turn raw facts for one engine into descriptors ready for rendering.

    Holds no state between calls; every method is a function of its
    arguments and the engine/options given at construction.
    """

    def __init__(
        self,
        engine: Optional[str] = None,
        options: Optional[DumpOptions] = None,
        index_namer: IndexNamer = default_index_name,
    ) -> None:
        self._engine = engine
        self._options = options or DumpOptions()
        self._index_namer = index_namer

    def portable_type(self, fact: ColumnFact) -> PortableType:
        """Translated type of a column, ignoring same-engine mode."""
        return translate_type(
            fact.db_type,
            convert_tinyint_to_bool=self._options.convert_tinyint_to_bool,
        )

    def build_column(self, fact: ColumnFact) -> ColumnDescriptor:
        """Build the generic descriptor for a column."""
        translated = self.portable_type(fact)
        col_type = (
            PortableType.raw_vendor(fact.db_type) if self._options.same_db else translated
        )

        default = None
        if fact.default is not None:
            value = translate_default(
                fact.default,
                translated.kind,
                self._engine,
                same_db=self._options.same_db,
            )
            if value.is_none:
                logger.debug(f"Dropping default {fact.default!r} of column {fact.name}")
            else:
                default = value

        return ColumnDescriptor(
            name=fact.name,
            type=col_type,
            default=default,
            nullable=fact.nullable is not False,
        )

    def build_primary_key(self, fact: ColumnFact) -> PrimaryKeyDescriptor:
        """Build the dedicated primary key slot for an auto-incrementing key."""
        pk_type = None
        if not self._options.same_db:
            translated = self.portable_type(fact)
            if translated.kind is TypeKind.BIG_INTEGER:
                pk_type = translated
        return PrimaryKeyDescriptor(name=fact.name, type=pk_type)

    def build_index(self, table: str, fact: IndexFact) -> IndexDescriptor:
        """Build an index descriptor, omitting the name when it is the default one."""
        columns = tuple(fact.columns)
        name = None if self._index_namer(table, columns) == fact.name else fact.name
        return IndexDescriptor(columns=columns, name=name, unique=bool(fact.unique))

    def build_constraint(self, fact: ConstraintFact) -> ConstraintDescriptor:
        return ConstraintDescriptor(
            kind=fact.kind,
            name=fact.name,
            columns=tuple(fact.columns),
            conditions=tuple(fact.conditions),
            options=dict(fact.options),
        )

    def build_table(
        self,
        table: str,
        columns: Sequence[ColumnFact],
        indexes: Optional[Iterable[IndexFact]] = None,
        constraints: Iterable[ConstraintFact] = (),
    ) -> TableSchemaDescription:
        """Build the full description of one table.

        A lone primary key that auto-increments goes to the primary key slot
        and is left out of the column list. Any other primary key (composite,
        or a single natural key) stays in the column list and is declared once
        through composite_primary_key.

        Args:
            table: Table name
            columns: Column facts in catalog order
            indexes: Index facts, or None when indexes are not being dumped
            constraints: Table-level constraint facts

        Returns:
            TableSchemaDescription with indexes sorted by name
        """
        pk_names = [c.name for c in columns if c.primary_key]
        single_pk = len(pk_names) == 1

        description = TableSchemaDescription(name=table)
        for fact in columns:
            if single_pk and fact.primary_key and fact.auto_increment:
                description.primary_key = self.build_primary_key(fact)
            else:
                description.columns.append(self.build_column(fact))

        if description.primary_key is None and pk_names:
            description.composite_primary_key = pk_names

        description.constraints = [self.build_constraint(c) for c in constraints]

        if indexes is not None:
            ordered = sorted(indexes, key=lambda i: i.name)
            description.indexes = [self.build_index(table, i) for i in ordered]

        return description
