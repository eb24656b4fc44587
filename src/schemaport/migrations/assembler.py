"""Assemble whole-database schema and index migrations."""

from __future__ import annotations

import logging
from typing import Optional

from schemaport.exceptions import UnsupportedIntrospectionError
from schemaport.schema.builder import DescriptorBuilder, IndexNamer, default_index_name
from schemaport.schema.codegen import SchemaGenerator, render_migration
from schemaport.schema.introspect import SchemaSource
from schemaport.schema.models import (
    ConstraintFact,
    DumpOptions,
    IndexFact,
    MigrationDescription,
    TableSchemaDescription,
)

__all__ = ["MigrationAssembler"]

logger = logging.getLogger(__name__)


class MigrationAssembler:
    """Describe and render migrations that recreate a source database.

    Tables are always processed in lexicographic order so output is
    diffable. Rendering failures (CodegenError) are not caught here; a
    partial migration is never returned.
    """

    def __init__(
        self,
        source: SchemaSource,
        options: Optional[DumpOptions] = None,
        *,
        engine: Optional[str] = None,
        index_namer: IndexNamer = default_index_name,
    ) -> None:
        self._source = source
        self._options = options or DumpOptions()
        self._engine = engine or source.engine
        self._builder = DescriptorBuilder(self._engine, self._options, index_namer)

    @property
    def ignore_index_errors(self) -> bool:
        """Index statements may hit a mismatched schema unless dumping for the same engine."""
        return not self._options.same_db or self._options.ignore_index_errors

    def _sorted_tables(self) -> list[str]:
        return sorted(self._source.tables(), key=str)

    def _fetch_indexes(self, table: str) -> list[IndexFact]:
        try:
            return list(self._source.indexes(table))
        except UnsupportedIntrospectionError as e:
            logger.debug(f"Skipping indexes for {table}: {e}")
            return []

    def _fetch_constraints(self, table: str) -> list[ConstraintFact]:
        try:
            return list(self._source.constraints(table))
        except UnsupportedIntrospectionError as e:
            logger.debug(f"Skipping constraints for {table}: {e}")
            return []

    def describe_table(self, table: str) -> TableSchemaDescription:
        """Build the description of one table, honoring the indexes option."""
        indexes = self._fetch_indexes(table) if self._options.indexes else None
        description = self._builder.build_table(
            table,
            self._source.schema(table),
            indexes=indexes,
            constraints=self._fetch_constraints(table),
        )
        description.ignore_index_errors = (
            self._options.indexes
            and bool(description.indexes)
            and self.ignore_index_errors
        )
        return description

    def describe_schema(self) -> MigrationDescription:
        """Describe every table; down drops all of them."""
        tables = self._sorted_tables()
        up = []
        for name in tables:
            logger.debug(f"Describing table {name}")
            up.append(self.describe_table(name))
        return MigrationDescription(up=up, down=tables)

    def describe_indexes(self) -> MigrationDescription:
        """Describe only the indexes of every table, for a separate migration."""
        up = []
        for name in self._sorted_tables():
            ordered = sorted(self._fetch_indexes(name), key=lambda i: i.name)
            up.append(
                TableSchemaDescription(
                    name=name,
                    indexes=[self._builder.build_index(name, i) for i in ordered],
                )
            )
        return MigrationDescription(
            up=up,
            down=[t.name for t in up if t.indexes],
            indexes_only=True,
            ignore_index_errors=self.ignore_index_errors,
        )

    def dump_table_schema(self, table: str) -> str:
        """Return the create_table block for one table."""
        return SchemaGenerator(self.describe_table(table)).render()

    def dump_schema_migration(self, description: Optional[str] = None) -> str:
        """Return a migration that recreates every table."""
        return render_migration(self.describe_schema(), description)

    def dump_indexes_migration(self, description: Optional[str] = None) -> str:
        """Return a migration that adds (up) and drops (down) every index."""
        return render_migration(self.describe_indexes(), description)
