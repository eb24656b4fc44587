"""Whole-database migration assembly."""

from schemaport.migrations.assembler import MigrationAssembler

__all__ = ["MigrationAssembler"]
