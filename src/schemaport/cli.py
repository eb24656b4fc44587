"""Command-line interface for schemaport."""

import argparse
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from schemaport.config import Config
from schemaport.exceptions import ConfigError
from schemaport.migrations.assembler import MigrationAssembler
from schemaport.schema.codegen import render_migration
from schemaport.schema.exporter import export_migration_yaml
from schemaport.schema.introspect import SchemaSource
from schemaport.schema.loader import load_facts

logger = logging.getLogger(__name__)


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--facts", type=Path, help="YAML schema facts snapshot")
    parser.add_argument(
        "--online",
        action="store_true",
        help="Introspect a Unity Catalog schema (requires DB connection)",
    )
    parser.add_argument("--catalog", help="Catalog to introspect (with --online)")
    parser.add_argument("--schema", help="Schema to introspect (with --online)")
    parser.add_argument("--profile", help="~/.databrickscfg profile (with --online)")
    parser.add_argument("--engine", help="Override the source engine identifier")
    parser.add_argument(
        "--same-db",
        action="store_true",
        default=None,
        help="Keep vendor types and defaults verbatim for the same engine",
    )
    parser.add_argument(
        "--ignore-index-errors",
        action="store_true",
        default=None,
        help="Mark index statements with ignore_errors even with --same-db",
    )
    parser.add_argument(
        "--tinyint-as-int",
        dest="tinyint_as_bool",
        action="store_false",
        default=None,
        help="Translate tinyint to Integer instead of Boolean",
    )
    parser.add_argument("--output", type=Path, help="Output file path (default: stdout)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemaport",
        description="Dump database schemas as portable migrations",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    dump_parser = subparsers.add_parser("dump", help="Dump a full schema migration")
    _add_source_args(dump_parser)
    dump_parser.add_argument(
        "--no-indexes",
        dest="indexes",
        action="store_false",
        default=None,
        help="Leave indexes out (dump them later with dump-indexes)",
    )
    dump_parser.add_argument("--format", choices=["text", "yaml"], default="text")
    dump_parser.add_argument("--description", help="Comment placed at the top")

    indexes_parser = subparsers.add_parser("dump-indexes", help="Dump an index-only migration")
    _add_source_args(indexes_parser)
    indexes_parser.add_argument("--format", choices=["text", "yaml"], default="text")
    indexes_parser.add_argument("--description", help="Comment placed at the top")

    table_parser = subparsers.add_parser("dump-table", help="Dump one create_table block")
    table_parser.add_argument("table", help="Table name")
    _add_source_args(table_parser)

    check_parser = subparsers.add_parser("check", help="Validate a facts snapshot")
    check_parser.add_argument("--facts", type=Path, required=True)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    if args.command == "dump":
        return cmd_dump(args)
    elif args.command == "dump-indexes":
        return cmd_dump_indexes(args)
    elif args.command == "dump-table":
        return cmd_dump_table(args)
    elif args.command == "check":
        return cmd_check(args)
    else:
        print(f"Command '{args.command}' not yet implemented", file=sys.stderr)
        return 1


def _config_from_args(args: argparse.Namespace) -> Config:
    return Config.from_env(
        engine=args.engine,
        same_db=args.same_db,
        indexes=getattr(args, "indexes", None),
        ignore_index_errors=args.ignore_index_errors,
        convert_tinyint_to_bool=args.tinyint_as_bool,
        catalog=args.catalog,
        schema=args.schema,
        profile=args.profile,
    )


@contextmanager
def _open_source(args: argparse.Namespace, config: Config) -> Iterator[SchemaSource]:
    """Yield the schema facts source selected on the command line."""
    if args.online:
        from schemaport.databricks.utils import online_source

        with online_source(config) as source:
            yield source
    elif args.facts is not None:
        yield load_facts(args.facts)
    else:
        raise ConfigError("No schema source: use --facts PATH or --online")


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        print(text, end="" if text.endswith("\n") else "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text)
    logger.info(f"Wrote {output}")


def cmd_dump(args: argparse.Namespace) -> int:
    """Dump a migration that recreates every table."""
    try:
        config = _config_from_args(args)
        with _open_source(args, config) as source:
            assembler = MigrationAssembler(source, config.dump_options(), engine=config.engine)
            migration = assembler.describe_schema()
            if args.format == "yaml":
                text = export_migration_yaml(migration)
            else:
                text = render_migration(migration, args.description)

        _emit(text, args.output)
        logger.info(f"Dumped {len(migration.up)} tables")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Dump error: {e}", file=sys.stderr)
        return 1


def cmd_dump_indexes(args: argparse.Namespace) -> int:
    """Dump a migration that adds/drops every index."""
    try:
        config = _config_from_args(args)
        with _open_source(args, config) as source:
            assembler = MigrationAssembler(source, config.dump_options(), engine=config.engine)
            migration = assembler.describe_indexes()
            if args.format == "yaml":
                text = export_migration_yaml(migration)
            else:
                text = render_migration(migration, args.description)

        _emit(text, args.output)
        logger.info(f"Dumped indexes for {len(migration.down)} tables")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Dump error: {e}", file=sys.stderr)
        return 1


def cmd_dump_table(args: argparse.Namespace) -> int:
    """Dump the create_table block of a single table."""
    try:
        config = _config_from_args(args)
        with _open_source(args, config) as source:
            if args.table not in source.tables():
                print(f"Table '{args.table}' not found", file=sys.stderr)
                return 1
            assembler = MigrationAssembler(source, config.dump_options(), engine=config.engine)
            text = assembler.dump_table_schema(args.table)

        _emit(text, args.output)
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Dump error: {e}", file=sys.stderr)
        return 1


def cmd_check(args: argparse.Namespace) -> int:
    """Load a facts snapshot and summarise it."""
    try:
        snapshot = load_facts(args.facts)
        print(f"Loaded {len(snapshot.table_facts)} tables (engine: {snapshot.engine}):")
        for name in sorted(snapshot.tables()):
            facts = snapshot.table_facts[name]
            indexes = "unsupported" if facts.indexes is None else len(facts.indexes)
            print(
                f"  - {name} ({len(facts.columns)} columns, {indexes} indexes, "
                f"{len(facts.constraints)} constraints)"
            )
        return 0
    except Exception as e:
        print(f"Validation error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
