"""Tests for schema description rendering."""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from schemaport.exceptions import CodegenError, NonStaticConstraintError
from schemaport.schema.codegen import (
    GeneratorState,
    SchemaGenerator,
    format_options,
    format_value,
    render_migration,
)
from schemaport.schema.models import (
    ColumnDescriptor,
    ConstraintDescriptor,
    IndexDescriptor,
    MigrationDescription,
    PortableType,
    PortableValue,
    PrimaryKeyDescriptor,
    TableSchemaDescription,
)
from schemaport.types import ConstraintKind, IndexRenderMode, TypeKind, ValueKind


@pytest.fixture
def users_table() -> TableSchemaDescription:
    """Create a sample users table description."""
    return TableSchemaDescription(
        name="users",
        primary_key=PrimaryKeyDescriptor(name="id"),
        columns=[
            ColumnDescriptor(
                name="name",
                type=PortableType(TypeKind.STRING, size=50),
                default=PortableValue(ValueKind.STRING, "x"),
                nullable=False,
            ),
            ColumnDescriptor(name="flags", type=PortableType.raw_vendor("bit(3)")),
        ],
        indexes=[IndexDescriptor(columns=("name",), unique=True)],
        ignore_index_errors=True,
    )


class TestFormatValue:
    """Default literal constructors."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (PortableValue(ValueKind.NONE), "None"),
            (PortableValue(ValueKind.BOOL, False), "False"),
            (PortableValue(ValueKind.INT, 3), "3"),
            (PortableValue(ValueKind.FLOAT, 1.5), "1.5"),
            (PortableValue(ValueKind.FLOAT, float("inf")), "float('inf')"),
            (PortableValue(ValueKind.STRING, "a'b"), '"a\'b"'),
            (PortableValue(ValueKind.DECIMAL, Decimal("1.50")), "Decimal('1.50')"),
            (PortableValue(ValueKind.DATE, date(2020, 1, 2)), "date.fromisoformat('2020-01-02')"),
            (
                PortableValue(ValueKind.DATETIME, datetime(2020, 1, 2, 3, 4, 5)),
                "datetime.fromisoformat('2020-01-02T03:04:05')",
            ),
            (PortableValue(ValueKind.TIME, time(12, 30)), "time.fromisoformat('12:30:00')"),
            (PortableValue(ValueKind.BLOB, b"\x00\xff"), "bytes.fromhex('00ff')"),
            (PortableValue.raw("CURRENT_TIMESTAMP"), "lit('CURRENT_TIMESTAMP')"),
        ],
    )
    def test_format_value(self, value, expected):
        assert format_value(value) == expected


class TestFormatOptions:
    """Keyword option rendering."""

    def test_empty(self):
        assert format_options({}) == ""

    def test_default_first(self):
        opts = {"size": 10, "default": PortableValue(ValueKind.INT, 1), "null": False}
        assert format_options(opts) == ", default=1, size=10, null=False"

    def test_tuple_size(self):
        assert format_options({"size": (10, 2)}) == ", size=(10, 2)"

    def test_invalid_keyword_rejected(self):
        with pytest.raises(CodegenError):
            format_options({"on delete": "cascade"})


class TestDumpColumns:
    """Column rendering."""

    def test_primary_key_first_then_columns(self, users_table: TableSchemaDescription):
        assert SchemaGenerator(users_table).dump_columns() == (
            "t.primary_key('id')\n"
            "t.String('name', default='x', size=50, null=False)\n"
            "t.column('flags', 'bit(3)')"
        )

    def test_primary_key_never_repeated_as_column(self):
        table = TableSchemaDescription(
            name="t",
            primary_key=PrimaryKeyDescriptor(name="id"),
            columns=[ColumnDescriptor(name="id", type=PortableType(TypeKind.INTEGER))],
        )
        assert SchemaGenerator(table).dump_columns() == "t.primary_key('id')"

    def test_bigint_primary_key(self):
        table = TableSchemaDescription(
            name="t",
            primary_key=PrimaryKeyDescriptor(
                name="id", type=PortableType(TypeKind.BIG_INTEGER)
            ),
        )
        assert SchemaGenerator(table).dump_columns() == "t.primary_key('id', type=BigInteger)"

    def test_type_modifiers(self):
        table = TableSchemaDescription(
            name="t",
            columns=[
                ColumnDescriptor(name="price", type=PortableType(TypeKind.DECIMAL, size=(10, 2))),
                ColumnDescriptor(name="code", type=PortableType(TypeKind.STRING, size=3, fixed=True)),
                ColumnDescriptor(name="body", type=PortableType(TypeKind.STRING, text=True)),
                ColumnDescriptor(name="at", type=PortableType(TypeKind.TIME, only_time=True)),
            ],
        )
        assert SchemaGenerator(table).dump_columns() == (
            "t.Decimal('price', size=(10, 2))\n"
            "t.String('code', size=3, fixed=True)\n"
            "t.String('body', text=True)\n"
            "t.Time('at', only_time=True)"
        )

    def test_raw_default(self):
        table = TableSchemaDescription(
            name="t",
            columns=[
                ColumnDescriptor(
                    name="created_at",
                    type=PortableType.raw_vendor("datetime"),
                    default=PortableValue.raw("CURRENT_TIMESTAMP"),
                )
            ],
        )
        assert SchemaGenerator(table).dump_columns() == (
            "t.column('created_at', 'datetime', default=lit('CURRENT_TIMESTAMP'))"
        )


def _check(*conditions, name=None) -> TableSchemaDescription:
    return TableSchemaDescription(
        name="t",
        constraints=[
            ConstraintDescriptor(kind=ConstraintKind.CHECK, name=name, conditions=conditions)
        ],
    )


class TestDumpConstraints:
    """Constraint rendering."""

    def test_check_shorthand(self):
        table = _check({"status": "active"})
        assert SchemaGenerator(table).dump_constraints() == "t.check(status='active')"

    def test_named_check_uses_constraint_form(self):
        table = _check({"status": "active"}, name="status_ok")
        assert SchemaGenerator(table).dump_constraints() == (
            "t.constraint('status_ok', {'status': 'active'})"
        )

    def test_shorthand_with_non_identifier_keys(self):
        table = _check({"first name": "x"})
        assert SchemaGenerator(table).dump_constraints() == "t.check({'first name': 'x'})"

    def test_multiple_conditions(self):
        table = _check("a > 0", {"b": 1})
        assert SchemaGenerator(table).dump_constraints() == "t.check('a > 0', {'b': 1})"

    def test_named_expression(self):
        table = _check("price > 0", name="positive_price")
        assert SchemaGenerator(table).dump_constraints() == (
            "t.constraint('positive_price', 'price > 0')"
        )

    def test_non_static_check_fails(self):
        table = _check(lambda row: row.a > 0, name="dynamic")
        generator = SchemaGenerator(table)

        with pytest.raises(NonStaticConstraintError) as exc_info:
            generator.render()

        assert exc_info.value.table == "t"
        assert exc_info.value.constraint_name == "dynamic"
        assert generator.state is GeneratorState.ERROR

    def test_composite_primary_key_first(self):
        table = TableSchemaDescription(
            name="t",
            composite_primary_key=["a", "b"],
            constraints=[
                ConstraintDescriptor(
                    kind=ConstraintKind.UNIQUE, name="uq_c", columns=("c",)
                )
            ],
        )
        assert SchemaGenerator(table).dump_constraints() == (
            "t.primary_key(['a', 'b'])\nt.unique(['c'], name='uq_c')"
        )

    def test_foreign_key_options(self):
        table = TableSchemaDescription(
            name="posts",
            constraints=[
                ConstraintDescriptor(
                    kind=ConstraintKind.FOREIGN_KEY,
                    columns=("owner_id",),
                    options={"table": "users", "key": ["id"], "on_delete": "cascade"},
                )
            ],
        )
        assert SchemaGenerator(table).dump_constraints() == (
            "t.foreign_key(['owner_id'], table='users', key=['id'], on_delete='cascade')"
        )


class TestDumpIndexes:
    """Index rendering modes."""

    @pytest.fixture
    def table(self) -> TableSchemaDescription:
        return TableSchemaDescription(
            name="users",
            indexes=[
                IndexDescriptor(columns=("a", "b"), name="idx_ab"),
                IndexDescriptor(columns=("email",), unique=True),
            ],
        )

    def test_generic(self, table):
        assert SchemaGenerator(table).dump_indexes() == (
            "t.index(['a', 'b'], name='idx_ab')\nt.index(['email'], unique=True)"
        )

    def test_add_with_ignore_errors(self, table):
        assert SchemaGenerator(table).dump_indexes(IndexRenderMode.ADD, ignore_errors=True) == (
            "db.add_index('users', ['a', 'b'], ignore_errors=True, name='idx_ab')\n"
            "db.add_index('users', ['email'], ignore_errors=True, unique=True)"
        )

    def test_drop(self, table):
        assert SchemaGenerator(table).dump_indexes(IndexRenderMode.DROP) == (
            "db.drop_index('users', ['a', 'b'], name='idx_ab')\n"
            "db.drop_index('users', ['email'], unique=True)"
        )


class TestRender:
    """create_table blocks and whole migrations."""

    def test_render_table(self, users_table: TableSchemaDescription):
        generator = SchemaGenerator(users_table)
        result = generator.render()

        assert result == (
            "with db.create_table('users', ignore_index_errors=True) as t:\n"
            "    t.primary_key('id')\n"
            "    t.String('name', default='x', size=50, null=False)\n"
            "    t.column('flags', 'bit(3)')\n"
            "\n"
            "    t.index(['name'], unique=True)"
        )
        assert generator.state is GeneratorState.RENDERED

    def test_render_empty_table(self):
        assert SchemaGenerator(TableSchemaDescription(name="e")).render() == (
            "with db.create_table('e') as t:\n    pass"
        )

    def test_render_migration(self, users_table: TableSchemaDescription):
        migration = MigrationDescription(up=[users_table], down=["users"])

        assert render_migration(migration) == (
            "def up(db):\n"
            "    with db.create_table('users', ignore_index_errors=True) as t:\n"
            "        t.primary_key('id')\n"
            "        t.String('name', default='x', size=50, null=False)\n"
            "        t.column('flags', 'bit(3)')\n"
            "\n"
            "        t.index(['name'], unique=True)\n"
            "\n"
            "\n"
            "def down(db):\n"
            "    db.drop_table('users')\n"
        )

    def test_render_empty_migration(self):
        migration = MigrationDescription(up=[], down=[])
        assert render_migration(migration) == (
            "def up(db):\n    pass\n\n\ndef down(db):\n    pass\n"
        )

    def test_render_index_migration(self):
        migration = MigrationDescription(
            up=[
                TableSchemaDescription(
                    name="a", indexes=[IndexDescriptor(columns=("x",))]
                ),
                TableSchemaDescription(name="b"),
            ],
            down=["a"],
            indexes_only=True,
            ignore_index_errors=True,
        )

        assert render_migration(migration, "indexes") == (
            "# Description: indexes\n"
            "\n"
            "def up(db):\n"
            "    db.add_index('a', ['x'], ignore_errors=True)\n"
            "\n"
            "\n"
            "def down(db):\n"
            "    db.drop_index('a', ['x'], ignore_errors=True)\n"
        )
