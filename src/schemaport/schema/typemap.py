"""Translate vendor type strings into portable column types."""

import re
from typing import Callable, Optional

from schemaport.schema.models import PortableType
from schemaport.types import TypeKind

__all__ = ["translate_type", "TYPE_RULES", "VARCHAR_DEFAULT_SIZE"]

# A varchar of this size is treated as "no size given".
VARCHAR_DEFAULT_SIZE = 255

TypeFactory = Callable[[re.Match, bool], PortableType]


def _int(group: Optional[str]) -> Optional[int]:
    return int(group) if group else None


def _fixed(kind: TypeKind, **modifiers) -> TypeFactory:
    ptype = PortableType(kind=kind, **modifiers)
    return lambda match, tinyint_as_bool: ptype


def _tinyint(match: re.Match, tinyint_as_bool: bool) -> PortableType:
    return PortableType(TypeKind.BOOLEAN if tinyint_as_bool else TypeKind.INTEGER)


def _char(match: re.Match, tinyint_as_bool: bool) -> PortableType:
    return PortableType(TypeKind.STRING, size=_int(match.group(1)), fixed=True)


def _varchar(match: re.Match, tinyint_as_bool: bool) -> PortableType:
    size = _int(match.group(1))
    if size == VARCHAR_DEFAULT_SIZE:
        size = None
    return PortableType(TypeKind.STRING, size=size)


def _decimal(match: re.Match, tinyint_as_bool: bool) -> PortableType:
    parts = tuple(int(g) for g in match.groups() if g)
    return PortableType(TypeKind.DECIMAL, size=parts or None)


def _blob(match: re.Match, tinyint_as_bool: bool) -> PortableType:
    return PortableType(TypeKind.BLOB, size=_int(match.group(1)))


_INT_SUFFIX = r"(?:\(\d+\))?(?:\s+unsigned)?(?:\s+zerofill)?"

# First full match wins. Patterns run against the lowercased, stripped type.
TYPE_RULES: list[tuple[re.Pattern[str], TypeFactory]] = [
    (re.compile(rf"(?:medium|small)?int(?:eger)?{_INT_SUFFIX}"), _fixed(TypeKind.INTEGER)),
    (re.compile(r"int[24]"), _fixed(TypeKind.INTEGER)),
    (re.compile(rf"tinyint{_INT_SUFFIX}"), _tinyint),
    (re.compile(rf"bigint{_INT_SUFFIX}"), _fixed(TypeKind.BIG_INTEGER)),
    (re.compile(r"int8"), _fixed(TypeKind.BIG_INTEGER)),
    (
        re.compile(r"(?:real|float|double(?: precision)?)(?:\(\d+(?:,\s*\d+)?\))?"),
        _fixed(TypeKind.FLOAT),
    ),
    (re.compile(r"bool(?:ean)?"), _fixed(TypeKind.BOOLEAN)),
    (re.compile(r"(?:(?:tiny|medium|long)?text|clob)"), _fixed(TypeKind.STRING, text=True)),
    (re.compile(r"date"), _fixed(TypeKind.DATE)),
    (re.compile(r"datetime(?:\(\d+\))?"), _fixed(TypeKind.DATETIME)),
    (
        re.compile(r"timestamp(?:_ntz|_ltz)?(?:\(\d+\))?(?: with(?:out)? time zone)?"),
        _fixed(TypeKind.DATETIME),
    ),
    (
        re.compile(r"time(?:\(\d+\))?(?: with(?:out)? time zone)?"),
        _fixed(TypeKind.TIME, only_time=True),
    ),
    (re.compile(r"char(?:acter)?(?:\((\d+)\))?"), _char),
    (re.compile(r"(?:varchar|character varying|bpchar|string)(?:\((\d+)\))?"), _varchar),
    (re.compile(r"money"), _fixed(TypeKind.DECIMAL, size=(19, 2))),
    (re.compile(r"(?:decimal|numeric|number)(?:\((\d+)(?:,\s*(\d+))?\))?"), _decimal),
    (re.compile(r"(?:bytea|(?:tiny|medium|long)?blob|(?:var)?binary)(?:\((\d+)\))?"), _blob),
    (re.compile(r"year"), _fixed(TypeKind.INTEGER)),
]

_FALLBACK = PortableType(TypeKind.STRING)


def translate_type(db_type: str, *, convert_tinyint_to_bool: bool = True) -> PortableType:
    """Map a vendor type string to a portable type.

    Total: anything unrecognized becomes a plain String.

    Args:
        db_type: Type as reported by the catalog, e.g. "varchar(40)"
        convert_tinyint_to_bool: Treat tinyint as Boolean rather than Integer

    Returns:
        PortableType with size/fixed/text/only_time modifiers where known
    """
    normalized = db_type.strip().lower()
    for pattern, factory in TYPE_RULES:
        match = pattern.fullmatch(normalized)
        if match:
            return factory(match, convert_tinyint_to_bool)
    return _FALLBACK
