"""Translate vendor default-value literals into portable values.

Each engine gets a Dialect describing how its catalog decorates defaults.
The dialect unwrap runs first, then the literal is parsed according to the
column's portable type. Nothing here raises: an untranslatable default
becomes NULL_VALUE (dropped) or, in same-engine mode, a RAW literal that is
replayed verbatim.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Callable, Optional

from schemaport.schema.models import NULL_VALUE, PortableValue
from schemaport.types import TypeKind, ValueKind

__all__ = [
    "Dialect",
    "DIALECTS",
    "GENERIC",
    "MYSQL",
    "POSTGRES",
    "get_dialect",
    "translate_default",
]

logger = logging.getLogger(__name__)

STRING_DEFAULT_RE = re.compile(r"'(.*)'", re.DOTALL)

TEMPORAL_KINDS = frozenset({TypeKind.DATE, TypeKind.DATETIME, TypeKind.TIME})
STRING_LIKE_KINDS = TEMPORAL_KINDS | {TypeKind.STRING, TypeKind.BLOB}


@dataclass(frozen=True)
class Dialect:
    """Engine-specific rules for reading default literals.

    unwrap_pattern: full-match pattern whose first non-empty group is the
        literal inside the engine's decoration (casts, parentheses).
    timestamp_pattern: "current date/time" sentinels that have no static value.
    unquoted_string_defaults: the catalog reports string defaults without
        quotes, so they are re-quoted before parsing.
    """

    name: str
    unwrap_pattern: Optional[re.Pattern[str]] = None
    timestamp_pattern: Optional[re.Pattern[str]] = None
    unquoted_string_defaults: bool = False

    def unwrap(self, literal: str) -> str:
        if self.unwrap_pattern is None:
            return literal
        match = self.unwrap_pattern.fullmatch(literal)
        if not match:
            return literal
        return next((g for g in match.groups() if g is not None), literal)

    def is_timestamp_sentinel(self, literal: str) -> bool:
        if self.timestamp_pattern is None:
            return False
        return self.timestamp_pattern.fullmatch(literal.strip()) is not None


POSTGRES = Dialect(
    name="postgres",
    unwrap_pattern=re.compile(r"B?('.*')::[^']+|\((-?\d+(?:\.\d+)?)\)", re.DOTALL),
)

MYSQL = Dialect(
    name="mysql",
    timestamp_pattern=re.compile(
        r"current_(?:date|time|timestamp)(?:\(\d*\))?|now\(\)", re.IGNORECASE
    ),
    unquoted_string_defaults=True,
)

GENERIC = Dialect(name="generic")

DIALECTS: dict[str, Dialect] = {
    "postgres": POSTGRES,
    "postgresql": POSTGRES,
    "mysql": MYSQL,
    "mariadb": MYSQL,
}


def get_dialect(engine: Optional[str]) -> Dialect:
    """Return the dialect rules for an engine identifier."""
    if not engine:
        return GENERIC
    return DIALECTS.get(engine.lower(), GENERIC)


def _quote(literal: str) -> str:
    return "'" + literal.replace("'", "''") + "'"


def _parse_bool(text: str) -> Optional[PortableValue]:
    if re.search(r"[f0]", text, re.IGNORECASE):
        return PortableValue(ValueKind.BOOL, False)
    if re.search(r"[t1]", text, re.IGNORECASE):
        return PortableValue(ValueKind.BOOL, True)
    return None


def _parse_int(text: str) -> PortableValue:
    return PortableValue(ValueKind.INT, int(text))


def _parse_float(text: str) -> PortableValue:
    return PortableValue(ValueKind.FLOAT, float(text))


def _parse_decimal(text: str) -> PortableValue:
    return PortableValue(ValueKind.DECIMAL, Decimal(text.strip()))


def _parse_string(text: str) -> PortableValue:
    return PortableValue(ValueKind.STRING, text)


def _parse_blob(text: str) -> PortableValue:
    return PortableValue(ValueKind.BLOB, text.encode("utf-8"))


def _parse_date(text: str) -> PortableValue:
    return PortableValue(ValueKind.DATE, date.fromisoformat(text.strip()))


def _parse_datetime(text: str) -> PortableValue:
    return PortableValue(ValueKind.DATETIME, datetime.fromisoformat(text.strip()))


def _parse_time(text: str) -> PortableValue:
    return PortableValue(ValueKind.TIME, time.fromisoformat(text.strip()))


_PARSERS: dict[TypeKind, Callable[[str], Optional[PortableValue]]] = {
    TypeKind.BOOLEAN: _parse_bool,
    TypeKind.INTEGER: _parse_int,
    TypeKind.BIG_INTEGER: _parse_int,
    TypeKind.FLOAT: _parse_float,
    TypeKind.DECIMAL: _parse_decimal,
    TypeKind.STRING: _parse_string,
    TypeKind.BLOB: _parse_blob,
    TypeKind.DATE: _parse_date,
    TypeKind.DATETIME: _parse_datetime,
    TypeKind.TIME: _parse_time,
}


def _fallback(literal: str, same_db: bool) -> PortableValue:
    if same_db:
        return PortableValue.raw(literal)
    return NULL_VALUE


def translate_default(
    literal: Optional[str],
    kind: TypeKind,
    engine: Optional[str] = None,
    *,
    same_db: bool = False,
) -> PortableValue:
    """Parse a vendor default literal into a portable value.

    Args:
        literal: Default as reported by the catalog, e.g. "'abc'::text"
        kind: Portable type of the column (never RAW)
        engine: Engine identifier used to pick the dialect rules
        same_db: Preserve unparseable literals as RAW instead of dropping them

    Returns:
        The parsed value, a RAW literal, or NULL_VALUE when dropped
    """
    if literal is None:
        return NULL_VALUE

    dialect = get_dialect(engine)
    original = literal
    text = dialect.unwrap(literal)

    if kind in TEMPORAL_KINDS and dialect.is_timestamp_sentinel(text):
        return _fallback(original, same_db)

    if kind in STRING_LIKE_KINDS:
        if dialect.unquoted_string_defaults:
            original = text = _quote(text)
        match = STRING_DEFAULT_RE.fullmatch(text)
        if not match:
            return _fallback(original, same_db)
        text = match.group(1).replace("''", "'")

    parser = _PARSERS.get(kind)
    if parser is None:
        return _fallback(original, same_db)

    try:
        value = parser(text)
    except (ValueError, ArithmeticError) as e:
        logger.debug(f"Could not parse default {original!r} as {kind.value}: {e}")
        value = None

    if value is None:
        return _fallback(original, same_db)
    return value
