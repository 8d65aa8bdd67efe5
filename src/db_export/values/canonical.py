"""
Canonical Values
================

Backend-agnostic representation of a decoded cell.

Every cell fetched from a database is turned into a `CanonicalValue`: a
`ValueType` tag plus an optional payload. A payload of `None` means SQL NULL.
Each value knows how to render itself twice:

- as a JSON-compatible Python object (`to_json`)
- as a SQL literal for a given dialect (`to_sql_literal`)

The two forms are deliberately independent; JSON quoting is not valid SQL
quoting.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any


# =============================================================================
# TAGS
# =============================================================================

class ValueType(str, Enum):
    """Closed set of canonical value tags."""
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"
    BOOL = "bool"
    UUID = "uuid"
    DATETIME_WITH_OFFSET = "datetime_with_offset"
    DATETIME_NAIVE = "datetime_naive"
    DATE = "date"
    TIME = "time"


class SqlDialect(str, Enum):
    """SQL dialects the literal serializer can target."""
    MYSQL = "mysql"
    MSSQL = "mssql"


# Python representation accepted for each tag's payload.
PAYLOAD_TYPES: dict[ValueType, type] = {
    ValueType.STRING: str,
    ValueType.INT32: int,
    ValueType.INT64: int,
    ValueType.FLOAT32: float,
    ValueType.FLOAT64: float,
    ValueType.DECIMAL: Decimal,
    ValueType.BOOL: bool,
    ValueType.UUID: uuid.UUID,
    ValueType.DATETIME_WITH_OFFSET: datetime,
    ValueType.DATETIME_NAIVE: datetime,
    ValueType.DATE: date,
    ValueType.TIME: time,
}

NUMERIC_TYPES = frozenset({
    ValueType.INT32,
    ValueType.INT64,
    ValueType.FLOAT32,
    ValueType.FLOAT64,
})

SQL_NULL = "NULL"

BOOL_LITERALS: dict[SqlDialect, tuple[str, str]] = {
    SqlDialect.MYSQL: ("TRUE", "FALSE"),
    SqlDialect.MSSQL: ("1", "0"),
}


# =============================================================================
# VALUE
# =============================================================================

@dataclass(frozen=True)
class CanonicalValue:
    """A tagged, optionally empty cell value."""
    value_type: ValueType
    payload: Any = None

    def __post_init__(self):
        if self.payload is None:
            return
        expected = PAYLOAD_TYPES[self.value_type]
        # bool is an int subclass and datetime is a date subclass; neither
        # may stand in for the other tag.
        if isinstance(self.payload, bool) and self.value_type is not ValueType.BOOL:
            raise TypeError(f"bool payload is not valid for {self.value_type.value}")
        if isinstance(self.payload, datetime) and self.value_type is ValueType.DATE:
            raise TypeError("datetime payload is not valid for date")
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{type(self.payload).__name__} payload is not valid for "
                f"{self.value_type.value}"
            )

    @property
    def is_null(self) -> bool:
        return self.payload is None

    def to_json(self) -> Any:
        """Return the JSON-compatible form of this value."""
        if self.payload is None:
            return None

        if self.value_type in NUMERIC_TYPES or self.value_type in (
            ValueType.STRING,
            ValueType.BOOL,
        ):
            return self.payload

        if self.value_type is ValueType.DECIMAL:
            # Precision is only given up here, at the JSON boundary.
            return float(_decimal_text(self.payload))

        return _canonical_text(self.payload)

    def to_sql_literal(self, dialect: SqlDialect) -> str:
        """Return a SQL literal for this value in the given dialect."""
        if self.payload is None:
            return SQL_NULL

        if self.value_type is ValueType.BOOL:
            true_literal, false_literal = BOOL_LITERALS[dialect]
            return true_literal if self.payload else false_literal

        if self.value_type in (ValueType.INT32, ValueType.INT64):
            return str(self.payload)

        if self.value_type in (ValueType.FLOAT32, ValueType.FLOAT64):
            return repr(self.payload)

        if self.value_type is ValueType.DECIMAL:
            return _decimal_text(self.payload)

        if self.value_type is ValueType.STRING:
            literal = quote_sql_string(self.payload, dialect)
            if dialect is SqlDialect.MSSQL:
                # N'' literals carry characters outside the server code page.
                return "N" + literal
            return literal

        return quote_sql_string(_canonical_text(self.payload), dialect)


# =============================================================================
# ROW RENDERING
# =============================================================================

def row_to_json(row: dict[str, CanonicalValue]) -> str:
    """Render one decoded row as a compact JSON object, keys in row order."""
    return json.dumps(
        {column: value.to_json() for column, value in row.items()},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def row_to_sql_tuple(values: list[CanonicalValue], dialect: SqlDialect) -> str:
    """Render one decoded row as a parenthesized SQL value tuple."""
    return "(" + ",".join(v.to_sql_literal(dialect) for v in values) + ")"


def quote_sql_string(text: str, dialect: SqlDialect) -> str:
    """Quote text as a SQL string literal, doubling embedded quotes."""
    escaped = text.replace("'", "''")
    if dialect is SqlDialect.MYSQL:
        # MySQL treats backslash as an escape character inside literals.
        escaped = escaped.replace("\\", "\\\\")
    return f"'{escaped}'"


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _decimal_text(value: Decimal) -> str:
    return format(value, "f")


def _canonical_text(value: Any) -> str:
    return str(value)
