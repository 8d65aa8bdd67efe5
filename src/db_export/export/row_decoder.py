"""
Row Decoder
===========

Turns backend-native cursor rows into ordered mappings of
column name -> CanonicalValue.

The decoder is built once per table export from the introspected schema map.
Column types are resolved up front, so a missing or unsupported column fails
before any row is fetched.
"""

import math
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from db_export.schema_introspection import TypeResolver
from db_export.values import CanonicalValue, ValueType


# =============================================================================
# EXCEPTIONS
# =============================================================================

class MissingColumnSchemaError(Exception):
    """Raised when a requested column is absent from the introspected schema."""
    pass


class RowDecodeError(Exception):
    """Raised when a fetched value cannot be converted to its canonical type."""
    pass


# =============================================================================
# CONSTANTS
# =============================================================================

INT32_RANGE = (-(2 ** 31), 2 ** 31 - 1)
INT64_RANGE = (-(2 ** 63), 2 ** 63 - 1)

# (row, position, column name) -> native cell value
CellGetter = Callable[[Any, int, str], Any]


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

class RowDecoder:
    """
    Decodes rows of one table export.

    Args:
        table_name: Table being exported (used in error messages).
        columns: Requested columns, in output order.
        schema: Schema map of column name -> native type descriptor.
        resolver: Backend type resolver.
        get_cell: Backend-specific cell extraction.

    Raises:
        MissingColumnSchemaError: A requested column is not in `schema`.
        UnsupportedTypeError: A requested column's type has no mapping.
    """

    def __init__(
        self,
        table_name: str,
        columns: list[str],
        schema: dict[str, str],
        resolver: TypeResolver,
        get_cell: CellGetter,
    ):
        self.table_name = table_name
        self.columns = list(columns)
        self.get_cell = get_cell
        self.value_types = _resolve_columns(table_name, self.columns, schema, resolver)

    def decode(self, row: Any) -> dict[str, CanonicalValue]:
        """Decode every requested column of `row`, preserving column order."""
        decoded = {}
        for position, (column, value_type) in enumerate(zip(self.columns, self.value_types)):
            try:
                native = self.get_cell(row, position, column)
            except (KeyError, IndexError) as e:
                raise RowDecodeError(
                    f"Column '{column}' missing from fetched row of table '{self.table_name}'"
                ) from e
            decoded[column] = decode_cell(native, value_type, column, self.table_name)
        return decoded


def decode_cell(
    value: Any,
    value_type: ValueType,
    column: str,
    table_name: str,
) -> CanonicalValue:
    """
    Convert one native cell value into a CanonicalValue of `value_type`.

    None is kept as an empty payload.

    Raises:
        RowDecodeError: If the value cannot be represented as `value_type`.
    """
    if value is None:
        return CanonicalValue(value_type)

    try:
        payload = COERCERS[value_type](value)
        return CanonicalValue(value_type, payload)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise RowDecodeError(
            f"Cannot decode column '{column}' of table '{table_name}' as "
            f"{value_type.value}: {e}"
        ) from e


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _resolve_columns(
    table_name: str,
    columns: list[str],
    schema: dict[str, str],
    resolver: TypeResolver,
) -> list[ValueType]:
    value_types = []
    for column in columns:
        if column not in schema:
            raise MissingColumnSchemaError(
                f"Column '{column}' not found in schema of table '{table_name}'"
            )
        value_types.append(resolver.resolve(schema[column]))
    return value_types


def _reject_bool(value: Any) -> None:
    if isinstance(value, bool):
        raise TypeError("boolean value for a non-boolean column")


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    raise TypeError(f"expected text, got {type(value).__name__}")


def _to_int(value: Any, bounds: tuple[int, int]) -> int:
    _reject_bool(value)
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError(f"{value} is not an integer")
        value = int(value)
    if not isinstance(value, int):
        raise TypeError(f"expected integer, got {type(value).__name__}")
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{value} out of range [{low}, {high}]")
    return value


def _to_int32(value: Any) -> int:
    return _to_int(value, INT32_RANGE)


def _to_int64(value: Any) -> int:
    return _to_int(value, INT64_RANGE)


def _to_float(value: Any) -> float:
    _reject_bool(value)
    if not isinstance(value, (int, float, Decimal)):
        raise TypeError(f"expected number, got {type(value).__name__}")
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"{value} is not a finite number")
    return result


def _to_decimal(value: Any) -> Decimal:
    _reject_bool(value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"{value!r} is not a decimal number") from None
    else:
        raise TypeError(f"expected decimal, got {type(value).__name__}")
    if not result.is_finite():
        raise ValueError(f"{value} is not a finite decimal")
    return result


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (bytes, bytearray)) and len(value) == 1:
        value = value[0]
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(f"{value!r} is not a boolean")


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        return uuid.UUID(value)
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return uuid.UUID(bytes_le=bytes(value))
    raise TypeError(f"expected uuid, got {type(value).__name__}")


def _to_aware_datetime(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime has no UTC offset")
    return value


def _to_naive_datetime(value: Any) -> datetime:
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime, got {type(value).__name__}")
    if value.tzinfo is not None:
        raise ValueError("datetime carries a UTC offset")
    return value


def _to_date(value: Any) -> date:
    if isinstance(value, datetime) or not isinstance(value, date):
        raise TypeError(f"expected date, got {type(value).__name__}")
    return value


def _to_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    # PyMySQL returns TIME columns as timedelta.
    if isinstance(value, timedelta):
        if not timedelta(0) <= value < timedelta(days=1):
            raise ValueError(f"{value} is not a time of day")
        return (datetime.min + value).time()
    raise TypeError(f"expected time, got {type(value).__name__}")


COERCERS: dict[ValueType, Callable[[Any], Any]] = {
    ValueType.STRING: _to_string,
    ValueType.INT32: _to_int32,
    ValueType.INT64: _to_int64,
    ValueType.FLOAT32: _to_float,
    ValueType.FLOAT64: _to_float,
    ValueType.DECIMAL: _to_decimal,
    ValueType.BOOL: _to_bool,
    ValueType.UUID: _to_uuid,
    ValueType.DATETIME_WITH_OFFSET: _to_aware_datetime,
    ValueType.DATETIME_NAIVE: _to_naive_datetime,
    ValueType.DATE: _to_date,
    ValueType.TIME: _to_time,
}
