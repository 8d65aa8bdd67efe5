"""
Type Resolver
=============

Maps a native type descriptor reported by a database catalog
(e.g. "varchar(255)", "int(11) unsigned", "DECIMAL(10,2)") to a canonical
`ValueType`.

Resolution is table driven: each backend owns an explicit mapping from base
type name to tag. Unknown base types are an error, never a guess.
"""

import re

from db_export.values import ValueType


# =============================================================================
# EXCEPTIONS
# =============================================================================

class UnsupportedTypeError(Exception):
    """Raised when a native type has no canonical mapping."""
    pass


# =============================================================================
# CONSTANTS
# =============================================================================

# Leading identifier of the descriptor; parameters and modifiers are dropped.
BASE_TYPE_PATTERN = re.compile(r"^\s*([a-z][a-z0-9_]*)")

MYSQL_TYPE_MAPPING: dict[str, ValueType] = {
    # Text
    "varchar": ValueType.STRING,
    "char": ValueType.STRING,
    "text": ValueType.STRING,
    "tinytext": ValueType.STRING,
    "mediumtext": ValueType.STRING,
    "longtext": ValueType.STRING,
    "enum": ValueType.STRING,
    # Integers
    "tinyint": ValueType.INT32,
    "smallint": ValueType.INT32,
    "mediumint": ValueType.INT32,
    "int": ValueType.INT32,
    "integer": ValueType.INT32,
    "bigint": ValueType.INT64,
    # Floating point / exact numerics
    "float": ValueType.FLOAT32,
    "double": ValueType.FLOAT64,
    "decimal": ValueType.DECIMAL,
    "numeric": ValueType.DECIMAL,
    # Booleans
    "boolean": ValueType.BOOL,
    "bool": ValueType.BOOL,
    "bit": ValueType.BOOL,
    # Temporal
    "datetime": ValueType.DATETIME_NAIVE,
    "timestamp": ValueType.DATETIME_NAIVE,
    "date": ValueType.DATE,
    "time": ValueType.TIME,
}

MSSQL_TYPE_MAPPING: dict[str, ValueType] = {
    # Text
    "varchar": ValueType.STRING,
    "nvarchar": ValueType.STRING,
    "char": ValueType.STRING,
    "nchar": ValueType.STRING,
    "text": ValueType.STRING,
    "ntext": ValueType.STRING,
    # Integers
    "int": ValueType.INT32,
    "bigint": ValueType.INT64,
    # Floating point / exact numerics
    "float": ValueType.FLOAT32,
    "real": ValueType.FLOAT32,
    "decimal": ValueType.DECIMAL,
    "numeric": ValueType.DECIMAL,
    "money": ValueType.DECIMAL,
    # Booleans
    "smallint": ValueType.BOOL,
    "bit": ValueType.BOOL,
    # Identifiers
    "uniqueidentifier": ValueType.UUID,
    # Temporal
    "datetime": ValueType.DATETIME_NAIVE,
    "datetime2": ValueType.DATETIME_NAIVE,
    "smalldatetime": ValueType.DATETIME_NAIVE,
    "datetimeoffset": ValueType.DATETIME_WITH_OFFSET,
    "date": ValueType.DATE,
    "time": ValueType.TIME,
}


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def base_type(native_descriptor: str) -> str:
    """
    Extract the base type name from a native descriptor.

    >>> base_type("varchar(255)")
    'varchar'
    >>> base_type("int(10) unsigned")
    'int'
    """
    match = BASE_TYPE_PATTERN.match(native_descriptor.lower())
    if not match:
        raise UnsupportedTypeError(f"Unrecognised type descriptor: {native_descriptor!r}")
    return match.group(1)


class TypeResolver:
    """Resolves native descriptors using one backend's mapping table."""

    def __init__(self, backend_name: str, mapping: dict[str, ValueType]):
        self.backend_name = backend_name
        self.mapping = mapping

    def resolve(self, native_descriptor: str) -> ValueType:
        """
        Resolve a native descriptor to its canonical tag.

        Raises:
            UnsupportedTypeError: If the base type is not in the mapping.
        """
        name = base_type(native_descriptor)
        try:
            return self.mapping[name]
        except KeyError:
            raise UnsupportedTypeError(
                f"{self.backend_name} type {native_descriptor!r} has no canonical mapping"
            ) from None


MYSQL_RESOLVER = TypeResolver("mysql", MYSQL_TYPE_MAPPING)
MSSQL_RESOLVER = TypeResolver("mssql", MSSQL_TYPE_MAPPING)
