"""
Values Module
=============

Canonical, backend-agnostic cell values and their JSON / SQL renderings.
"""

from .canonical import (
    CanonicalValue,
    ValueType,
    SqlDialect,
    row_to_json,
    row_to_sql_tuple,
    quote_sql_string,
    SQL_NULL,
)

__all__ = [
    # Data structures
    "CanonicalValue",
    "ValueType",
    "SqlDialect",

    # Rendering
    "row_to_json",
    "row_to_sql_tuple",
    "quote_sql_string",
    "SQL_NULL",
]
