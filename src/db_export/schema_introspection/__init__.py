"""
Schema Introspection Module
===========================

Native type descriptor resolution shared by all backends.
Catalog queries themselves live with each backend.
"""

from .type_resolver import (
    TypeResolver,
    UnsupportedTypeError,
    base_type,
    MYSQL_RESOLVER,
    MSSQL_RESOLVER,
    MYSQL_TYPE_MAPPING,
    MSSQL_TYPE_MAPPING,
)

__all__ = [
    # Primary API
    "TypeResolver",
    "base_type",
    "MYSQL_RESOLVER",
    "MSSQL_RESOLVER",

    # Mapping tables
    "MYSQL_TYPE_MAPPING",
    "MSSQL_TYPE_MAPPING",

    # Exceptions
    "UnsupportedTypeError",
]
