"""
Backends Module
===============

Database backends behind one capability interface. The backend is chosen
once, from configuration, by `get_backend`.

Backend modules are imported on selection, so a run only loads the driver
it actually uses (pyodbc needs the system ODBC libraries).
"""

import importlib

from db_export.app.config import DatabaseConfig

from .base import (
    Backend,
    DatabaseConnectionError,
    SchemaIntrospectionError,
    QueryExecutionError,
)


# database type -> (module, class)
BACKENDS: dict[str, tuple[str, str]] = {
    "mysql": ("db_export.backends.mysql_backend", "MySqlBackend"),
    "mssql": ("db_export.backends.mssql_backend", "MsSqlBackend"),
}


def get_backend_class(database_type: str) -> type[Backend]:
    module_name, class_name = BACKENDS[database_type]
    return getattr(importlib.import_module(module_name), class_name)


def get_backend(config: DatabaseConfig) -> Backend:
    """Construct the backend named by `config.database_type`."""
    return get_backend_class(config.database_type)(config)


__all__ = [
    # Primary API
    "get_backend",
    "get_backend_class",
    "BACKENDS",

    # Interface
    "Backend",

    # Exceptions
    "DatabaseConnectionError",
    "SchemaIntrospectionError",
    "QueryExecutionError",
]
