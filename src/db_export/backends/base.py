"""
Backend Interface
=================

The capability every database backend provides to the export engine:

- connect / close a single live connection
- introspect a table into a schema map (column -> native type descriptor)
- stream the rows of a query lazily, one at a time
- extract a cell from one of its own rows

Backends also carry their type resolver and SQL dialect so nothing past
backend selection needs to know which database is in use.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generator

from db_export.app.config import DatabaseConfig
from db_export.schema_introspection import TypeResolver
from db_export.values import SqlDialect

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class DatabaseConnectionError(Exception):
    """Raised when the database is unreachable or the connection drops."""
    pass


class SchemaIntrospectionError(Exception):
    """Raised when a table's catalog metadata cannot be read."""
    pass


class QueryExecutionError(Exception):
    """Raised when the export query is rejected by the database."""
    pass


# =============================================================================
# INTERFACE
# =============================================================================

class Backend(ABC):
    """One database connection plus the backend-specific export capabilities."""

    name: str = ""
    dialect: SqlDialect
    resolver: TypeResolver

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection = None

    def connect(self):
        """Return the live connection, opening it on first use."""
        if self._connection is None:
            logger.info(
                "Connecting to %s database '%s' on %s",
                self.name, self.config.database, self.config.server
            )
            self._connection = self._connect()
        return self._connection

    @property
    def connection(self):
        return self.connect()

    def close(self) -> None:
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @abstractmethod
    def _connect(self):
        """Open a new driver connection. Raises DatabaseConnectionError."""

    @abstractmethod
    def introspect(self, table_name: str) -> dict[str, str]:
        """Return the schema map of `table_name`. Raises SchemaIntrospectionError."""

    @abstractmethod
    def stream(self, sql: str) -> Generator[Any, None, None]:
        """Execute `sql` and return a generator over its rows, forward only."""

    @abstractmethod
    def cell(self, row: Any, position: int, column: str) -> Any:
        """Extract one cell from a row produced by `stream`."""
