"""
MySQL Backend
=============

MySQL-family backend built on PyMySQL.

Schema comes from `DESCRIBE <table>`; rows are streamed through an
unbuffered dictionary cursor so results are never held in memory.
"""

import logging
from typing import Any, Generator

import pymysql
from pymysql.cursors import DictCursor, SSDictCursor

from db_export.schema_introspection import MYSQL_RESOLVER
from db_export.values import SqlDialect

from .base import (
    Backend,
    DatabaseConnectionError,
    QueryExecutionError,
    SchemaIntrospectionError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_PORT = 3306

# Client error codes meaning the server went away or never answered.
CONNECTION_LOST_CODES = frozenset({2003, 2006, 2013, 2055})


# =============================================================================
# BACKEND
# =============================================================================

class MySqlBackend(Backend):
    """Export capabilities for MySQL and MariaDB."""

    name = "mysql"
    dialect = SqlDialect.MYSQL
    resolver = MYSQL_RESOLVER

    def _connect(self):
        try:
            return pymysql.connect(
                host=self.config.server,
                port=self.config.port or DEFAULT_PORT,
                user=self.config.user,
                password=self.config.password,
                database=self.config.database,
                charset="utf8mb4",
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.timeout,
                write_timeout=self.config.timeout,
            )
        except pymysql.MySQLError as e:
            raise DatabaseConnectionError(
                f"Cannot connect to MySQL at {self.config.server}: {e}"
            ) from e

    def introspect(self, table_name: str) -> dict[str, str]:
        sql = f"DESCRIBE {table_name}"
        logger.debug("Introspecting with: %s", sql)

        try:
            with self.connection.cursor(DictCursor) as cursor:
                cursor.execute(sql)
                rows = cursor.fetchall()
        except pymysql.MySQLError as e:
            raise _wrap_error(
                e, SchemaIntrospectionError, f"Cannot describe table '{table_name}'"
            ) from e

        if not rows:
            raise SchemaIntrospectionError(f"No columns reported for table '{table_name}'")

        return {_text(row["Field"]): _text(row["Type"]) for row in rows}

    def stream(self, sql: str) -> Generator[dict[str, Any], None, None]:
        cursor = self.connection.cursor(SSDictCursor)
        try:
            try:
                cursor.execute(sql)
            except pymysql.MySQLError as e:
                raise _wrap_error(e, QueryExecutionError, "Export query failed") from e

            while True:
                try:
                    row = cursor.fetchone()
                except pymysql.MySQLError as e:
                    raise _wrap_error(e, QueryExecutionError, "Fetching rows failed") from e
                if row is None:
                    break
                yield row
        finally:
            cursor.close()

    def cell(self, row: dict[str, Any], position: int, column: str) -> Any:
        return row[column]


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _wrap_error(error: pymysql.MySQLError, fallback: type, message: str) -> Exception:
    """Pick the export exception for a driver error."""
    code = error.args[0] if error.args else None
    if isinstance(error, pymysql.err.OperationalError) and code in CONNECTION_LOST_CODES:
        return DatabaseConnectionError(f"{message}: connection lost ({error})")
    return fallback(f"{message}: {error}")


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)
