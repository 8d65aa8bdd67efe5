"""
SQL Server Backend
==================

SQL-Server-family backend built on pyodbc.

Schema comes from INFORMATION_SCHEMA.COLUMNS through a parameterized query
on the same connection that later streams the rows.
"""

import logging
import struct
from datetime import datetime, timedelta, timezone
from typing import Any, Generator

import pyodbc

from db_export.schema_introspection import MSSQL_RESOLVER
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

# pyodbc has no built-in conversion for DATETIMEOFFSET.
SQL_SS_TIMESTAMPOFFSET = -155

# SQLSTATEs pyodbc reports when a statement deadline expires.
TIMEOUT_SQLSTATES = frozenset({"HYT00", "HYT01"})

COLUMNS_QUERY = """
SELECT COLUMN_NAME, DATA_TYPE
FROM INFORMATION_SCHEMA.COLUMNS
WHERE TABLE_NAME = ?
"""

SCHEMA_FILTER = "AND TABLE_SCHEMA = ?"


# =============================================================================
# BACKEND
# =============================================================================

class MsSqlBackend(Backend):
    """Export capabilities for Microsoft SQL Server and Azure SQL."""

    name = "mssql"
    dialect = SqlDialect.MSSQL
    resolver = MSSQL_RESOLVER

    def _connect(self):
        try:
            cnxn = pyodbc.connect(
                build_conn_str(self.config),
                timeout=self.config.connect_timeout,
            )
        except pyodbc.Error as e:
            raise DatabaseConnectionError(
                f"Cannot connect to SQL Server at {self.config.server}: {e}"
            ) from e

        if self.config.timeout:
            cnxn.timeout = self.config.timeout
        cnxn.add_output_converter(SQL_SS_TIMESTAMPOFFSET, parse_datetimeoffset)
        return cnxn

    def introspect(self, table_name: str) -> dict[str, str]:
        sql, params = columns_query(table_name)
        logger.debug("Introspecting with: %s %s", sql.strip(), params)

        try:
            cursor = self.connection.cursor()
            try:
                cursor.execute(sql, params)
                rows = cursor.fetchall()
            finally:
                cursor.close()
        except pyodbc.Error as e:
            raise _wrap_error(
                e, SchemaIntrospectionError, f"Cannot read columns of table '{table_name}'"
            ) from e

        if not rows:
            raise SchemaIntrospectionError(f"No columns reported for table '{table_name}'")

        return {r[0]: r[1] for r in rows}

    def stream(self, sql: str) -> Generator[pyodbc.Row, None, None]:
        cursor = self.connection.cursor()
        try:
            try:
                cursor.execute(sql)
            except pyodbc.Error as e:
                raise _wrap_error(e, QueryExecutionError, "Export query failed") from e

            while True:
                try:
                    row = cursor.fetchone()
                except pyodbc.Error as e:
                    raise _wrap_error(e, QueryExecutionError, "Fetching rows failed") from e
                if row is None:
                    break
                yield row
        finally:
            cursor.close()

    def cell(self, row: pyodbc.Row, position: int, column: str) -> Any:
        return row[position]


# =============================================================================
# PUBLIC HELPERS
# =============================================================================

def build_conn_str(config) -> str:
    server = config.server
    if config.port:
        server = f"{server},{config.port}"
    parts = [
        f"DRIVER={{{config.driver}}}",
        f"SERVER={server}",
        f"DATABASE={config.database}",
        f"UID={config.user}",
        f"PWD={config.password}",
        "Encrypt=no",
        "TrustServerCertificate=yes",
    ]
    return ";".join(parts) + ";"


def columns_query(table_name: str) -> tuple[str, list[str]]:
    """Catalog query and parameters for a plain or schema-qualified table."""
    if "." in table_name:
        schema, table = table_name.rsplit(".", 1)
        return COLUMNS_QUERY + SCHEMA_FILTER, [_unbracket(table), _unbracket(schema)]
    return COLUMNS_QUERY, [_unbracket(table_name)]


def parse_datetimeoffset(raw: bytes) -> datetime | None:
    """Output converter for DATETIMEOFFSET columns."""
    if raw is None:
        return None
    year, month, day, hour, minute, second, nanos, offset_h, offset_m = struct.unpack(
        "<6hI2h", raw
    )
    return datetime(
        year, month, day, hour, minute, second, nanos // 1000,
        tzinfo=timezone(timedelta(hours=offset_h, minutes=offset_m)),
    )


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _unbracket(identifier: str) -> str:
    return identifier.strip().strip("[]")


def _wrap_error(error: pyodbc.Error, fallback: type, message: str) -> Exception:
    """Pick the export exception for a driver error."""
    state = error.args[0] if error.args else None
    if state in TIMEOUT_SQLSTATES:
        return fallback(f"{message}: query deadline exceeded ({error})")
    if isinstance(error, (pyodbc.OperationalError, pyodbc.InterfaceError)):
        return DatabaseConnectionError(f"{message}: connection lost ({error})")
    return fallback(f"{message}: {error}")
