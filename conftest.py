"""
Shared test fixtures: an in-memory backend standing in for a live database.
"""

import pytest

from db_export.app.config import DatabaseConfig, TableConfig
from db_export.backends import Backend, QueryExecutionError
from db_export.schema_introspection import MSSQL_RESOLVER, MYSQL_RESOLVER
from db_export.values import SqlDialect


class FakeBackend(Backend):
    """
    Serves tables from memory.

    tables: {name: (schema_map, [row_dict, ...])}
    fail_after: raise QueryExecutionError after yielding this many rows.
    """

    def __init__(self, tables, database_type="mysql", fail_after=None):
        super().__init__(make_database_config(database_type))
        self.tables = tables
        self.fail_after = fail_after
        self.queries = []
        self.introspected = []
        self.connect_count = 0
        self.closed = False
        if database_type == "mssql":
            self.name, self.dialect, self.resolver = "mssql", SqlDialect.MSSQL, MSSQL_RESOLVER
        else:
            self.name, self.dialect, self.resolver = "mysql", SqlDialect.MYSQL, MYSQL_RESOLVER

    def _connect(self):
        self.connect_count += 1
        return self

    def close(self):
        self.closed = True
        self._connection = None

    def introspect(self, table_name):
        self.connect()
        self.introspected.append(table_name)
        schema, _ = self.tables[table_name]
        return dict(schema)

    def stream(self, sql):
        self.connect()
        self.queries.append(sql)
        table_name = sql.split(" FROM ")[1].split(" WHERE ")[0]
        _, rows = self.tables[table_name]
        for index, row in enumerate(rows):
            if self.fail_after is not None and index >= self.fail_after:
                raise QueryExecutionError("Fetching rows failed: connection reset")
            yield row

    def cell(self, row, position, column):
        return row[column]


def make_database_config(database_type="mysql", **overrides):
    data = {
        "type": database_type,
        "server": "localhost",
        "database": "test_database",
        "user": "testuser",
        "password": "passw0rd!",
    }
    data.update(overrides)
    return DatabaseConfig.model_validate(data)


USERS_SCHEMA = {"id": "int", "name": "varchar(100)", "active": "tinyint(1)"}
USERS_ROWS = [
    {"id": 1, "name": "Alice"},
    {"id": 2, "name": "Bob"},
]


@pytest.fixture
def users_backend():
    return FakeBackend({"users": (USERS_SCHEMA, USERS_ROWS)})


@pytest.fixture
def users_table():
    return TableConfig.model_validate(
        {"name": "users", "columns": ["id", "name"], "where": "active=1"}
    )
