"""
Tests for canonical values and their JSON / SQL renderings.
"""

import json
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from db_export.values import (
    CanonicalValue,
    SqlDialect,
    ValueType,
    row_to_json,
    row_to_sql_tuple,
)


@pytest.mark.parametrize("value_type", list(ValueType))
def test_null_renders_as_null(value_type):
    value = CanonicalValue(value_type)
    assert value.is_null
    assert value.to_json() is None
    assert json.dumps(value.to_json()) == "null"
    for dialect in SqlDialect:
        assert value.to_sql_literal(dialect) == "NULL"


def test_quote_doubling():
    value = CanonicalValue(ValueType.STRING, "O'Brien")
    assert value.to_sql_literal(SqlDialect.MYSQL) == "'O''Brien'"
    assert value.to_sql_literal(SqlDialect.MSSQL) == "N'O''Brien'"
    assert json.dumps(value.to_json()) == '"O\'Brien"'


def test_backslashes_escaped_for_mysql_only():
    value = CanonicalValue(ValueType.STRING, "C:\\temp")
    assert value.to_sql_literal(SqlDialect.MYSQL) == "'C:\\\\temp'"
    assert value.to_sql_literal(SqlDialect.MSSQL) == "N'C:\\temp'"


def test_mssql_strings_are_unicode_literals():
    value = CanonicalValue(ValueType.STRING, "Zoë 東京")
    assert value.to_sql_literal(SqlDialect.MSSQL) == "N'Zoë 東京'"
    assert value.to_sql_literal(SqlDialect.MYSQL) == "'Zoë 東京'"

    stamp = CanonicalValue(ValueType.DATE, date(2024, 1, 2))
    assert stamp.to_sql_literal(SqlDialect.MSSQL) == "'2024-01-02'"


def test_empty_string_is_not_null():
    value = CanonicalValue(ValueType.STRING, "")
    assert value.to_json() == ""
    assert value.to_sql_literal(SqlDialect.MYSQL) == "''"


def test_bool_literals_per_dialect():
    true_value = CanonicalValue(ValueType.BOOL, True)
    false_value = CanonicalValue(ValueType.BOOL, False)
    assert true_value.to_sql_literal(SqlDialect.MYSQL) == "TRUE"
    assert false_value.to_sql_literal(SqlDialect.MYSQL) == "FALSE"
    assert true_value.to_sql_literal(SqlDialect.MSSQL) == "1"
    assert false_value.to_sql_literal(SqlDialect.MSSQL) == "0"
    assert true_value.to_json() is True


def test_numbers_render_bare():
    assert CanonicalValue(ValueType.INT32, 0).to_sql_literal(SqlDialect.MYSQL) == "0"
    assert CanonicalValue(ValueType.INT64, -9007199254740993).to_sql_literal(
        SqlDialect.MSSQL
    ) == "-9007199254740993"
    assert CanonicalValue(ValueType.FLOAT64, 2.5).to_sql_literal(SqlDialect.MYSQL) == "2.5"
    assert CanonicalValue(ValueType.INT32, 0).to_json() == 0


def test_decimal_uses_exact_text_in_sql_and_number_in_json():
    value = CanonicalValue(ValueType.DECIMAL, Decimal("1E+2"))
    assert value.to_sql_literal(SqlDialect.MYSQL) == "100"

    price = CanonicalValue(ValueType.DECIMAL, Decimal("10.50"))
    assert price.to_sql_literal(SqlDialect.MSSQL) == "10.50"
    assert price.to_json() == 10.5
    assert json.dumps(price.to_json()) == "10.5"


def test_temporal_and_uuid_text_forms():
    stamp = datetime(2024, 1, 2, 3, 4, 5)
    aware = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))
    ident = uuid.UUID("12345678-1234-5678-1234-567812345678")

    assert CanonicalValue(ValueType.DATETIME_NAIVE, stamp).to_json() == "2024-01-02 03:04:05"
    assert CanonicalValue(ValueType.DATETIME_WITH_OFFSET, aware).to_json() == (
        "2024-01-02 03:04:05+02:00"
    )
    assert CanonicalValue(ValueType.DATE, date(2024, 1, 2)).to_json() == "2024-01-02"
    assert CanonicalValue(ValueType.TIME, time(3, 4, 5)).to_json() == "03:04:05"
    assert CanonicalValue(ValueType.UUID, ident).to_json() == str(ident)

    assert CanonicalValue(ValueType.DATETIME_NAIVE, stamp).to_sql_literal(
        SqlDialect.MSSQL
    ) == "'2024-01-02 03:04:05'"
    assert CanonicalValue(ValueType.UUID, ident).to_sql_literal(SqlDialect.MYSQL) == (
        "'12345678-1234-5678-1234-567812345678'"
    )


def test_payload_must_match_tag():
    with pytest.raises(TypeError):
        CanonicalValue(ValueType.INT32, "1")
    with pytest.raises(TypeError):
        CanonicalValue(ValueType.INT32, True)
    with pytest.raises(TypeError):
        CanonicalValue(ValueType.DATE, datetime(2024, 1, 2))
    with pytest.raises(TypeError):
        CanonicalValue(ValueType.DECIMAL, 1.5)


def test_tag_is_fixed():
    value = CanonicalValue(ValueType.STRING, "x")
    with pytest.raises(AttributeError):
        value.value_type = ValueType.INT32


def test_row_rendering():
    row = {
        "id": CanonicalValue(ValueType.INT32, 1),
        "name": CanonicalValue(ValueType.STRING, "Zoë"),
        "note": CanonicalValue(ValueType.STRING),
    }
    assert row_to_json(row) == '{"id":1,"name":"Zoë","note":null}'
    assert row_to_sql_tuple(list(row.values()), SqlDialect.MYSQL) == "(1,'Zoë',NULL)"
