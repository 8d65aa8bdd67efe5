"""
Tests for configuration loading.
"""

import json

import pytest
from pydantic import ValidationError

from db_export.app.config import (
    ConfigError,
    config_json_schema,
    get_config_path,
    get_output_dir,
    load_config,
)


VALID_CONFIG = {
    "database": {
        "type": "mssql",
        "server": "localhost",
        "database": "test_database",
        "user": "testuser",
        "password": "passw0rd!",
    },
    "tables": [
        {"name": "users", "columns": ["id", "name"], "where": "active=1"},
        {"name": "orders", "columns": ["id"]},
    ],
}


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_valid_config(tmp_path):
    config = load_config(write_config(tmp_path, VALID_CONFIG))

    assert config.database.database_type == "mssql"
    assert config.database.connect_timeout == 10
    assert config.database.timeout is None
    assert [t.name for t in config.tables] == ["users", "orders"]
    assert config.tables[0].columns == ["id", "name"]
    assert config.tables[0].get_where_clause() == "active=1"
    assert config.tables[1].get_where_clause() == "1=1"


def test_config_is_immutable(tmp_path):
    config = load_config(write_config(tmp_path, VALID_CONFIG))
    with pytest.raises(ValidationError):
        config.database.server = "elsewhere"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_config(path)


@pytest.mark.parametrize("mutate", [
    lambda c: c["database"].update(type="postgres"),
    lambda c: c["tables"][0].update(columns=[]),
    lambda c: c["tables"][0].update(columns=["id", "id"]),
    lambda c: c.update(tables=[]),
    lambda c: c["database"].pop("server"),
])
def test_schema_violations(tmp_path, mutate):
    data = json.loads(json.dumps(VALID_CONFIG))
    mutate(data)
    with pytest.raises(ConfigError):
        load_config(write_config(tmp_path, data))


def test_password_from_environment(tmp_path, monkeypatch):
    data = json.loads(json.dumps(VALID_CONFIG))
    del data["database"]["password"]

    monkeypatch.delenv("DB_EXPORT_DB_PASSWORD", raising=False)
    with pytest.raises(ConfigError):
        load_config(write_config(tmp_path, data))

    monkeypatch.setenv("DB_EXPORT_DB_PASSWORD", "from-env")
    assert load_config(write_config(tmp_path, data)).database.password == "from-env"


def test_paths_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_EXPORT_CONFIG", str(tmp_path / "other.json"))
    monkeypatch.setenv("DB_EXPORT_OUTPUT_DIR", str(tmp_path / "out"))

    assert get_config_path() == tmp_path / "other.json"
    assert get_config_path("explicit.json").name == "explicit.json"
    assert get_output_dir() == (tmp_path / "out").resolve()
    assert (tmp_path / "out").is_dir()


def test_config_json_schema_uses_file_field_names():
    schema = config_json_schema()
    database = schema["$defs"]["DatabaseConfig"]
    table = schema["$defs"]["TableConfig"]

    assert "type" in database["properties"]
    assert database["properties"]["type"]["enum"] == ["mysql", "mssql"]
    assert "where" in table["properties"]
    assert set(schema["required"]) == {"database", "tables"}
