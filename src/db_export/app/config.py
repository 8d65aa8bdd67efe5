"""
Application Configuration
=========================

Central configuration for the exporter: defaults, environment overrides,
the export configuration file models, and logging setup.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


# =============================================================================
# VERSION
# =============================================================================

VERSION = "0.3.0"
APP_NAME = "db-export"


# =============================================================================
# DEFAULTS (can be overridden via environment variables at call time)
# =============================================================================

CONFIG_PATH_ENV_VAR = "DB_EXPORT_CONFIG"
OUTPUT_DIR_ENV_VAR = "DB_EXPORT_OUTPUT_DIR"
DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_OUTPUT_DIR = "/tmp"
PASSWORD_ENV_VAR = "DB_EXPORT_DB_PASSWORD"

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"
DEFAULT_WHERE_CLAUSE = "1=1"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""
    pass


# =============================================================================
# CONFIGURATION MODELS
# =============================================================================

class DatabaseConfig(BaseModel):
    """Connection parameters for the source database."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    database_type: Literal["mysql", "mssql"] = Field(..., alias="type")
    server: str = Field(..., min_length=1, description="Host name or address")
    database: str = Field(..., min_length=1)
    user: str
    password: str
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    driver: str = Field(
        default=DEFAULT_ODBC_DRIVER,
        description="ODBC driver name (mssql only)"
    )
    connect_timeout: int = Field(default=10, ge=1, description="Seconds to wait for a connection")
    timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Per-query deadline in seconds; no deadline when omitted"
    )

    @model_validator(mode="before")
    @classmethod
    def password_from_environment(cls, data):
        if isinstance(data, dict) and data.get("password") is None:
            env_password = os.environ.get(PASSWORD_ENV_VAR)
            if env_password is not None:
                data = {**data, "password": env_password}
        return data


class TableConfig(BaseModel):
    """One table to export: name, ordered columns, optional filter."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    columns: list[str] = Field(
        ...,
        min_length=1,
        description="Columns to export; order is the output order"
    )
    where_clause: Optional[str] = Field(
        default=None,
        alias="where",
        description="Raw SQL predicate, passed through verbatim"
    )

    @model_validator(mode="after")
    def validate_unique_columns(self):
        seen = set()
        duplicates = []
        for column in self.columns:
            if column in seen:
                duplicates.append(column)
            seen.add(column)
        if duplicates:
            raise ValueError(f"Duplicate columns in table '{self.name}': {duplicates}")
        return self

    def get_where_clause(self) -> str:
        if self.where_clause is None or not self.where_clause.strip():
            return DEFAULT_WHERE_CLAUSE
        return self.where_clause


class ExportConfig(BaseModel):
    """Root model of the export configuration file."""
    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig
    tables: list[TableConfig] = Field(..., min_length=1)


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def load_config(path: str | Path) -> ExportConfig:
    """
    Load and validate the export configuration file.

    Args:
        path: Path to a JSON configuration file.

    Returns:
        Validated, immutable ExportConfig.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {config_path}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    try:
        return ExportConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def config_json_schema() -> dict:
    """JSON Schema of the configuration file, using the file's field names."""
    return ExportConfig.model_json_schema(by_alias=True)


def get_config_path(config_path: str | Path | None = None) -> Path:
    """Explicit path, else $DB_EXPORT_CONFIG, else ./config.json."""
    if config_path is not None:
        return Path(config_path)
    return Path(os.environ.get(CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH))


def get_output_dir(output_dir: str | Path | None = None) -> Path:
    """
    Get the output directory path, creating it if it doesn't exist.

    Falls back to $DB_EXPORT_OUTPUT_DIR, then /tmp.

    Returns:
        Absolute path to output directory.
    """
    if output_dir is None:
        output_dir = os.environ.get(OUTPUT_DIR_ENV_VAR, DEFAULT_OUTPUT_DIR)
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path.resolve()


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
