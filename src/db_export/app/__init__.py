"""
App Module
==========

Configuration, exit-code mapping and the command-line entry point.
"""

from .config import (
    VERSION,
    APP_NAME,
    ConfigError,
    DatabaseConfig,
    TableConfig,
    ExportConfig,
    load_config,
    config_json_schema,
    get_config_path,
    get_output_dir,
    setup_logging,
)
from .exceptions import EXCEPTION_MAP, get_exit_code, report_error

__all__ = [
    "VERSION",
    "APP_NAME",
    "ConfigError",
    "DatabaseConfig",
    "TableConfig",
    "ExportConfig",
    "load_config",
    "config_json_schema",
    "get_config_path",
    "get_output_dir",
    "setup_logging",
    "EXCEPTION_MAP",
    "get_exit_code",
    "report_error",
]
