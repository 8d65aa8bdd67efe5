"""
Application Exceptions
======================

Maps internal exceptions to process exit codes.
"""

import logging

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTION MAPPING
# =============================================================================

EXIT_OK = 0
EXIT_UNEXPECTED = 1

# Maps exception class names to (exit_code, user_message)
EXCEPTION_MAP = {
    # Startup
    "ConfigError": (2, "Configuration could not be loaded."),

    # Database
    "DatabaseConnectionError": (3, "Could not connect to the database."),
    "SchemaIntrospectionError": (4, "Could not read the table schema."),
    "QueryExecutionError": (4, "The export query failed."),

    # Decoding
    "UnsupportedTypeError": (5, "A requested column has an unsupported type."),
    "MissingColumnSchemaError": (5, "A requested column does not exist."),
    "RowDecodeError": (6, "A row value could not be decoded."),

    # Output
    "OutputWriteError": (7, "Failed to write the output file."),
    "ExportValidationError": (8, "Exported file failed validation."),
}


def get_exit_code(exc: Exception) -> tuple[int, str]:
    """
    Convert an internal exception to an exit code and user message.

    Args:
        exc: The caught exception.

    Returns:
        (exit_code, user_message); unknown exceptions map to exit code 1.
    """
    exc_name = type(exc).__name__

    if exc_name in EXCEPTION_MAP:
        return EXCEPTION_MAP[exc_name]

    return EXIT_UNEXPECTED, "Internal error."


def report_error(exc: Exception) -> int:
    """Log a diagnostic for `exc` and return the exit code to use."""
    exit_code, user_message = get_exit_code(exc)
    if exit_code == EXIT_UNEXPECTED:
        logger.exception("%s %s", user_message, exc)
    else:
        logger.error("%s %s", user_message, exc)
    return exit_code
