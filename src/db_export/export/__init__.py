"""
Export Module
=============

The export engine: decodes streamed rows into canonical values and writes
them to JSON or SQL files, one file per table.
"""

from .row_decoder import (
    RowDecoder,
    decode_cell,
    MissingColumnSchemaError,
    RowDecodeError,
)

from .export_writer import (
    ExportWriter,
    ExportResult,
    build_select,
    OutputWriteError,
)

from .export_validators import (
    validate_json_export,
    validate_sql_export,
    ExportValidationError,
)

__all__ = [
    # Writer
    "ExportWriter",
    "ExportResult",
    "build_select",
    "OutputWriteError",

    # Decoding
    "RowDecoder",
    "decode_cell",
    "MissingColumnSchemaError",
    "RowDecodeError",

    # Validation
    "validate_json_export",
    "validate_sql_export",
    "ExportValidationError",
]
