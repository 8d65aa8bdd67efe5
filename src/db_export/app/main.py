"""
Command-Line Entry Point
========================

Exports every table listed in the configuration file.

Examples:
  db-export --config config.json --output ./exports --type sql

  db-export --write-config-schema schema.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from db_export.app.config import (
    APP_NAME,
    VERSION,
    ExportConfig,
    config_json_schema,
    get_config_path,
    get_output_dir,
    load_config,
    setup_logging,
)
from db_export.app.exceptions import EXIT_OK, report_error
from db_export.backends import get_backend
from db_export.export import (
    ExportResult,
    ExportWriter,
    OutputWriteError,
    validate_json_export,
    validate_sql_export,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ARGUMENTS
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Export database tables to JSON or SQL INSERT files",
    )
    ap.add_argument(
        "--config",
        help="configuration file (default: $DB_EXPORT_CONFIG or ./config.json)",
    )
    ap.add_argument(
        "--output",
        help="output directory (default: $DB_EXPORT_OUTPUT_DIR or /tmp)",
    )
    ap.add_argument(
        "--type",
        dest="output_type",
        choices=["json", "sql"],
        default="json",
        help="output type (default: json)",
    )
    ap.add_argument(
        "--validate",
        action="store_true",
        help="check every written file before finishing",
    )
    ap.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    ap.add_argument(
        "--write-config-schema",
        metavar="PATH",
        help="write the configuration JSON Schema to PATH and exit",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return ap


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def run_export(
    config: ExportConfig,
    output_dir: Path,
    output_type: str,
    validate: bool = False,
) -> list[ExportResult]:
    """
    Export every configured table, in order, over one connection.

    The first failure stops the run.
    """
    results = []
    with get_backend(config.database) as backend:
        writer = ExportWriter(backend, output_dir)
        for table in config.tables:
            result = writer.export(table, output_type)
            if validate:
                _validate(result)
            results.append(result)
    return results


def write_config_schema(path: str | Path) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config_json_schema(), f, indent=2)
    except OSError as e:
        raise OutputWriteError(f"Cannot write {path}: {e}") from e


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.write_config_schema:
            write_config_schema(args.write_config_schema)
            logger.info("Configuration schema written to %s", args.write_config_schema)
            return EXIT_OK

        config = load_config(get_config_path(args.config))
        try:
            output_dir = get_output_dir(args.output)
        except OSError as e:
            raise OutputWriteError(f"Cannot create output directory: {e}") from e

        results = run_export(config, output_dir, args.output_type, args.validate)
    except Exception as e:
        return report_error(e)

    total = sum(r.row_count for r in results)
    logger.info("Exported %d table(s), %d row(s) to %s", len(results), total, output_dir)
    return EXIT_OK


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _validate(result: ExportResult) -> None:
    if result.output_type == "json":
        validate_json_export([result.path])
    else:
        validate_sql_export(result.path)


if __name__ == "__main__":
    sys.exit(main())
