"""
Export Writer
=============

Streams one configured table from a backend into a file, as a JSON array of
flat objects or as a single SQL INSERT statement.

Per table:
  1. introspect the table's schema
  2. SELECT the configured columns with the configured filter
  3. decode each row as it is fetched
  4. write it straight to a staging file next to the target
  5. move the staging file over `<table>.json` / `<table>.sql` on success

A failed export never leaves a partial file in place of the target.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Literal, TextIO

from db_export.app.config import TableConfig
from db_export.backends import Backend
from db_export.values import row_to_json, row_to_sql_tuple

from .row_decoder import RowDecoder

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class OutputWriteError(Exception):
    """Raised when an output file cannot be created or written."""
    pass


# =============================================================================
# CONSTANTS
# =============================================================================

OutputType = Literal["json", "sql"]

EMPTY_SQL_TEMPLATE = "-- no rows in {table} matched the export filter\n"


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ExportResult:
    """Outcome of exporting one table."""
    table: str
    path: Path
    row_count: int
    output_type: OutputType


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def build_select(table: TableConfig) -> str:
    """SELECT statement for the configured columns, in configured order."""
    return (
        f"SELECT {','.join(table.columns)} "
        f"FROM {table.name} "
        f"WHERE {table.get_where_clause()}"
    )


class ExportWriter:
    """
    Exports tables from one backend into an output directory.

    Args:
        backend: Backend holding the single live connection.
        output_dir: Directory receiving `<table>.json` / `<table>.sql`.
    """

    def __init__(self, backend: Backend, output_dir: str | Path):
        self.backend = backend
        self.output_dir = Path(output_dir)

    def export(self, table: TableConfig, output_type: OutputType) -> ExportResult:
        if output_type == "json":
            return self.export_as_json(table)
        if output_type == "sql":
            return self.export_as_sql(table)
        raise ValueError(f"Unknown output type: {output_type}")

    def export_as_json(self, table: TableConfig) -> ExportResult:
        """Write `<table>.json`: a JSON array with one object per row."""

        def write_rows(decoder: RowDecoder, rows, out: TextIO) -> int:
            count = 0
            out.write("[")
            for row in rows:
                if count:
                    out.write(",")
                out.write(row_to_json(decoder.decode(row)))
                count += 1
            out.write("]")
            return count

        return self._export(table, "json", write_rows)

    def export_as_sql(self, table: TableConfig) -> ExportResult:
        """Write `<table>.sql`: one INSERT statement holding every row."""
        dialect = self.backend.dialect

        def write_rows(decoder: RowDecoder, rows, out: TextIO) -> int:
            count = 0
            for row in rows:
                if count:
                    out.write(",")
                else:
                    out.write(f"INSERT INTO {table.name} ({','.join(table.columns)}) VALUES ")
                out.write(row_to_sql_tuple(list(decoder.decode(row).values()), dialect))
                count += 1
            if count:
                out.write(";")
            else:
                out.write(EMPTY_SQL_TEMPLATE.format(table=table.name))
            return count

        return self._export(table, "sql", write_rows)

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _export(
        self,
        table: TableConfig,
        output_type: OutputType,
        write_rows: Callable[[RowDecoder, object, TextIO], int],
    ) -> ExportResult:
        logger.info("Exporting table '%s' as %s", table.name, output_type)

        schema = self.backend.introspect(table.name)
        decoder = RowDecoder(
            table.name,
            table.columns,
            schema,
            self.backend.resolver,
            self.backend.cell,
        )

        sql = build_select(table)
        logger.debug("Export query: %s", sql)

        target = self.output_dir / f"{table.name}.{output_type}"
        with _staged_file(target) as out:
            rows = self.backend.stream(sql)
            try:
                row_count = write_rows(decoder, rows, out)
            finally:
                rows.close()

        logger.info("Wrote %d rows of '%s' to %s", row_count, table.name, target)
        return ExportResult(table.name, target, row_count, output_type)


@contextmanager
def _staged_file(target: Path) -> Iterator[TextIO]:
    """
    Write to a temporary file beside `target`.

    On a clean exit the temporary file replaces `target`; on any error it is
    removed and `target` is left untouched.
    """
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.",
            suffix=".part",
            dir=target.parent,
        )
    except OSError as e:
        raise OutputWriteError(f"Cannot create {target}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as out:
            yield out
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, target)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise OutputWriteError(f"Failed to write {target}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
