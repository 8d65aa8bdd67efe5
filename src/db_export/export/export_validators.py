"""
Export Validators
=================

Validates exported files for correctness.
Performs sanity checks on JSON and SQL outputs.
"""

import json
from pathlib import Path


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ExportValidationError(Exception):
    """Raised when export validation fails."""
    pass


# =============================================================================
# JSON VALIDATION
# =============================================================================

def validate_json_export(file_paths: list[str | Path]) -> bool:
    """
    Validate JSON files are parseable arrays of flat objects.

    Args:
        file_paths: List of JSON file paths to validate.

    Returns:
        True if all files are valid.

    Raises:
        ExportValidationError: If validation fails.
    """
    for path in file_paths:
        if not Path(path).exists():
            raise ExportValidationError(f"JSON file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ExportValidationError(f"Invalid JSON in {path}: {e}") from e

        if not isinstance(data, list):
            raise ExportValidationError(f"JSON export is not an array: {path}")

        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise ExportValidationError(f"Element {index} of {path} is not an object")
            if any(isinstance(v, (dict, list)) for v in record.values()):
                raise ExportValidationError(f"Element {index} of {path} is not flat")

    return True


# =============================================================================
# SQL VALIDATION
# =============================================================================

def validate_sql_export(file_path: str | Path) -> bool:
    """
    Validate SQL file has basic structure and syntax.

    Performs lightweight checks:
    - File exists and is non-empty
    - Either a single INSERT statement terminated by ';'
      or a comment-only file (table had no matching rows)
    - Balanced parentheses and quotes outside string literals

    Args:
        file_path: Path to SQL file.

    Returns:
        True if file passes basic validation.

    Raises:
        ExportValidationError: If validation fails.
    """
    path = Path(file_path)

    if not path.exists():
        raise ExportValidationError(f"SQL file not found: {file_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ExportValidationError(f"Failed to read SQL {file_path}: {e}") from e

    if not content.strip():
        raise ExportValidationError(f"SQL file is empty: {file_path}")

    statement = _scan_statement(content, file_path)

    # Comment-only file: no rows were exported
    if not statement:
        return True

    if not statement.upper().startswith("INSERT INTO"):
        raise ExportValidationError(f"SQL file has no INSERT statement: {file_path}")

    values_at = statement.upper().find(" VALUES ")
    if values_at < 0 or not statement[values_at + len(" VALUES "):].lstrip().startswith("("):
        raise ExportValidationError(f"INSERT has no VALUES list: {file_path}")

    if not statement.endswith(";"):
        raise ExportValidationError(f"SQL statement is not terminated: {file_path}")

    return True


# =============================================================================
# INTERNAL HELPERS
# =============================================================================

def _scan_statement(content: str, file_path: str | Path) -> str:
    """
    Drop '--' comments outside string literals and check parentheses balance.

    Returns the statement text that remains, stripped.
    """
    kept = []
    depth = 0
    in_string = False
    i = 0

    while i < len(content):
        char = content[i]

        if in_string:
            kept.append(char)
            if char == "'":
                # A doubled quote toggles out and straight back in.
                in_string = False
            i += 1
            continue

        if content.startswith("--", i):
            end = content.find("\n", i)
            i = len(content) if end < 0 else end
            continue

        if char == "'":
            in_string = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise ExportValidationError(f"Unbalanced parentheses: {file_path}")

        kept.append(char)
        i += 1

    if in_string:
        raise ExportValidationError(f"Unterminated string literal: {file_path}")
    if depth != 0:
        raise ExportValidationError(f"Unbalanced parentheses: {file_path}")

    return "".join(kept).strip()
