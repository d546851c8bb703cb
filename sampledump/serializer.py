"""Serialize a sampled resultset into a replayable DELETE + INSERT script."""

from __future__ import annotations

import json
import math
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable

from psycopg2.extras import Range

from sampledump.logging_utils import get_logger
from sampledump.models import QueryResult, TableConfiguration
from sampledump.query_builder import quote_identifier
from sampledump.storage import write_lines

logger = get_logger(__name__)

NO_ROWS_STATEMENT = "SELECT 'No rows to load'"

# Column names the driver hands back under a different key
RESERVED_WORD_ALIASES = {"user": "current_user"}

_QUOTED_TYPES = (str, date, datetime, time, uuid.UUID)


def quote_literal(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def _array_element(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, list):
        return array_literal(value)
    if isinstance(value, bool):
        return "t" if value else "f"
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


def array_literal(values: list) -> str:
    """Array input syntax, e.g. ``{"a","b",NULL}``; nested lists become sub-arrays."""
    return "{" + ",".join(_array_element(v) for v in values) + "}"


def range_literal(value: Range) -> str:
    if value.isempty:
        return "empty"
    lower = "" if value.lower is None else _array_element(value.lower)
    upper = "" if value.upper is None else _array_element(value.upper)
    return ("[" if value.lower_inc else "(") + f"{lower},{upper}" + ("]" if value.upper_inc else ")")


def is_non_finite(value: Any) -> bool:
    if isinstance(value, Decimal):
        return not value.is_finite()
    return isinstance(value, float) and not math.isfinite(value)


def non_finite_literal(value: float | Decimal) -> str:
    is_nan = value.is_nan() if isinstance(value, Decimal) else math.isnan(value)
    if is_nan:
        return "'NaN'"
    return "'Infinity'" if value > 0 else "'-Infinity'"


def format_value(value: Any) -> str:
    """Render one value as a PostgreSQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if is_non_finite(value):
        return non_finite_literal(value)
    if isinstance(value, timedelta):
        return quote_literal(
            f"{value.days} days {value.seconds} seconds {value.microseconds} microseconds"
        )
    if isinstance(value, _QUOTED_TYPES):
        return quote_literal(str(value))
    if isinstance(value, list):
        return quote_literal(array_literal(value))
    if isinstance(value, Range):
        return quote_literal(range_literal(value))
    if isinstance(value, dict):
        return quote_literal(json.dumps(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return quote_literal("\\x" + bytes(value).hex())
    return str(value)


def row_value(row: dict[str, Any], column: str) -> Any:
    alias = RESERVED_WORD_ALIASES.get(column)
    if alias is not None and alias in row:
        return row[alias]
    return row[column]


def render_tuple(row: dict[str, Any], columns: list[str]) -> str:
    return "(" + ", ".join(format_value(row_value(row, column)) for column in columns) + ")"


def render_script(
    results: QueryResult,
    table_configuration: TableConfiguration,
    insert_columns: list[str],
) -> list[str]:
    """Script lines for a non-empty resultset, tuples in resultset order."""
    table_name = table_configuration.qualified_table_name
    lines = [
        f"DELETE FROM {table_name};",
        f"INSERT INTO {table_name} ({', '.join(quote_identifier(c) for c in insert_columns)})",
        "VALUES",
    ]
    last_index = len(results.rows) - 1
    for index, row in enumerate(results.rows):
        comma = "" if index == last_index else ","
        lines.append(render_tuple(row, insert_columns) + comma)
    return lines


def export_results_to_sql(
    results: QueryResult,
    table_configuration: TableConfiguration,
    sql_file_path: Path,
    fetch_insert_columns: Callable[[], list[str]],
) -> int:
    """Write the script for ``results`` to ``sql_file_path``.

    ``fetch_insert_columns`` is only called when there are rows to insert; it
    must return the table's full column list, masked columns included.
    Returns the number of rows written.
    """
    if results.row_count == 0:
        logger.info(
            "No rows matched; writing no-op script",
            extra={"table": table_configuration.qualified_table_name, "path": str(sql_file_path)},
        )
        write_lines(sql_file_path, [NO_ROWS_STATEMENT])
        return 0

    lines = render_script(results, table_configuration, fetch_insert_columns())
    write_lines(sql_file_path, lines)
    return results.row_count
