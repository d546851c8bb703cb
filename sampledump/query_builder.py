"""Build the bounded, column-masking SELECT used to sample a table."""

from __future__ import annotations

from sampledump.logging_utils import get_logger
from sampledump.models import TableConfiguration
from sampledump.transport import Transport

logger = get_logger(__name__)

ROW_LIMIT = 100000
PLACEHOLDER_WORDS = 3


def quote_identifier(name: str) -> str:
    return f'"{name}"'


def table_columns_sql(table_configuration: TableConfiguration) -> str:
    return (
        "SELECT column_name FROM information_schema.columns\n"
        f"WHERE table_schema = '{table_configuration.schema_name}'\n"
        f"AND table_name = '{table_configuration.table_name}'\n"
        "ORDER BY ordinal_position\n"
    )


def table_columns(transport: Transport, table_configuration: TableConfiguration) -> list[str]:
    """Column names of the table in catalog (ordinal) order."""
    results = transport.execute(table_columns_sql(table_configuration))
    return [row["column_name"] for row in results]


def normal_columns(columns: list[str], table_configuration: TableConfiguration) -> list[str]:
    masked = set(table_configuration.obfuscate_columns)
    return [quote_identifier(column) for column in columns if column not in masked]


def lorem_ipsum_columns(table_configuration: TableConfiguration, function_schema: str) -> list[str]:
    return [
        f"{function_schema}.lorem_ipsum({PLACEHOLDER_WORDS}) AS {quote_identifier(column)}"
        for column in table_configuration.obfuscate_columns
    ]


def build_extraction_sql(
    columns: list[str],
    table_configuration: TableConfiguration,
    function_schema: str,
) -> str:
    """Render the sampling SELECT from an already fetched column list.

    Nothing here is validated or escaped; a bad ``dump_where`` or masked column
    name simply yields SQL the server will reject.
    """
    unknown = [name for name in table_configuration.obfuscate_columns if name not in columns]
    if unknown:
        logger.warning(
            "obfuscate_columns missing from catalog columns (names are case-sensitive)",
            extra={"table": table_configuration.qualified_table_name, "columns": unknown},
        )
    select_list = normal_columns(columns, table_configuration) + lorem_ipsum_columns(
        table_configuration, function_schema
    )
    return (
        f"SELECT {', '.join(select_list)}\n"
        f"FROM {table_configuration.qualified_table_name}\n"
        f"WHERE {table_configuration.dump_where}\n"
        f"LIMIT {ROW_LIMIT}\n"
    )


def extraction_sql(
    transport: Transport,
    table_configuration: TableConfiguration,
    function_schema: str,
) -> str:
    columns = table_columns(transport, table_configuration)
    return build_extraction_sql(columns, table_configuration, function_schema)
