"""Resynchronize a table's ``id`` sequence after its rows were reloaded."""

from __future__ import annotations

from sampledump.exceptions import TransportError
from sampledump.logging_utils import get_logger
from sampledump.models import Result, Success, TableConfiguration
from sampledump.transport import Transport

logger = get_logger(__name__)


def serial_sequence_sql(table_configuration: TableConfiguration) -> str:
    return f"SELECT PG_GET_SERIAL_SEQUENCE('{table_configuration.qualified_table_name}', 'id') AS name"


def setval_sql(sequence_name: str, table_configuration: TableConfiguration) -> str:
    return (
        f"SELECT setval('{sequence_name}', "
        f"coalesce((SELECT MAX(id) FROM {table_configuration.qualified_table_name}),1))"
    )


def lookup_sequence_name(transport: Transport, table_configuration: TableConfiguration) -> str | None:
    """Name of the sequence backing ``id``, or None when there is none.

    A missing ``id`` column makes the lookup statement fail; that counts as
    "no sequence" too.
    """
    try:
        row = transport.execute(serial_sequence_sql(table_configuration)).first()
    except TransportError as e:
        if not e.is_statement_error:
            raise
        return None
    name = row.get("name") if row else None
    return name or None


def reset_sequence(transport: Transport, table_configuration: TableConfiguration) -> Result:
    table = table_configuration.qualified_table_name
    sequence_name = lookup_sequence_name(transport, table_configuration)
    if sequence_name is None:
        logger.info("No id sequence to reset", extra={"table": table})
        return Success(True)

    transport.execute(setval_sql(sequence_name, table_configuration))
    logger.info("Sequence reset", extra={"table": table, "sequence": sequence_name})
    return Success(True)
