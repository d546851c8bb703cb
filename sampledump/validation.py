"""Fail-fast validation of a table configuration against the live catalog."""

from __future__ import annotations

from sampledump.exceptions import TransportError
from sampledump.logging_utils import get_logger
from sampledump.models import Failure, Result, Success, TableConfiguration, ValidationFailure, chain
from sampledump.transport import Transport

logger = get_logger(__name__)


class TableConfigurationValidator:
    """Runs four checks in order; the first failing check decides the result.

    Only statements the server rejects count as failures. Connectivity errors
    propagate to the caller.
    """

    def __init__(self, table_configuration: TableConfiguration, transport: Transport):
        self.table_configuration = table_configuration
        self.transport = transport

    def validation_result(self) -> Result:
        result = chain(
            self.schema_existence_result,
            self.table_existence_result,
            self.dump_where_condition_validity_result,
            self.obfuscate_columns_validity_result,
        )
        if result.is_failure:
            logger.warning(
                "Table configuration invalid",
                extra={"table": self.table_configuration.qualified_table_name, "reason": str(result.error)},
            )
        return result

    def _exists(self, sql: str) -> bool:
        row = self.transport.execute(sql).first()
        return bool(row and row.get("exists"))

    def _statement_accepted(self, sql: str) -> bool:
        try:
            self.transport.execute(sql)
        except TransportError as e:
            if not e.is_statement_error:
                raise
            logger.debug("Validation statement rejected", extra=e.details)
            return False
        return True

    def schema_existence_result(self) -> Result:
        schema_name = self.table_configuration.schema_name
        sql = (
            "SELECT EXISTS (\n"
            "  SELECT *\n"
            "  FROM pg_catalog.pg_namespace\n"
            f"  WHERE nspname = '{schema_name}'\n"
            ");\n"
        )
        if self._exists(sql):
            return Success(True)
        return Failure(ValidationFailure(f"schema {schema_name} does not exist"))

    def table_existence_result(self) -> Result:
        config = self.table_configuration
        sql = (
            "SELECT EXISTS (\n"
            "  SELECT 1\n"
            "  FROM   information_schema.tables\n"
            f"  WHERE  table_schema = '{config.schema_name}'\n"
            f"  AND    table_name = '{config.table_name}'\n"
            ");\n"
        )
        if self._exists(sql):
            return Success(True)
        return Failure(ValidationFailure(f"{config.qualified_table_name} does not exist"))

    def dump_where_condition_validity_result(self) -> Result:
        config = self.table_configuration
        sql = (
            f"SELECT * FROM {config.qualified_table_name}\n"
            f"WHERE {config.dump_where}\n"
            "LIMIT 1\n"
        )
        if self._statement_accepted(sql):
            return Success(True)
        return Failure(ValidationFailure(f"dump_where for {config.qualified_table_name} invalid"))

    def obfuscate_columns_validity_result(self) -> Result:
        config = self.table_configuration
        if not config.obfuscate_columns:
            return Success(True)

        sql = f"SELECT {', '.join(config.obfuscate_columns)} FROM {config.qualified_table_name} LIMIT 1"
        if self._statement_accepted(sql):
            return Success(True)
        return Failure(ValidationFailure(f"obfuscate_columns for {config.qualified_table_name} invalid"))
