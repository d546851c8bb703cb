"""Gateway exposing dump, load, validate, reset-sequence and wipe for one data store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from sampledump.config import DumpSettings
from sampledump.exceptions import SafetyViolationError
from sampledump.logging_utils import get_logger, log_operation
from sampledump.models import (
    DumpMetrics,
    Failure,
    MissingDumpFile,
    Result,
    Success,
    TableConfiguration,
)
from sampledump.query_builder import extraction_sql, table_columns
from sampledump.sequences import reset_sequence
from sampledump.serializer import export_results_to_sql
from sampledump.storage import dump_file_path, read_dump_file, sha256_file
from sampledump.transport import Transport
from sampledump.validation import TableConfigurationValidator

logger = get_logger(__name__)


class DataStoreGateway(ABC):
    """Operations a data store must offer to take part in sample dumps."""

    @abstractmethod
    def dump_to_local_file(self, table_configuration: TableConfiguration) -> Result:
        ...

    @abstractmethod
    def load_dump_file(self, table_configuration: TableConfiguration) -> Result:
        ...

    @abstractmethod
    def reset_sequence(self, table_configuration: TableConfiguration) -> Result:
        ...

    @abstractmethod
    def is_valid(self, table_configuration: TableConfiguration) -> Result:
        ...

    @abstractmethod
    def wipe_table(self, table_configuration: TableConfiguration) -> Result:
        ...


class PostgresGateway(DataStoreGateway):
    def __init__(self, transport: Transport, settings: DumpSettings):
        self.transport = transport
        self.settings = settings

    def dump_file_path(self, table_configuration: TableConfiguration) -> Path:
        return dump_file_path(self.settings, table_configuration)

    def dump_to_local_file(self, table_configuration: TableConfiguration) -> Result:
        table = table_configuration.qualified_table_name
        path = self.dump_file_path(table_configuration)

        with log_operation(logger, "dump_to_local_file", table=table, path=str(path)):
            sql = extraction_sql(
                self.transport,
                table_configuration,
                self.settings.lorem_ipsum_function_schema,
            )
            results = self.transport.execute(sql)
            row_count = export_results_to_sql(
                results,
                table_configuration,
                path,
                lambda: table_columns(self.transport, table_configuration),
            )

            metrics = DumpMetrics(
                table=table,
                row_count=row_count,
                path=str(path),
                size_bytes=path.stat().st_size,
                sha256=sha256_file(path),
            )
            logger.info("Dump file written", extra=metrics.to_dict())

        return Success(path)

    def load_dump_file(self, table_configuration: TableConfiguration) -> Result:
        if self.settings.is_production:
            raise SafetyViolationError(
                "DO NOT LOAD OBFUSCATED DUMPS IN PRODUCTION!",
                details={"environment": self.settings.environment},
            )

        table = table_configuration.qualified_table_name
        path = self.dump_file_path(table_configuration)
        if not path.exists():
            missing = MissingDumpFile(path)
            logger.warning(missing.message, extra={"table": table})
            return Failure(missing)

        with log_operation(logger, "load_dump_file", table=table, path=str(path)):
            self.transport.execute(read_dump_file(path))
        return Success(True)

    def reset_sequence(self, table_configuration: TableConfiguration) -> Result:
        return reset_sequence(self.transport, table_configuration)

    def is_valid(self, table_configuration: TableConfiguration) -> Result:
        return TableConfigurationValidator(table_configuration, self.transport).validation_result()

    def wipe_table(self, table_configuration: TableConfiguration) -> Result:
        table = table_configuration.qualified_table_name
        with log_operation(logger, "wipe_table", table=table):
            self.transport.execute(f"DELETE FROM {table} CASCADE")
        return Success(True)
