"""Bounded, masked sample dumps of PostgreSQL tables as replayable SQL scripts."""

from sampledump.config import DumpSettings, get_settings, load_table_configurations
from sampledump.exceptions import (
    ConfigurationError,
    ErrorKind,
    SafetyViolationError,
    SampleDumpError,
    TransportError,
)
from sampledump.gateway import DataStoreGateway, PostgresGateway
from sampledump.models import (
    Failure,
    MissingDumpFile,
    QueryResult,
    Success,
    TableConfiguration,
    ValidationFailure,
)
from sampledump.transport import PostgresTransport

__all__ = [
    "DumpSettings",
    "get_settings",
    "load_table_configurations",
    "ConfigurationError",
    "ErrorKind",
    "SafetyViolationError",
    "SampleDumpError",
    "TransportError",
    "DataStoreGateway",
    "PostgresGateway",
    "Failure",
    "MissingDumpFile",
    "QueryResult",
    "Success",
    "TableConfiguration",
    "ValidationFailure",
    "PostgresTransport",
]
