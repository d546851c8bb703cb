"""Shared test fixtures for the sample data dump tool."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from sampledump.config import DumpSettings
from sampledump.exceptions import ErrorKind, TransportError
from sampledump.models import QueryResult, TableConfiguration


class FakeTransport:
    """Scripted transport: answers statements by exact SQL or by predicate.

    Every executed statement is recorded in ``executed``. Unmatched statements
    return an empty result.
    """

    def __init__(self):
        self.executed: list[str] = []
        self._responses: list[tuple[Callable[[str], bool], Any]] = []

    def on(self, match: str | Callable[[str], bool], response: Any) -> "FakeTransport":
        predicate = match if callable(match) else (lambda sql, text=match: sql == text)
        self._responses.append((predicate, response))
        return self

    def on_rows(self, match: str | Callable[[str], bool], rows: list[dict]) -> "FakeTransport":
        return self.on(match, QueryResult.from_rows(rows))

    def on_statement_error(self, match: str | Callable[[str], bool]) -> "FakeTransport":
        return self.on(match, TransportError("Statement rejected", kind=ErrorKind.STATEMENT))

    def on_connectivity_error(self, match: str | Callable[[str], bool]) -> "FakeTransport":
        return self.on(match, TransportError("Lost connection", kind=ErrorKind.CONNECTIVITY))

    @staticmethod
    def starts_with(prefix: str) -> Callable[[str], bool]:
        return lambda sql: sql.startswith(prefix)

    def execute(self, sql: str) -> QueryResult:
        self.executed.append(sql)
        for predicate, response in self._responses:
            if predicate(sql):
                if isinstance(response, Exception):
                    raise response
                return response
        return QueryResult()


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def sample_settings(tmp_path):
    """DumpSettings writing into tmp_path, never reading config.env."""
    return DumpSettings(
        dump_directory=tmp_path / "dumps",
        lorem_ipsum_function_schema="app_internals",
        environment="development",
        table_configurations_file=tmp_path / "sample_data_dump.json",
        _env_file=None,
    )


@pytest.fixture
def table_configuration():
    return TableConfiguration(
        schema_name="my_schema_name",
        table_name="my_table_name",
        dump_where="column_name = 123",
        obfuscate_columns=["contact_given_name"],
    )


@pytest.fixture
def columns_sql():
    """Catalog column lookup issued for table_configuration."""
    return (
        "SELECT column_name FROM information_schema.columns\n"
        "WHERE table_schema = 'my_schema_name'\n"
        "AND table_name = 'my_table_name'\n"
        "ORDER BY ordinal_position\n"
    )
